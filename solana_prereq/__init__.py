"""Solana prerequisite toolkit.

This package wraps the Solana Python SDK for test-network chores:
keypair generation, airdrops, lamport transfers (including a fee-aware
transfer of an entire balance), key encoding conversions, program-derived
address lookups and the enrolment program's instructions.
"""

import logging

__version__ = "0.1.0"
__author__ = "Solana Prereq Contributors"
__email__ = "dev@solana-prereq.invalid"

logger = logging.getLogger(__name__)
