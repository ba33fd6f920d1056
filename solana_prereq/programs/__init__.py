"""Clients for on-chain programs."""

from solana_prereq.programs.prereq import PrereqProgram, PrereqArgs

__all__ = ["PrereqProgram", "PrereqArgs"]
