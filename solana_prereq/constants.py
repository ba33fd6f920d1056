"""Constants used throughout the toolkit.

This module defines common constants to avoid duplication and ensure consistency.
"""

# Native asset
LAMPORTS_PER_SOL = 1_000_000_000
DEFAULT_AIRDROP_LAMPORTS = 2 * LAMPORTS_PER_SOL

# Key material
KEYPAIR_LENGTH = 64
PUBKEY_LENGTH = 32

# Program-derived addresses
MAX_SEEDS = 16
MAX_SEED_LENGTH = 32

# Anchor instruction discriminators are the first 8 bytes of sha256("global:<name>")
ANCHOR_DISCRIMINATOR_LENGTH = 8
ANCHOR_GLOBAL_NAMESPACE = "global"

# Seed prefix of the enrolment program's per-signer account
PREREQ_SEED = b"prereq"

EXPLORER_TX_URL = "https://explorer.solana.com/tx/{signature}"
