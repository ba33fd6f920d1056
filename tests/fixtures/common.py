"""Common test fixtures for the toolkit tests.

This module provides fixtures that can be reused across different test modules.
"""

import hashlib
from unittest.mock import AsyncMock, MagicMock

import pytest
from solana.rpc.async_api import AsyncClient
from solders.hash import Hash
from solders.keypair import Keypair

from solana_prereq.config import SolanaConfig
from solana_prereq.keys import keypair_to_json
from solana_prereq.rpc_gateway import BlockhashInfo, RpcGateway

LAST_VALID_BLOCK_HEIGHT = 250_000


@pytest.fixture
def sender_keypair():
    """Deterministic sender keypair."""
    return Keypair.from_seed(bytes(range(32)))


@pytest.fixture
def recipient_pubkey():
    """Recipient address."""
    return Keypair.from_seed(bytes(range(32, 64))).pubkey()


@pytest.fixture
def blockhash_h1():
    """The blockhash labelled "H1" in the scenarios."""
    return Hash(hashlib.sha256(b"H1").digest())


@pytest.fixture
def latest_blockhash(blockhash_h1):
    """Gateway response for the latest blockhash."""
    return BlockhashInfo(blockhash_h1, LAST_VALID_BLOCK_HEIGHT)


@pytest.fixture
def confirmed_signature(sender_keypair):
    """A well-formed base-58 transaction signature."""
    return str(sender_keypair.sign_message(b"confirmed"))


@pytest.fixture
def mock_gateway(latest_blockhash, confirmed_signature):
    """Create a mock RPC gateway."""
    gateway = AsyncMock(spec=RpcGateway)

    # Common mock responses
    gateway.get_latest_blockhash.return_value = latest_blockhash
    gateway.get_balance.return_value = 1_000_000_000  # 1 SOL in lamports
    gateway.get_fee_for_message.return_value = 5000
    gateway.send_and_confirm_transaction.return_value = confirmed_signature
    gateway.request_airdrop.return_value = confirmed_signature
    gateway.__aenter__.return_value = gateway

    return gateway


@pytest.fixture
def mock_async_client():
    """Create a mock solana-py async client."""
    client = AsyncMock(spec=AsyncClient)
    client.get_balance.return_value = MagicMock(value=1_000_000_000)
    client.get_fee_for_message.return_value = MagicMock(value=5000)
    return client


@pytest.fixture
def solana_config():
    """Explicit configuration pointing at a local validator."""
    return SolanaConfig(
        rpc_url="http://localhost:8899",
        keypair_path="~/.config/solana/id.json",
        commitment="confirmed",
        timeout=5,
        cluster="devnet",
    )


@pytest.fixture
def keypair_file(tmp_path, sender_keypair):
    """Write the sender keypair to a temporary JSON byte-array file."""
    path = tmp_path / "wallet.json"
    path.write_text(keypair_to_json(sender_keypair), encoding="utf-8")
    return path
