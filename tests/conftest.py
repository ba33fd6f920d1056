"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    sender_keypair,
    recipient_pubkey,
    blockhash_h1,
    latest_blockhash,
    confirmed_signature,
    mock_gateway,
    mock_async_client,
    solana_config,
    keypair_file,
)
