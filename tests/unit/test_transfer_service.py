"""Unit tests for TransferService.

This module tests transfer assembly against a mocked gateway.
"""

import pytest

from solana_prereq.transfer import (
    ENTIRE_BALANCE,
    TransferResult,
    TransferService,
    compute_drain_amount,
)
from solana_prereq.utils.error_handling import (
    FeeEstimationError,
    InsufficientFundsError,
    NetworkError,
    SubmissionError,
    ValidationError,
)
from tests.fixtures.common import LAST_VALID_BLOCK_HEIGHT

SYSTEM_TRANSFER_TAG = 2


def decode_transfer(data: bytes):
    """Split System Program transfer data into (tag, lamports)."""
    return int.from_bytes(data[:4], "little"), int.from_bytes(data[4:12], "little")


@pytest.mark.asyncio
async def test_drain_transfers_balance_minus_fee(
    mock_gateway, sender_keypair, recipient_pubkey, blockhash_h1
):
    """Balance 1 SOL and fee 5000 leaves exactly 999_995_000 to send."""
    service = TransferService(mock_gateway)

    prepared = await service.build_transfer(sender_keypair, recipient_pubkey, ENTIRE_BALANCE)

    assert prepared.amount == 999_995_000
    assert prepared.fee == 5000
    assert prepared.last_valid_block_height == LAST_VALID_BLOCK_HEIGHT

    message = prepared.transaction.message
    assert message.recent_blockhash == blockhash_h1
    assert message.account_keys[0] == sender_keypair.pubkey()
    assert recipient_pubkey in message.account_keys

    tag, lamports = decode_transfer(bytes(message.instructions[0].data))
    assert tag == SYSTEM_TRANSFER_TAG
    assert lamports == 999_995_000

    signature = prepared.transaction.signatures[0]
    assert signature.verify(sender_keypair.pubkey(), bytes(message))


@pytest.mark.asyncio
async def test_fee_is_quoted_for_full_balance_message(
    mock_gateway, sender_keypair, recipient_pubkey, blockhash_h1
):
    """The fee estimate is requested for a transfer of the whole balance."""
    service = TransferService(mock_gateway)

    await service.build_transfer(sender_keypair, recipient_pubkey)

    mock_gateway.get_balance.assert_called_once_with(sender_keypair.pubkey())
    quoted = mock_gateway.get_fee_for_message.call_args.args[0]
    assert quoted.recent_blockhash == blockhash_h1
    _, lamports = decode_transfer(bytes(quoted.instructions[0].data))
    assert lamports == 1_000_000_000


@pytest.mark.asyncio
async def test_drain_with_fee_above_balance_fails(mock_gateway, sender_keypair, recipient_pubkey):
    """Balance 4000 and fee 5000 builds nothing and submits nothing."""
    mock_gateway.get_balance.return_value = 4000
    service = TransferService(mock_gateway)

    with pytest.raises(InsufficientFundsError) as exc_info:
        await service.transfer(sender_keypair, recipient_pubkey, ENTIRE_BALANCE)

    assert exc_info.value.balance == 4000
    assert exc_info.value.fee == 5000
    assert not mock_gateway.send_and_confirm_transaction.called


@pytest.mark.asyncio
async def test_drain_with_fee_equal_to_balance_fails(mock_gateway, sender_keypair, recipient_pubkey):
    """A transfer of zero lamports is never built."""
    mock_gateway.get_balance.return_value = 5000
    service = TransferService(mock_gateway)

    with pytest.raises(InsufficientFundsError):
        await service.build_transfer(sender_keypair, recipient_pubkey)


@pytest.mark.asyncio
async def test_fixed_amount_skips_balance_and_fee(mock_gateway, sender_keypair, recipient_pubkey):
    """A fixed transfer only needs a blockhash."""
    service = TransferService(mock_gateway)

    prepared = await service.build_transfer(sender_keypair, recipient_pubkey, 1_000_000)

    assert prepared.amount == 1_000_000
    assert prepared.fee is None
    assert not mock_gateway.get_balance.called
    assert not mock_gateway.get_fee_for_message.called
    _, lamports = decode_transfer(bytes(prepared.transaction.message.instructions[0].data))
    assert lamports == 1_000_000


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5, 1.5, True, "100"])
async def test_invalid_fixed_amount_rejected_before_network(
    mock_gateway, sender_keypair, recipient_pubkey, amount
):
    """Bad amounts fail without touching the gateway."""
    service = TransferService(mock_gateway)

    with pytest.raises(ValidationError):
        await service.build_transfer(sender_keypair, recipient_pubkey, amount)

    assert not mock_gateway.get_latest_blockhash.called


@pytest.mark.asyncio
async def test_transfer_submits_and_returns_result(
    mock_gateway, sender_keypair, recipient_pubkey, confirmed_signature
):
    """A successful transfer reports the signature and resolved amount."""
    service = TransferService(mock_gateway)

    result = await service.transfer(sender_keypair, recipient_pubkey)

    assert result == TransferResult(
        signature=confirmed_signature,
        recipient=str(recipient_pubkey),
        amount=999_995_000,
        fee=5000,
    )
    call = mock_gateway.send_and_confirm_transaction.call_args
    assert call.kwargs["last_valid_block_height"] == LAST_VALID_BLOCK_HEIGHT


@pytest.mark.asyncio
async def test_network_error_on_blockhash_propagates(mock_gateway, sender_keypair, recipient_pubkey):
    """No fallback blockhash source is tried."""
    mock_gateway.get_latest_blockhash.side_effect = NetworkError("gateway unreachable")
    service = TransferService(mock_gateway)

    with pytest.raises(NetworkError):
        await service.transfer(sender_keypair, recipient_pubkey)

    assert not mock_gateway.get_balance.called


@pytest.mark.asyncio
async def test_fee_estimation_error_propagates(mock_gateway, sender_keypair, recipient_pubkey):
    """A rejected fee quote stops the flow."""
    mock_gateway.get_fee_for_message.side_effect = FeeEstimationError("rejected")
    service = TransferService(mock_gateway)

    with pytest.raises(FeeEstimationError):
        await service.transfer(sender_keypair, recipient_pubkey)

    assert not mock_gateway.send_and_confirm_transaction.called


@pytest.mark.asyncio
async def test_retriable_submission_error_propagates(mock_gateway, sender_keypair, recipient_pubkey):
    """Expired blockhashes surface to the caller, flagged as retriable."""
    mock_gateway.send_and_confirm_transaction.side_effect = SubmissionError(
        "Blockhash not found", retriable=True
    )
    service = TransferService(mock_gateway)

    with pytest.raises(SubmissionError) as exc_info:
        await service.transfer(sender_keypair, recipient_pubkey, 1000)

    assert exc_info.value.retriable


def test_compute_drain_amount():
    """The drain amount is the balance net of the fee."""
    assert compute_drain_amount(1_000_000_000, 5000) == 999_995_000
    assert compute_drain_amount(5001, 5000) == 1
    with pytest.raises(InsufficientFundsError):
        compute_drain_amount(5000, 5000)
