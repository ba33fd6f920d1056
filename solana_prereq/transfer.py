"""Transaction assembly for lamport transfers.

Builds System Program transfers, either for a fixed amount or for an
account's entire balance net of the network fee. Draining an account needs
the fee before signing, so the fee is quoted for an unsigned message that
transfers the whole balance and then subtracted from it.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from solana_prereq.logging_config import get_logger, log_with_context
from solana_prereq.rpc_gateway import RpcGateway
from solana_prereq.utils.error_handling import InsufficientFundsError, ValidationError

logger = get_logger(__name__)


class _EntireBalance:
    """Sentinel type requesting a transfer of everything but the fee."""

    def __repr__(self) -> str:
        return "ENTIRE_BALANCE"


ENTIRE_BALANCE = _EntireBalance()

Amount = Union[int, _EntireBalance]


@dataclass(frozen=True)
class PreparedTransfer:
    """A signed transfer that has not been submitted yet."""

    transaction: Transaction
    amount: int
    fee: Optional[int]
    last_valid_block_height: int


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a confirmed transfer."""

    signature: str
    recipient: str
    amount: int
    fee: Optional[int] = None


def compute_drain_amount(balance: int, fee: int) -> int:
    """Amount left to send once the fee is paid out of the balance.

    Raises:
        InsufficientFundsError: If the fee consumes the whole balance
    """
    if fee >= balance:
        raise InsufficientFundsError(balance, fee)
    return balance - fee


def transfer_instruction(sender: Pubkey, recipient: Pubkey, lamports: int) -> Instruction:
    """System Program instruction moving ``lamports`` from sender to recipient."""
    return transfer(TransferParams(from_pubkey=sender, to_pubkey=recipient, lamports=lamports))


class TransferService:
    """Builds, signs and submits lamport transfers through an RPC gateway."""

    def __init__(self, gateway: RpcGateway):
        """Initialize the transfer service.

        Args:
            gateway: Gateway used for blockhashes, balances, fees and submission
        """
        self.gateway = gateway

    async def quote_drain(self, sender: Pubkey, recipient: Pubkey, blockhash: Hash) -> Tuple[int, int]:
        """Fetch the balance and the fee for transferring all of it.

        Returns:
            Tuple of (balance, fee)
        """
        balance = await self.gateway.get_balance(sender)
        message = Message.new_with_blockhash(
            [transfer_instruction(sender, recipient, balance)],
            sender,
            blockhash,
        )
        fee = await self.gateway.get_fee_for_message(message)
        log_with_context(logger, "debug", "Quoted drain transfer",
                         sender=str(sender), balance=balance, fee=fee)
        return balance, fee

    async def build_transfer(
        self,
        sender: Keypair,
        recipient: Pubkey,
        amount: Amount = ENTIRE_BALANCE,
    ) -> PreparedTransfer:
        """Assemble and sign a transfer without submitting it.

        Args:
            sender: Keypair paying both the transfer and the fee
            recipient: Receiving address
            amount: Lamports to send, or ``ENTIRE_BALANCE`` to drain the sender

        Returns:
            The signed transaction with its resolved amount

        Raises:
            ValidationError: If a fixed amount is not a positive integer
            NetworkError: If the gateway cannot be reached
            FeeEstimationError: If the drain message cannot be priced
            InsufficientFundsError: If the balance does not cover the fee
        """
        if amount is not ENTIRE_BALANCE and (
            not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0
        ):
            raise ValidationError(f"Transfer amount must be a positive integer, got {amount!r}")

        sender_pubkey = sender.pubkey()
        latest = await self.gateway.get_latest_blockhash()

        fee = None
        if amount is ENTIRE_BALANCE:
            balance, fee = await self.quote_drain(sender_pubkey, recipient, latest.blockhash)
            lamports = compute_drain_amount(balance, fee)
        else:
            lamports = amount

        transaction = Transaction.new_signed_with_payer(
            [transfer_instruction(sender_pubkey, recipient, lamports)],
            sender_pubkey,
            [sender],
            latest.blockhash,
        )
        return PreparedTransfer(transaction, lamports, fee, latest.last_valid_block_height)

    async def transfer(
        self,
        sender: Keypair,
        recipient: Pubkey,
        amount: Amount = ENTIRE_BALANCE,
    ) -> TransferResult:
        """Assemble, sign and submit a transfer, waiting for confirmation.

        A ``SubmissionError`` with ``retriable`` set means the blockhash aged
        out; calling this method again starts over with a fresh one.

        Returns:
            The confirmed transfer
        """
        prepared = await self.build_transfer(sender, recipient, amount)
        log_with_context(logger, "info", "Submitting transfer",
                         sender=str(sender.pubkey()), recipient=str(recipient),
                         lamports=prepared.amount, fee=prepared.fee)

        signature = await self.gateway.send_and_confirm_transaction(
            prepared.transaction,
            last_valid_block_height=prepared.last_valid_block_height,
        )
        return TransferResult(
            signature=signature,
            recipient=str(recipient),
            amount=prepared.amount,
            fee=prepared.fee,
        )
