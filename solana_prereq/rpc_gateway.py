"""
Solana RPC gateway for the prerequisite toolkit.

Thin wrapper over ``solana.rpc.async_api.AsyncClient`` exposing the five
calls the toolkit needs and translating SDK failures into toolkit errors.
Nothing is cached: blockhashes and balances go stale within seconds.
"""
from dataclasses import dataclass
from typing import Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import (
    RPCException,
    RPCNoResultException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solders.hash import Hash
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solana_prereq.config import SolanaConfig, get_solana_config
from solana_prereq.logging_config import get_logger, log_with_context, sanitize_url
from solana_prereq.utils.error_handling import (
    FeeEstimationError,
    SubmissionError,
    ValidationError,
    map_network_errors,
)

# Setup logger
logger = get_logger(__name__)

BLOCKHASH_NOT_FOUND = "blockhash not found"


@dataclass(frozen=True)
class BlockhashInfo:
    """A recent blockhash and the last block height at which it is valid."""

    blockhash: Hash
    last_valid_block_height: int


def _is_blockhash_expiry(error: Exception) -> bool:
    return BLOCKHASH_NOT_FOUND in str(error).lower()


class RpcGateway:
    """Client for the remote ledger's JSON-RPC interface."""

    def __init__(self, config: Optional[SolanaConfig] = None, client: Optional[AsyncClient] = None):
        """Initialize the gateway.

        Args:
            config: Solana configuration. Defaults to environment-based config.
            client: Pre-built async client, mainly for tests.
        """
        self.config = config or get_solana_config()
        self.commitment = Commitment(self.config.commitment)
        self.client = client or AsyncClient(
            self.config.rpc_url,
            commitment=self.commitment,
            timeout=self.config.timeout,
        )
        logger.info(f"Initializing RPC gateway with endpoint: {sanitize_url(self.config.rpc_url)}")

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit with cleanup"""
        await self.close()

    async def close(self):
        """Close the client and release resources"""
        await self.client.close()
        logger.debug("Closed RPC gateway")

    @map_network_errors("fetch latest blockhash")
    async def get_latest_blockhash(self) -> BlockhashInfo:
        """Fetch a recent blockhash to sign against."""
        response = await self.client.get_latest_blockhash(self.commitment)
        value = response.value
        return BlockhashInfo(value.blockhash, value.last_valid_block_height)

    @map_network_errors("fetch balance")
    async def get_balance(self, pubkey: Pubkey) -> int:
        """Get the balance of an account in lamports."""
        response = await self.client.get_balance(pubkey, self.commitment)
        return response.value

    @map_network_errors("estimate fee")
    async def get_fee_for_message(self, message: Message) -> int:
        """Ask the network what it would charge for an unsigned message.

        Raises:
            FeeEstimationError: If the gateway rejects the message or cannot
                price it
        """
        try:
            response = await self.client.get_fee_for_message(message, self.commitment)
        except RPCException as e:
            raise FeeEstimationError(f"Fee estimation rejected: {str(e)}") from e

        if response.value is None:
            raise FeeEstimationError(
                "Gateway returned no fee; the message blockhash may have expired"
            )
        return response.value

    @map_network_errors("submit transaction")
    async def send_and_confirm_transaction(
        self,
        transaction: Transaction,
        last_valid_block_height: Optional[int] = None,
    ) -> str:
        """Submit a signed transaction and wait for confirmation.

        Args:
            transaction: Fully signed transaction
            last_valid_block_height: Height after which the blockhash expires;
                lets confirmation stop early instead of timing out

        Returns:
            The transaction signature

        Raises:
            SubmissionError: If the transaction is rejected, fails on chain
                or its blockhash expires (the latter is retriable)
        """
        try:
            response = await self.client.send_transaction(transaction)
        except (RPCException, RPCNoResultException) as e:
            retriable = _is_blockhash_expiry(e)
            log_with_context(logger, "warning", "Transaction rejected",
                             retriable=retriable, error=str(e))
            raise SubmissionError(
                f"Transaction rejected: {str(e)}", retriable=retriable
            ) from e

        signature = response.value

        try:
            confirmation = await self.client.confirm_transaction(
                signature,
                self.commitment,
                last_valid_block_height=last_valid_block_height,
            )
        except TransactionExpiredBlockheightExceededError as e:
            raise SubmissionError(
                f"Transaction {signature} expired before confirmation",
                retriable=True,
                details={"signature": str(signature)}
            ) from e
        except UnconfirmedTxError as e:
            # May still land; the caller has to re-query the ledger
            raise SubmissionError(
                f"Transaction {signature} was not confirmed: {str(e)}",
                details={"signature": str(signature)}
            ) from e

        statuses = confirmation.value
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise SubmissionError(
                f"Transaction {signature} failed: {status.err}",
                details={"signature": str(signature)}
            )

        log_with_context(logger, "info", "Transaction confirmed",
                         signature=str(signature), commitment=self.config.commitment)
        return str(signature)

    @map_network_errors("request airdrop")
    async def request_airdrop(self, pubkey: Pubkey, lamports: int) -> str:
        """Request test-network funds for an account.

        Raises:
            ValidationError: If lamports is not positive
            SubmissionError: If the faucet refuses the request
        """
        if lamports <= 0:
            raise ValidationError(f"Airdrop amount must be positive, got {lamports}")

        try:
            response = await self.client.request_airdrop(pubkey, lamports, self.commitment)
        except (RPCException, RPCNoResultException) as e:
            raise SubmissionError(f"Airdrop rejected: {str(e)}") from e

        log_with_context(logger, "info", "Airdrop requested",
                         pubkey=str(pubkey), lamports=lamports)
        return str(response.value)
