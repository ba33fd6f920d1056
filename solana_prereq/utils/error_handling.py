"""
Error handling utilities for the Solana prerequisite toolkit.

This module provides standardized error handling mechanisms including:
- Custom exception classes
- A decorator that maps SDK and transport failures onto those classes
"""

import functools
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, cast

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException, RPCNoResultException

# Get logger
logger = logging.getLogger(__name__)

AsyncF = TypeVar('AsyncF', bound=Callable[..., Awaitable[Any]])


class ErrorCode(Enum):
    """Error codes for the Solana prerequisite toolkit."""
    # General errors
    UNKNOWN_ERROR = 1000
    CONFIGURATION_ERROR = 1001
    VALIDATION_ERROR = 1002

    # Key material errors
    KEY_FILE_NOT_FOUND = 2000
    DECODE_ERROR = 2001

    # Network errors
    NETWORK_ERROR = 3000

    # Transaction errors
    FEE_ESTIMATION_ERROR = 4000
    INSUFFICIENT_FUNDS = 4001
    SUBMISSION_ERROR = 4002

    # Address derivation errors
    NO_VALID_BUMP = 5000


# Base exception class
class SolanaPrereqError(Exception):
    """Base exception class for all toolkit errors."""

    retriable: bool = False

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize a new SolanaPrereqError.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        # Format the error message
        formatted_message = f"[{error_code.name}] {message}"
        if details:
            formatted_message += f" - Details: {details}"

        super().__init__(formatted_message)


class ConfigurationError(SolanaPrereqError):
    """Error raised for invalid configuration values."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(SolanaPrereqError):
    """Error raised when an argument fails validation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class KeyFileNotFoundError(SolanaPrereqError):
    """Error raised when a keypair file does not exist."""

    def __init__(self, path: str):
        """
        Initialize the key file error.

        Args:
            path: The path that was looked up
        """
        self.path = path
        super().__init__(
            f"Couldn't find wallet file: {path}",
            ErrorCode.KEY_FILE_NOT_FOUND,
            {"path": path}
        )


class DecodeError(SolanaPrereqError):
    """Error raised for malformed key material or base-58 input."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DECODE_ERROR, details)


class NetworkError(SolanaPrereqError):
    """Error related to network communication with the RPC gateway."""

    retriable = True

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the network error.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message, ErrorCode.NETWORK_ERROR, details)


class FeeEstimationError(SolanaPrereqError):
    """Error raised when the gateway cannot price a message."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.FEE_ESTIMATION_ERROR, details)


class InsufficientFundsError(SolanaPrereqError):
    """Error raised when a balance does not cover the transaction fee."""

    def __init__(self, balance: int, fee: int):
        """
        Initialize the insufficient funds error.

        Args:
            balance: Account balance in lamports
            fee: Estimated fee in lamports
        """
        self.balance = balance
        self.fee = fee
        super().__init__(
            f"Balance of {balance} lamports does not cover fee of {fee} lamports",
            ErrorCode.INSUFFICIENT_FUNDS,
            {"balance": balance, "fee": fee}
        )


class SubmissionError(SolanaPrereqError):
    """Error raised when a transaction is rejected or expires.

    ``retriable`` is True only when the referenced blockhash aged out, in
    which case the whole flow can be restarted with a fresh blockhash.
    """

    def __init__(
        self,
        message: str,
        retriable: bool = False,
        details: Optional[Dict[str, Any]] = None
    ):
        self.retriable = retriable
        super().__init__(message, ErrorCode.SUBMISSION_ERROR, details)


class NoValidBumpError(SolanaPrereqError):
    """Error raised when no bump seed yields an off-curve address."""

    def __init__(self, program_id: str):
        super().__init__(
            "Unable to find a viable program address bump seed",
            ErrorCode.NO_VALID_BUMP,
            {"program_id": program_id}
        )


def map_network_errors(operation: str) -> Callable[[AsyncF], AsyncF]:
    """Decorator that turns transport failures and RPC error responses into NetworkError.

    Toolkit errors raised inside the wrapped coroutine pass through untouched.

    Args:
        operation: Name of the gateway operation, used in the message

    Returns:
        Decorated coroutine function
    """
    def decorator(func: AsyncF) -> AsyncF:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except SolanaPrereqError:
                raise
            except (SolanaRpcException, RPCException, RPCNoResultException, httpx.HTTPError) as e:
                logger.error(f"Network failure during {operation}: {str(e)}")
                raise NetworkError(
                    f"Failed to {operation}: {str(e)}",
                    details={"operation": operation}
                ) from e
        return cast(AsyncF, wrapper)
    return decorator
