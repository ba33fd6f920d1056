"""Configuration module for the Solana prerequisite toolkit."""

# Standard library imports
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from solana_prereq.utils.error_handling import ConfigurationError

# Load environment variables from .env file
load_dotenv()

DEFAULT_RPC_URL = "https://api.devnet.solana.com"
DEFAULT_KEYPAIR_PATH = "~/.config/solana/id.json"
VALID_COMMITMENTS = ("processed", "confirmed", "finalized")
VALID_CLUSTERS = ("devnet", "testnet", "mainnet-beta", "custom")


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ConfigurationError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ConfigurationError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None:
        if required:
            raise ConfigurationError(f"Required environment variable '{key}' not found")
        return default

    if validator:
        try:
            return validator(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for environment variable '{key}': {str(e)}",
                details={"key": key}
            ) from e

    return value


def int_validator(value: str) -> int:
    """Validate and convert string to a positive integer.

    Args:
        value: String value to convert

    Returns:
        Integer value

    Raises:
        ValueError: If not a valid positive integer
    """
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")
    if number <= 0:
        raise ValueError(f"'{value}' must be greater than zero")
    return number


def url_validator(value: str) -> str:
    """Validate URL format.

    Args:
        value: URL to validate

    Returns:
        The validated URL

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level.

    Args:
        value: Commitment level to validate

    Returns:
        The validated commitment level

    Raises:
        ValueError: If not a valid commitment level
    """
    if value.lower() not in VALID_COMMITMENTS:
        raise ValueError(f"Commitment must be one of: {', '.join(VALID_COMMITMENTS)}")
    return value.lower()


def cluster_validator(value: str) -> str:
    """Validate the explorer cluster name."""
    if value.lower() not in VALID_CLUSTERS:
        raise ValueError(f"Cluster must be one of: {', '.join(VALID_CLUSTERS)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level.

    Args:
        value: Log level to validate

    Returns:
        The validated log level

    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


@dataclass
class SolanaConfig:
    """Configuration passed explicitly to every network operation."""

    rpc_url: str = DEFAULT_RPC_URL
    keypair_path: str = DEFAULT_KEYPAIR_PATH
    commitment: str = "confirmed"
    timeout: int = 30  # seconds
    cluster: str = "devnet"

    def __post_init__(self):
        """Validate configuration after initialization."""
        for name, validator in (
            ("rpc_url", url_validator),
            ("commitment", commitment_validator),
            ("cluster", cluster_validator),
        ):
            try:
                setattr(self, name, validator(getattr(self, name)))
            except ValueError as e:
                raise ConfigurationError(str(e), details={"field": name}) from e

        if self.timeout <= 0:
            raise ConfigurationError(
                f"Invalid timeout: {self.timeout}", details={"field": "timeout"}
            )


@lru_cache()
def get_solana_config() -> SolanaConfig:
    """Get Solana configuration from environment variables.

    Uses cached values for efficiency.

    Returns:
        SolanaConfig instance

    Raises:
        ConfigurationError: If environment variables fail validation
    """
    return SolanaConfig(
        rpc_url=get_env_var("SOLANA_RPC_URL", DEFAULT_RPC_URL,
                            validator=url_validator),
        keypair_path=get_env_var("SOLANA_KEYPAIR_PATH", DEFAULT_KEYPAIR_PATH),
        commitment=get_env_var("SOLANA_COMMITMENT", "confirmed",
                               validator=commitment_validator),
        timeout=get_env_var("SOLANA_TIMEOUT", 30, validator=int_validator),
        cluster=get_env_var("SOLANA_CLUSTER", "devnet", validator=cluster_validator)
    )


def get_prereq_program_id() -> Optional[str]:
    """Program id of the enrolment program, if configured."""
    return get_env_var("PREREQ_PROGRAM_ID")


def get_log_level() -> str:
    """Log level from the environment."""
    return get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator)
