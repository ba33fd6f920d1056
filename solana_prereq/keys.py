"""Key material loading and encoding conversions.

Keypair files hold the JSON byte-array form written by ``solana-keygen``:
64 integers, the 32-byte secret seed followed by the 32-byte public key.
Wallet apps export the same 64 bytes as a single base-58 string.
"""

import json
import os
import re
from typing import List, Optional

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solana_prereq.constants import KEYPAIR_LENGTH, PUBKEY_LENGTH
from solana_prereq.logging_config import get_logger
from solana_prereq.utils.error_handling import DecodeError, KeyFileNotFoundError
from solana_prereq.utils.validation import validate_public_key

logger = get_logger(__name__)

BASE58_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]*$")


def encode_base58(data: bytes) -> str:
    """Encode raw bytes as a base-58 string."""
    return base58.b58encode(bytes(data)).decode("ascii")


def decode_base58(text: str, expected_length: Optional[int] = None) -> bytes:
    """Decode a base-58 string into raw bytes.

    Args:
        text: Base-58 string over the Bitcoin alphabet
        expected_length: If given, the exact number of bytes required

    Returns:
        Decoded bytes

    Raises:
        DecodeError: If the string has characters outside the alphabet or
            decodes to the wrong length
    """
    if not isinstance(text, str) or not BASE58_PATTERN.match(text):
        raise DecodeError("Input is not a valid base-58 string")

    decoded = base58.b58decode(text)

    if expected_length is not None and len(decoded) != expected_length:
        raise DecodeError(
            f"Expected {expected_length} bytes, decoded {len(decoded)}",
            details={"expected": expected_length, "actual": len(decoded)}
        )
    return decoded


def parse_byte_array(text: str, expected_length: int = KEYPAIR_LENGTH) -> bytes:
    """Parse the JSON byte-array form of a key (``[12, 34, ...]``).

    Raises:
        DecodeError: If the text is not a JSON list of byte values of the
            expected length
    """
    try:
        values = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Key material is not a JSON byte array: {e.msg}") from e

    if not isinstance(values, list) or not all(
        isinstance(v, int) and not isinstance(v, bool) for v in values
    ):
        raise DecodeError("Key material must be a list of integers")

    try:
        raw = bytes(values)
    except ValueError as e:
        raise DecodeError("Key material contains values outside 0..255") from e

    if len(raw) != expected_length:
        raise DecodeError(
            f"Expected {expected_length} bytes, found {len(raw)}",
            details={"expected": expected_length, "actual": len(raw)}
        )
    return raw


def keypair_from_bytes(raw: bytes) -> Keypair:
    """Build a keypair from its 64-byte form, raising DecodeError on bad input."""
    if len(raw) != KEYPAIR_LENGTH:
        raise DecodeError(
            f"Expected {KEYPAIR_LENGTH} bytes, found {len(raw)}",
            details={"expected": KEYPAIR_LENGTH, "actual": len(raw)}
        )
    try:
        return Keypair.from_bytes(raw)
    except ValueError as e:
        raise DecodeError(f"Invalid keypair bytes: {str(e)}") from e


def read_keypair_file(path: str) -> Keypair:
    """Read a keypair from a JSON byte-array file.

    Args:
        path: Path to the keypair file; ``~`` is expanded

    Returns:
        The loaded keypair

    Raises:
        KeyFileNotFoundError: If the file does not exist
        DecodeError: If the file contents are not a valid keypair
    """
    resolved = os.path.expanduser(path)
    try:
        with open(resolved, "r", encoding="utf-8") as f:
            contents = f.read()
    except FileNotFoundError as e:
        raise KeyFileNotFoundError(resolved) from e

    keypair = keypair_from_bytes(parse_byte_array(contents))
    logger.debug(f"Loaded keypair {keypair.pubkey()} from {resolved}")
    return keypair


def generate_keypair() -> Keypair:
    """Generate a fresh random keypair."""
    return Keypair()


def keypair_to_json(keypair: Keypair) -> str:
    """Render a keypair in the JSON byte-array form used by key files."""
    return json.dumps(list(bytes(keypair)))


def keypair_to_base58(keypair: Keypair) -> str:
    """Render a keypair as the base-58 private key wallets export."""
    return encode_base58(bytes(keypair))


def base58_to_wallet(private_key: str) -> List[int]:
    """Convert a base-58 private key into the wallet file byte array.

    Raises:
        DecodeError: If the key is not valid base-58 or not 64 bytes long
    """
    return list(decode_base58(private_key.strip(), expected_length=KEYPAIR_LENGTH))


def wallet_to_base58(wallet: str) -> str:
    """Convert a wallet file byte array (as text) into a base-58 private key.

    Raises:
        DecodeError: If the text is not a 64-entry JSON byte array
    """
    return encode_base58(parse_byte_array(wallet))


def parse_pubkey(address: str) -> Pubkey:
    """Parse a base-58 address into a public key.

    Raises:
        DecodeError: If the address is malformed
    """
    address = address.strip() if isinstance(address, str) else address
    if not validate_public_key(address):
        raise DecodeError(f"Invalid public key: {address}")
    return Pubkey(decode_base58(address, expected_length=PUBKEY_LENGTH))
