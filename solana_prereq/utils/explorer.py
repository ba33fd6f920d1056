"""Explorer link helpers."""

from solana_prereq.constants import EXPLORER_TX_URL
from solana_prereq.utils.error_handling import ValidationError
from solana_prereq.utils.validation import validate_transaction_signature


def explorer_url(signature: str, cluster: str = "devnet") -> str:
    """Build a Solana explorer link for a transaction signature.

    Args:
        signature: Base-58 transaction signature
        cluster: Cluster name; ``mainnet-beta`` omits the query parameter

    Returns:
        Explorer URL

    Raises:
        ValidationError: If the signature is not base-58 of signature length
    """
    if not validate_transaction_signature(signature):
        raise ValidationError(f"Invalid transaction signature: {signature}")

    url = EXPLORER_TX_URL.format(signature=signature)
    if cluster and cluster != "mainnet-beta":
        url += f"?cluster={cluster}"
    return url
