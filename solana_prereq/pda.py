"""Program-derived address lookup.

A program-derived address is only valid when it is *not* a point on the
ed25519 curve, so no private key can exist for it. Bumps are tried from 255
downwards and the first candidate ``Pubkey.create_program_address`` accepts
wins.
"""

from typing import Sequence, Tuple

from solders.pubkey import Pubkey

from solana_prereq.constants import MAX_SEED_LENGTH, MAX_SEEDS
from solana_prereq.logging_config import get_logger
from solana_prereq.utils.error_handling import NoValidBumpError, ValidationError

logger = get_logger(__name__)


def _validate_seeds(seeds: Sequence[bytes]) -> None:
    # The bump occupies one of the seed slots
    if len(seeds) >= MAX_SEEDS:
        raise ValidationError(
            f"At most {MAX_SEEDS - 1} seeds are allowed, got {len(seeds)}"
        )
    for index, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LENGTH:
            raise ValidationError(
                f"Seed {index} is {len(seed)} bytes, max is {MAX_SEED_LENGTH}",
                details={"seed_index": index}
            )


def find_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Tuple[Pubkey, int]:
    """Find the canonical program-derived address for the given seeds.

    Args:
        seeds: Byte-string seeds, without the bump
        program_id: Program that owns the derived address

    Returns:
        Tuple of the derived address and its bump seed

    Raises:
        ValidationError: If there are too many seeds or a seed is too long
        NoValidBumpError: If every bump produces an on-curve point
    """
    seeds = [bytes(seed) for seed in seeds]
    _validate_seeds(seeds)

    for bump in range(255, -1, -1):
        try:
            candidate = Pubkey.create_program_address([*seeds, bytes([bump])], program_id)
        except Exception:
            # solders raises an unexported PubkeyError for on-curve candidates
            continue
        logger.debug(f"Derived {candidate} with bump {bump} for program {program_id}")
        return candidate, bump

    raise NoValidBumpError(str(program_id))
