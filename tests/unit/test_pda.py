"""Tests for program-derived address lookup."""

from unittest.mock import patch

import pytest
from solders.pubkey import Pubkey

from solana_prereq.pda import find_program_address
from solana_prereq.utils.error_handling import NoValidBumpError, ValidationError

PROGRAM_ID = Pubkey.from_string("BPFLoaderUpgradeab1e11111111111111111111111")


def test_matches_sdk_derivation(sender_keypair):
    seeds = [b"prereq", bytes(sender_keypair.pubkey())]

    assert find_program_address(seeds, PROGRAM_ID) == Pubkey.find_program_address(seeds, PROGRAM_ID)


def test_is_deterministic(sender_keypair):
    """Identical inputs always give identical outputs."""
    seeds = [b"vault", bytes(sender_keypair.pubkey())]

    results = {find_program_address(seeds, PROGRAM_ID) for _ in range(5)}

    assert len(results) == 1


def test_derived_address_is_off_curve():
    address, bump = find_program_address([b"metadata"], PROGRAM_ID)

    assert not address.is_on_curve()
    assert 0 <= bump <= 255


def test_different_seeds_give_different_addresses():
    first, _ = find_program_address([b"a"], PROGRAM_ID)
    second, _ = find_program_address([b"b"], PROGRAM_ID)

    assert first != second


def test_rejects_long_seed():
    with pytest.raises(ValidationError):
        find_program_address([b"x" * 33], PROGRAM_ID)


def test_rejects_too_many_seeds():
    with pytest.raises(ValidationError):
        find_program_address([b"s"] * 16, PROGRAM_ID)


def test_no_valid_bump():
    """Every candidate landing on the curve exhausts the bump search."""
    with patch("solana_prereq.pda.Pubkey") as pubkey:
        pubkey.create_program_address.side_effect = Exception("Invalid seeds")
        with pytest.raises(NoValidBumpError):
            find_program_address([b"prereq"], PROGRAM_ID)

    assert pubkey.create_program_address.call_count == 256
    last_seeds, program_id = pubkey.create_program_address.call_args.args
    assert last_seeds == [b"prereq", bytes([0])]
    assert program_id == PROGRAM_ID


def test_skips_rejected_bumps():
    """The first bump the SDK accepts is returned."""
    seeds = [b"prereq"]
    accepted, _ = Pubkey.find_program_address(seeds, PROGRAM_ID)

    with patch("solana_prereq.pda.Pubkey") as pubkey:
        pubkey.create_program_address.side_effect = [
            Exception("Invalid seeds"), Exception("Invalid seeds"), accepted
        ]
        assert find_program_address(seeds, PROGRAM_ID) == (accepted, 253)
