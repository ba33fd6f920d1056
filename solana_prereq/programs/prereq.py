"""Client for the prerequisite enrolment program.

The program is an Anchor program with two instructions, ``complete`` and
``update``, each taking the enrolee's GitHub handle. Both write to a
per-signer account derived from ``[b"prereq", signer]``.
"""

import hashlib
from dataclasses import dataclass
from typing import Tuple, Union

from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import Transaction

from solana_prereq.constants import (
    ANCHOR_DISCRIMINATOR_LENGTH,
    ANCHOR_GLOBAL_NAMESPACE,
    PREREQ_SEED,
)
from solana_prereq.keys import parse_pubkey
from solana_prereq.logging_config import get_logger, log_with_context
from solana_prereq.pda import find_program_address
from solana_prereq.rpc_gateway import RpcGateway
from solana_prereq.utils.error_handling import ValidationError

logger = get_logger(__name__)


def anchor_discriminator(name: str) -> bytes:
    """First 8 bytes of ``sha256("global:<name>")``, Anchor's instruction tag."""
    preimage = f"{ANCHOR_GLOBAL_NAMESPACE}:{name}".encode("utf-8")
    return hashlib.sha256(preimage).digest()[:ANCHOR_DISCRIMINATOR_LENGTH]


@dataclass(frozen=True)
class PrereqArgs:
    """Arguments shared by ``complete`` and ``update``."""

    github: bytes

    def __post_init__(self):
        if not isinstance(self.github, bytes) or not self.github:
            raise ValidationError("GitHub handle must be a non-empty byte string")

    def serialize(self) -> bytes:
        """Borsh ``Vec<u8>``: u32 little-endian length followed by the bytes."""
        return len(self.github).to_bytes(4, "little") + self.github


class PrereqProgram:
    """Instruction builder and submitter for the enrolment program."""

    COMPLETE = "complete"
    UPDATE = "update"

    def __init__(self, program_id: Union[str, Pubkey]):
        """Initialize the program client.

        Args:
            program_id: Address of the deployed program
        """
        if isinstance(program_id, str):
            program_id = parse_pubkey(program_id)
        self.program_id = program_id

    def derive_prereq_address(self, signer: Pubkey) -> Tuple[Pubkey, int]:
        """Derive the signer's enrolment account and its bump."""
        return find_program_address([PREREQ_SEED, bytes(signer)], self.program_id)

    def _instruction(self, name: str, signer: Pubkey, args: PrereqArgs) -> Instruction:
        prereq, _ = self.derive_prereq_address(signer)
        accounts = [
            AccountMeta(pubkey=signer, is_signer=True, is_writable=True),
            AccountMeta(pubkey=prereq, is_signer=False, is_writable=True),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ]
        data = anchor_discriminator(name) + args.serialize()
        return Instruction(self.program_id, data, accounts)

    def complete_instruction(self, signer: Pubkey, args: PrereqArgs) -> Instruction:
        """Build the ``complete`` instruction for a signer."""
        return self._instruction(self.COMPLETE, signer, args)

    def update_instruction(self, signer: Pubkey, args: PrereqArgs) -> Instruction:
        """Build the ``update`` instruction for a signer."""
        return self._instruction(self.UPDATE, signer, args)

    async def _submit(self, gateway: RpcGateway, instruction: Instruction, signer: Keypair) -> str:
        latest = await gateway.get_latest_blockhash()
        transaction = Transaction.new_signed_with_payer(
            [instruction],
            signer.pubkey(),
            [signer],
            latest.blockhash,
        )
        log_with_context(logger, "info", "Submitting prereq instruction",
                         program_id=str(self.program_id), signer=str(signer.pubkey()))
        return await gateway.send_and_confirm_transaction(
            transaction,
            last_valid_block_height=latest.last_valid_block_height,
        )

    async def complete(self, gateway: RpcGateway, signer: Keypair, args: PrereqArgs) -> str:
        """Sign and submit ``complete``; the signer pays the fee.

        Returns:
            The confirmed transaction signature
        """
        return await self._submit(gateway, self.complete_instruction(signer.pubkey(), args), signer)

    async def update(self, gateway: RpcGateway, signer: Keypair, args: PrereqArgs) -> str:
        """Sign and submit ``update``; the signer pays the fee.

        Returns:
            The confirmed transaction signature
        """
        return await self._submit(gateway, self.update_instruction(signer.pubkey(), args), signer)
