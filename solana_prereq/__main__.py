"""Command-line entry point for the Solana prerequisite toolkit."""

import asyncio
import dataclasses
import functools
from typing import Any, Callable, List, Optional

import click

from solana_prereq.config import get_log_level, get_prereq_program_id, get_solana_config
from solana_prereq.constants import DEFAULT_AIRDROP_LAMPORTS, LAMPORTS_PER_SOL
from solana_prereq.keys import (
    base58_to_wallet,
    decode_base58,
    generate_keypair,
    keypair_to_base58,
    keypair_to_json,
    parse_pubkey,
    read_keypair_file,
    wallet_to_base58,
)
from solana_prereq.logging_config import configure_logging, get_logger
from solana_prereq.pda import find_program_address
from solana_prereq.programs.prereq import PrereqArgs, PrereqProgram
from solana_prereq.rpc_gateway import RpcGateway
from solana_prereq.transfer import ENTIRE_BALANCE, TransferService
from solana_prereq.utils.error_handling import SolanaPrereqError, ValidationError
from solana_prereq.utils.explorer import explorer_url

logger = get_logger(__name__)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report toolkit errors as a one-line CLI failure (exit status 1)."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SolanaPrereqError as e:
            logger.error(str(e))
            raise click.ClickException(str(e)) from e
    return wrapper


def parse_seed(seed: str) -> bytes:
    """Parse a ``kind:value`` seed; kinds are ``str``, ``pubkey`` and ``base58``.

    A seed without a recognised prefix is taken as UTF-8 text.
    """
    kind, sep, value = seed.partition(":")
    if not sep:
        return seed.encode("utf-8")
    if kind == "str":
        return value.encode("utf-8")
    if kind == "pubkey":
        return bytes(parse_pubkey(value))
    if kind == "base58":
        return decode_base58(value)
    raise ValidationError(f"Unknown seed kind '{kind}'; use str:, pubkey: or base58:")


def print_signature(message: str, signature: str, cluster: str) -> None:
    click.echo(message)
    try:
        click.echo(f"Check out your TX here: {explorer_url(signature, cluster)}")
    except ValidationError:
        # Already confirmed; a malformed signature must not fail the command
        logger.warning(f"Cannot build explorer link for signature: {signature}")
        click.echo(f"Signature: {signature}")


@click.group()
@click.option("--rpc-url", type=str, help="RPC endpoint (default: SOLANA_RPC_URL or devnet)")
@click.option("--keypair", "keypair_path", type=str, help="Keypair file (default: SOLANA_KEYPAIR_PATH)")
@click.option(
    "--commitment",
    type=click.Choice(["processed", "confirmed", "finalized"]),
    help="Commitment level for reads and confirmation",
)
@click.option("--cluster", type=str, help="Explorer cluster name for printed links")
@click.option("--log-level", type=str, help="Log level (default: LOG_LEVEL or INFO)")
@click.pass_context
@handle_errors
def cli(
    ctx: click.Context,
    rpc_url: Optional[str] = None,
    keypair_path: Optional[str] = None,
    commitment: Optional[str] = None,
    cluster: Optional[str] = None,
    log_level: Optional[str] = None,
) -> None:
    """Solana test-network chores: keys, airdrops, transfers and enrolment."""
    configure_logging(log_level or get_log_level())

    # Override environment defaults with CLI options if provided
    overrides = {
        "rpc_url": rpc_url,
        "keypair_path": keypair_path,
        "commitment": commitment,
        "cluster": cluster,
    }
    config = dataclasses.replace(
        get_solana_config(),
        **{key: value for key, value in overrides.items() if value is not None}
    )
    ctx.obj = config


@cli.command()
def keygen() -> None:
    """Generate a new keypair and print it; nothing is written to disk."""
    keypair = generate_keypair()
    click.echo(f"You've generated a new Solana wallet: {keypair.pubkey()}")
    click.echo("To save your wallet, copy and paste the following into a JSON file:")
    click.echo(keypair_to_json(keypair))
    click.echo(f"Base58 private key: {keypair_to_base58(keypair)}")


@cli.command()
@click.option(
    "--lamports",
    type=click.IntRange(min=1),
    default=DEFAULT_AIRDROP_LAMPORTS,
    show_default=True,
    help="Amount to request",
)
@click.pass_obj
@handle_errors
def airdrop(config, lamports: int) -> None:
    """Request test-network funds for the configured keypair."""
    keypair = read_keypair_file(config.keypair_path)

    async def run() -> str:
        async with RpcGateway(config) as gateway:
            return await gateway.request_airdrop(keypair.pubkey(), lamports)

    signature = asyncio.run(run())
    print_signature(
        f"Success! Requested {lamports / LAMPORTS_PER_SOL} SOL for {keypair.pubkey()}",
        signature,
        config.cluster,
    )


@cli.command()
@click.argument("recipient")
@click.option("--lamports", type=click.IntRange(min=1), required=True, help="Amount to send")
@click.pass_obj
@handle_errors
def transfer(config, recipient: str, lamports: int) -> None:
    """Send a fixed number of lamports to RECIPIENT."""
    _run_transfer(config, recipient, lamports)


@cli.command()
@click.argument("recipient")
@click.pass_obj
@handle_errors
def drain(config, recipient: str) -> None:
    """Send the keypair's entire balance, net of fees, to RECIPIENT."""
    _run_transfer(config, recipient, ENTIRE_BALANCE)


def _run_transfer(config, recipient: str, amount) -> None:
    keypair = read_keypair_file(config.keypair_path)
    to_pubkey = parse_pubkey(recipient)

    async def run():
        async with RpcGateway(config) as gateway:
            return await TransferService(gateway).transfer(keypair, to_pubkey, amount)

    result = asyncio.run(run())
    fee_note = f" after a fee of {result.fee} lamports" if result.fee is not None else ""
    print_signature(
        f"Success! Sent {result.amount} lamports to {result.recipient}{fee_note}",
        result.signature,
        config.cluster,
    )


@cli.command("base58-to-wallet")
@click.argument("private_key", required=False)
@handle_errors
def base58_to_wallet_command(private_key: Optional[str]) -> None:
    """Convert a base-58 private key into a wallet file byte array."""
    if private_key is None:
        private_key = click.prompt("Input your private key as base58", hide_input=True)
    click.echo("Your wallet file is:")
    click.echo(str(base58_to_wallet(private_key)))


@cli.command("wallet-to-base58")
@click.argument("wallet", required=False)
@handle_errors
def wallet_to_base58_command(wallet: Optional[str]) -> None:
    """Convert a wallet file byte array into a base-58 private key."""
    if wallet is None:
        wallet = click.prompt("Input your private key as a wallet file byte array")
    click.echo("Your private key is:")
    click.echo(wallet_to_base58(wallet))


@cli.command()
@click.argument("program_id")
@click.argument("seeds", nargs=-1)
@handle_errors
def pda(program_id: str, seeds: List[str]) -> None:
    """Derive the program address for PROGRAM_ID and SEEDS.

    Seeds are ``str:<text>``, ``pubkey:<address>`` or ``base58:<data>``.
    """
    address, bump = find_program_address([parse_seed(s) for s in seeds], parse_pubkey(program_id))
    click.echo(f"Address: {address}")
    click.echo(f"Bump: {bump}")


def _enrolment_command(name: str) -> Callable[..., None]:
    @click.argument("github")
    @click.option(
        "--program-id",
        type=str,
        help="Enrolment program address (default: PREREQ_PROGRAM_ID)",
    )
    @click.pass_obj
    @handle_errors
    def command(config, github: str, program_id: Optional[str]) -> None:
        program_id = program_id or get_prereq_program_id()
        if not program_id:
            raise ValidationError("No program id given; pass --program-id or set PREREQ_PROGRAM_ID")

        program = PrereqProgram(program_id)
        signer = read_keypair_file(config.keypair_path)
        args = PrereqArgs(github=github.encode("utf-8"))

        async def run() -> str:
            async with RpcGateway(config) as gateway:
                return await getattr(program, name)(gateway, signer, args)

        signature = asyncio.run(run())
        print_signature(f"Success! Submitted '{name}' for {github}", signature, config.cluster)

    command.__doc__ = f"Invoke the enrolment program's '{name}' instruction for GITHUB."
    return command


cli.command("complete")(_enrolment_command(PrereqProgram.COMPLETE))
cli.command("update")(_enrolment_command(PrereqProgram.UPDATE))


def main():
    """Run the Solana prerequisite CLI."""
    cli()


if __name__ == "__main__":
    main()
