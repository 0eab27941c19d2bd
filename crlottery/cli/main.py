"""
crlottery CLI - Command line interface for the commit-reveal lottery engine

Main entry point for all CLI commands.
"""

import time
from pathlib import Path

import click

from crlottery import __version__
from crlottery.utils.logger import setup_logging, get_logger

logger = get_logger("cli")


def _open_vault(ctx):
    from crlottery.core.storage import SecretStore, SQLiteAdapter

    adapter = SQLiteAdapter(ctx.obj["data_dir"] / "vault.db", bucket="secrets")
    return SecretStore(adapter)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, help="Data directory (default ~/.crlottery)")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help="Load settings from a .env file")
@click.option("--log-to-file", is_flag=True, help="Also write logs to <log_dir>/crlottery.log")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, data_dir, env_file, log_to_file):
    """Commit-reveal lottery client engine"""
    import logging
    from crlottery.core.config import load_config

    config = load_config(env_file)
    if data_dir:
        config.data_dir = Path(data_dir).expanduser()

    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=log_to_file)
    logger.debug(f"Using data directory {config.data_dir}")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["data_dir"] = config.data_dir


# =============================================================================
# Secret Commands
# =============================================================================

@cli.group()
def secret():
    """Secret and commitment commands"""
    pass


@secret.command("generate")
@click.option("--count", default=1, type=click.IntRange(min=1), help="Number of secrets")
def secret_generate(count):
    """Generate secrets with their commitments"""
    from crlottery.crypto import generate_ticket_secrets, hash_secret

    for s in generate_ticket_secrets(count):
        click.echo(f"{s} {hash_secret(s)}")


@secret.command("hash")
@click.argument("value")
@click.pass_context
def secret_hash(ctx, value):
    """Compute the commitment for a secret"""
    from crlottery.crypto import hash_secret
    from crlottery.utils.validation import validate_secret

    ok, err = validate_secret(value)
    if not ok:
        click.echo(f"❌ {err}")
        ctx.exit(1)
    click.echo(hash_secret(value.strip()))


@secret.command("verify")
@click.argument("value")
@click.argument("commitment")
@click.pass_context
def secret_verify(ctx, value, commitment):
    """Check a secret against a commitment"""
    from crlottery.crypto import validate_secret

    if validate_secret(value.strip(), commitment.strip()):
        click.echo("✓ Secret matches commitment")
    else:
        click.echo("❌ Secret does not match commitment")
        ctx.exit(1)


# =============================================================================
# Ticket Commands
# =============================================================================

@cli.group()
def ticket():
    """Ticket code commands"""
    pass


@ticket.command("encode")
@click.argument("lottery_id", type=int)
@click.argument("ticket_index", type=int)
@click.argument("ticket_secret")
@click.pass_context
def ticket_encode(ctx, lottery_id, ticket_index, ticket_secret):
    """Encode a ticket into its compact code"""
    from crlottery.core.codec import encode_ticket_code

    try:
        click.echo(encode_ticket_code(lottery_id, ticket_index, ticket_secret))
    except ValueError as exc:
        click.echo(f"❌ {exc}")
        ctx.exit(1)


@ticket.command("decode")
@click.argument("text")
@click.pass_context
def ticket_decode(ctx, text):
    """Decode a ticket code, link or lottery-ticket-secret triple"""
    from crlottery.core.codec import parse_ticket_input

    parsed, err = parse_ticket_input(text)
    if parsed is None:
        click.echo(f"❌ {err}")
        ctx.exit(1)

    click.echo(f"  Lottery: {parsed.lottery_id}")
    click.echo(f"  Ticket:  {parsed.ticket_index}")
    click.echo(f"  Secret:  {parsed.secret}")


@ticket.command("url")
@click.argument("base_url")
@click.argument("lottery_id", type=int)
@click.argument("ticket_index", type=int)
@click.argument("ticket_secret")
@click.pass_context
def ticket_url(ctx, base_url, lottery_id, ticket_index, ticket_secret):
    """Build a shareable ticket link"""
    from crlottery.core.codec import build_ticket_url

    try:
        click.echo(build_ticket_url(base_url, lottery_id, ticket_index, ticket_secret))
    except ValueError as exc:
        click.echo(f"❌ {exc}")
        ctx.exit(1)


# =============================================================================
# Lottery Commands
# =============================================================================

@cli.group()
def lottery():
    """Lottery state commands"""
    pass


@lottery.command("status")
@click.option("--state", required=True, type=click.IntRange(0, 3), help="Contract state (0-3)")
@click.option("--commit-deadline", required=True, type=int, help="Unix seconds")
@click.option("--reveal-time", required=True, type=int, help="Unix seconds")
@click.option("--claim-deadline", default=0, type=int, help="Unix seconds, 0 if unset")
@click.option("--committed", default=0, type=int, help="Committed ticket count")
@click.option("--randomness-block", default=0, type=click.IntRange(min=0), help="Randomness block, 0 if unset")
@click.option("--block", default=None, type=click.IntRange(min=0), help="Current block number")
@click.option("--now", default=None, type=int, help="Override current time")
@click.pass_context
def lottery_status(
    ctx, state, commit_deadline, reveal_time, claim_deadline, committed, randomness_block, block, now
):
    """Show phase, eligible actions and countdowns"""
    from crlottery.core.lottery import ChainState, Lottery, tick
    from crlottery.utils.timefmt import friendly_countdown

    now = int(time.time()) if now is None else now
    chain_state = ChainState(
        lottery=Lottery(
            id=0,
            commit_deadline=commit_deadline,
            reveal_time=reveal_time,
            claim_deadline=claim_deadline,
            randomness_block=randomness_block,
            state=state,
        ),
        committed_count=committed,
    )
    snapshot = tick(now, block, chain_state, config=ctx.obj["config"])

    click.echo(f"Phase: {snapshot.phase.value}")
    if snapshot.next_deadline:
        deadline = snapshot.next_deadline
        click.echo(f"Next:  {deadline.label} ({friendly_countdown(deadline.timestamp, now)})")

    for action, check in snapshot.checks.items():
        if check.allowed:
            click.echo(f"  ✓ {action.value}")
        else:
            click.echo(f"  ✗ {action.value}: {'; '.join(check.reasons)}")


# =============================================================================
# Vault Commands
# =============================================================================

@cli.group()
def vault():
    """Local secret vault commands"""
    pass


@vault.command("list")
@click.pass_context
def vault_list(ctx):
    """List lotteries with stored secrets"""
    store = _open_vault(ctx)
    records = store.get_all()
    if not records:
        click.echo("No secrets stored.")
        return
    for lottery_id, record in records.items():
        click.echo(f"  {lottery_id}: {len(record.ticket_secrets)} ticket secret(s)")


@vault.command("save")
@click.argument("lottery_id", type=int)
@click.option("--tickets", default=1, type=click.IntRange(min=1), help="Number of ticket secrets")
@click.pass_context
def vault_save(ctx, lottery_id, tickets):
    """Generate and store secrets for a new lottery"""
    from crlottery.crypto import generate_secret, generate_ticket_secrets, hash_secret
    from crlottery.core.codec import encode_ticket_code

    store = _open_vault(ctx)
    if store.has(lottery_id):
        click.echo(f"❌ Secrets for lottery {lottery_id} already exist")
        ctx.exit(1)

    creator_secret = generate_secret()
    ticket_secrets = generate_ticket_secrets(tickets)
    store.save(lottery_id, creator_secret, ticket_secrets)

    click.echo(f"✓ Secrets stored for lottery {lottery_id}")
    click.echo(f"  Creator commitment: {hash_secret(creator_secret)}")
    click.echo("  Ticket codes:")
    for index, s in enumerate(ticket_secrets):
        click.echo(f"    {index}: {encode_ticket_code(lottery_id, index, s)}")
    click.echo("  ⚠️  Back up the creator secret - the lottery cannot be revealed without it!")


@vault.command("restore")
@click.argument("lottery_id", type=int)
@click.argument("creator_secret")
@click.argument("commitment")
@click.pass_context
def vault_restore(ctx, lottery_id, creator_secret, commitment):
    """Restore a creator secret after checking it against the commitment"""
    store = _open_vault(ctx)
    ok, err = store.restore(lottery_id, creator_secret, commitment)
    if not ok:
        click.echo(f"❌ {err}")
        ctx.exit(1)
    click.echo(f"✓ Secret restored for lottery {lottery_id}")


@vault.command("remove")
@click.argument("lottery_id", type=int)
@click.pass_context
def vault_remove(ctx, lottery_id):
    """Delete stored secrets for a lottery"""
    store = _open_vault(ctx)
    if store.remove(lottery_id):
        click.echo(f"✓ Removed secrets for lottery {lottery_id}")
    else:
        click.echo(f"No secrets stored for lottery {lottery_id}")


if __name__ == "__main__":
    cli()
