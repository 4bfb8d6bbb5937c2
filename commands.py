# commands.py - operator tasks, run as `flask commissions <command>`
import click
from flask.cli import AppGroup

from commission.engine import CommissionEngine
from commission.exceptions import NotFoundError
from commission.maintenance import backfill_commission_types
from commission.rate_table import CommissionRateTable

commissions_cli = AppGroup("commissions", help="Commission ledger maintenance.")


@commissions_cli.command("rates")
def show_rates():
    """Print the current commission structure."""
    table = CommissionRateTable.current()
    for row in table.breakdown():
        click.echo(f"{row['label']:>9}: {row['amount']}")
    click.echo(f"    Total: {table.total()}")

    is_valid, message = table.validate()
    click.echo(message if is_valid else f"WARNING: {message}")


@commissions_cli.command("settle")
@click.argument("user_id", type=int)
def settle_pending(user_id):
    """Move legacy pending commissions for USER_ID into wallet balance."""
    settled = CommissionEngine.process_pending_commissions(user_id)
    click.echo(f"Settled {settled} for user {user_id}")


@commissions_cli.command("backfill-types")
@click.option("--batch-size", default=500, show_default=True)
def backfill_types(batch_size):
    """Set direct/indirect type on ledger rows that predate it."""
    migrated, remaining = backfill_commission_types(batch_size)
    click.echo(f"Successfully migrated: {migrated}")
    if remaining:
        raise click.ClickException(f"{remaining} commissions still need migration")


@commissions_cli.command("summary")
@click.argument("user_id", type=int)
def summary(user_id):
    """Show a user's wallet and commission breakdown."""
    try:
        data = CommissionEngine.get_commission_summary(user_id)
    except NotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Balance: {data['balance']}  Pending: {data['pending']}  Total earned: {data['total_earned']}")
    click.echo(f"Direct: {data['direct']['amount']} ({data['direct']['count']})")
    click.echo(f"Indirect: {data['indirect']['amount']} ({data['indirect']['count']})")
    for row in data['by_level']:
        click.echo(f"  Level {row['level']:2d} [{row['type']}]: {row['amount']} ({row['count']})")
