"""Period management commands."""

import click
from condoledger.cli.error_handling import handle_domain_error
from condoledger.domain.errors import DomainError
from condoledger.domain.periods import PeriodService


@click.group()
def period_group():
    """Manage billing periods."""
    pass


@period_group.command("create")
@click.argument("year", type=int)
@click.argument("month", type=int)
@click.option(
    "--seed/--no-seed",
    default=True,
    show_default=True,
    help="Seed expected charges for every house",
)
@click.pass_context
def create_period(ctx, year: int, month: int, seed: bool):
    """Create the period for a month.

    Examples:
        condoledger period create 2025 3
        condoledger period create 2025 4 --no-seed
    """
    service = PeriodService(ctx.obj["db"])
    try:
        period = service.create_period(year, month)
        click.echo(f"Created period {period.display_name} (ID: {period.id})")
        if seed:
            created = service.seed_charges_for_period(period.id)
            click.echo(f"Seeded {created} charge(s)")
    except DomainError as e:
        handle_domain_error(ctx, e)


@period_group.command("list")
@click.pass_context
def list_periods(ctx):
    """List periods in chronological order."""
    periods = PeriodService(ctx.obj["db"]).list_periods()
    if not periods:
        click.echo("No periods found.")
        return

    click.echo("\nPeriods:")
    click.echo("-" * 70)
    for p in periods:
        concepts = ["maintenance"]
        if p.water_active:
            concepts.append("water")
        if p.extraordinary_fee_active:
            concepts.append("extraordinary fee")
        config = p.config_id if p.config_id is not None else "-"
        click.echo(
            f"ID: {p.id:3d} | {p.display_name:15s} | Config: {config} | {', '.join(concepts)}"
        )


@period_group.command("seed")
@click.argument("period_id", type=int)
@click.pass_context
def seed_period(ctx, period_id: int):
    """Seed expected charges for an existing period."""
    service = PeriodService(ctx.obj["db"])
    try:
        created = service.seed_charges_for_period(period_id)
        click.echo(f"Seeded {created} charge(s)")
    except DomainError as e:
        handle_domain_error(ctx, e)


@period_group.command("concepts")
@click.argument("period_id", type=int)
@click.option("--water/--no-water", default=None, help="Charge water in this period")
@click.option(
    "--extraordinary-fee/--no-extraordinary-fee",
    default=None,
    help="Charge the extraordinary fee in this period",
)
@click.pass_context
def period_concepts(ctx, period_id: int, water: bool | None, extraordinary_fee: bool | None):
    """Turn optional concepts of a period on or off.

    Takes effect for charges seeded afterwards.

    Examples:
        condoledger period concepts 3 --water
    """
    if water is None and extraordinary_fee is None:
        click.echo("Error: Nothing to update. Use --water or --extraordinary-fee", err=True)
        ctx.exit(1)

    service = PeriodService(ctx.obj["db"])
    try:
        period = service.update_period_concepts(period_id, water, extraordinary_fee)
        click.echo(
            f"{period.display_name}: water {'on' if period.water_active else 'off'}, "
            f"extraordinary fee {'on' if period.extraordinary_fee_active else 'off'}"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(period_group, name="period")
