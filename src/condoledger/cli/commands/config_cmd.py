"""Period config commands."""

import click
from condoledger.cli.error_handling import handle_domain_error, parse_amount_or_exit, parse_date_or_exit
from condoledger.domain.errors import DomainError
from condoledger.domain.periods import PeriodService


@click.group()
def config_group():
    """Manage period configs (default amounts and due dates)."""
    pass


@config_group.command("create")
@click.option("--maintenance", required=True, help="Default monthly maintenance amount")
@click.option("--water", default="0", show_default=True, help="Default water amount")
@click.option(
    "--extraordinary-fee", default="0", show_default=True, help="Default extraordinary fee amount"
)
@click.option("--due-day", type=int, default=10, show_default=True, help="Payment due day (1-28)")
@click.option("--penalty", default="0", show_default=True, help="Late payment penalty amount")
@click.option("--from", "effective_from", required=True, help="First day the config applies")
@click.option("--until", "effective_until", help="Last day the config applies")
@click.pass_context
def create_config(
    ctx,
    maintenance: str,
    water: str,
    extraordinary_fee: str,
    due_day: int,
    penalty: str,
    effective_from: str,
    effective_until: str | None,
):
    """Create a period config.

    An open-ended active config is closed the day before the new one starts.

    Examples:
        condoledger config create --maintenance 800 --from 2024-01-01
        condoledger config create --maintenance 850 --water 120 --penalty 100 --from 2025-01-01
    """
    service = PeriodService(ctx.obj["db"])
    start = parse_date_or_exit(ctx, effective_from, "start date")
    end = parse_date_or_exit(ctx, effective_until, "end date")
    try:
        config = service.create_config(
            default_maintenance_amount=parse_amount_or_exit(ctx, maintenance),
            default_water_amount=parse_amount_or_exit(ctx, water),
            default_extraordinary_fee_amount=parse_amount_or_exit(ctx, extraordinary_fee),
            payment_due_day=due_day,
            late_payment_penalty_amount=parse_amount_or_exit(ctx, penalty),
            effective_from=start,
            effective_until=end,
        )
        click.echo(
            f"Created config {config.id}: maintenance ${config.default_maintenance_amount} "
            f"from {config.effective_from}"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@config_group.command("list")
@click.pass_context
def list_configs(ctx):
    """List period configs, most recent first."""
    configs = PeriodService(ctx.obj["db"]).list_configs()
    if not configs:
        click.echo("No period configs found.")
        return

    click.echo("\nPeriod configs:")
    click.echo("-" * 80)
    for c in configs:
        until = c.effective_until.isoformat() if c.effective_until else "open"
        status = "active" if c.is_active else "inactive"
        click.echo(
            f"ID: {c.id:3d} | {c.effective_from} -> {until:10s} | "
            f"Maintenance: ${c.default_maintenance_amount} | Water: ${c.default_water_amount} | "
            f"Due day: {c.payment_due_day} | {status}"
        )


def register_commands(cli):
    """Register config commands with main CLI."""
    cli.add_command(config_group, name="config")
