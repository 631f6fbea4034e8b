"""Charge ledger commands."""

import click
from condoledger.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_house_or_exit,
)
from condoledger.domain.charges import ChargeMutationService
from condoledger.domain.errors import DomainError
from condoledger.domain.ledger import ChargeLedgerService
from condoledger.domain.periods import PeriodService


@click.group()
def charge_group():
    """Inspect and correct expected charges."""
    pass


@charge_group.command("balance")
@click.argument("house_number", metavar="HOUSE", type=int)
@click.argument("period_id", type=int)
@click.pass_context
def charge_balance(ctx, house_number: int, period_id: int):
    """Show what a house owes and has paid in a period."""
    house = resolve_house_or_exit(ctx, house_number)
    ledger = ChargeLedgerService(ctx.obj["db"])
    try:
        balance = ledger.charge_balance(house.id, period_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nHouse {house.number}, period {period_id}:")
    click.echo("-" * 60)
    for detail in balance.details:
        status = "paid" if detail.is_paid else "pending"
        click.echo(
            f"{detail.concept_type.value:20s} | Expected: ${detail.expected_amount:>10} | "
            f"Paid: ${detail.paid_amount:>10} | {status}"
        )
    click.echo("-" * 60)
    click.echo(
        f"Total expected: ${balance.total_expected}  Paid: ${balance.total_paid}  "
        f"Balance: ${balance.balance}"
    )


@charge_group.command("adjust")
@click.argument("charge_id", type=int)
@click.argument("amount")
@click.pass_context
def adjust_charge(ctx, charge_id: int, amount: str):
    """Change the expected amount of a charge.

    Only periods from the last three months can be adjusted.

    Examples:
        condoledger charge adjust 42 750
    """
    new_amount = parse_amount_or_exit(ctx, amount)
    service = ChargeMutationService(ctx.obj["db"])
    try:
        result = service.adjust_charge(charge_id, new_amount)
        click.echo(
            f"Adjusted charge {charge_id}: ${result.previous_amount} -> ${result.new_amount} "
            f"(difference ${result.difference})"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@charge_group.command("reverse")
@click.argument("charge_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def reverse_charge(ctx, charge_id: int, yes: bool):
    """Remove a charge that has no payments."""
    if not yes and not click.confirm(f"Reverse charge {charge_id}?"):
        click.echo("Cancelled.")
        return

    service = ChargeMutationService(ctx.obj["db"])
    try:
        result = service.reverse_charge(charge_id)
        click.echo(f"Reversed charge {charge_id} (${result.removed_amount})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@charge_group.command("condone")
@click.argument("period_id", type=int)
@click.option(
    "--house",
    "house_numbers",
    type=int,
    multiple=True,
    help="House to condone (repeatable; all houses with a penalty when omitted)",
)
@click.pass_context
def condone_penalties(ctx, period_id: int, house_numbers: tuple[int, ...]):
    """Forgive late-payment penalties for a period.

    Examples:
        condoledger charge condone 3
        condoledger charge condone 3 --house 12 --house 14
    """
    house_ids = [resolve_house_or_exit(ctx, n).id for n in house_numbers]
    service = ChargeMutationService(ctx.obj["db"])
    try:
        result = service.condone_penalties_for_period(period_id, house_ids or None)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    for detail in result.details:
        if detail.success:
            click.echo(f"House ID {detail.house_id}: condoned ${detail.condoned_amount}")
        else:
            click.echo(f"House ID {detail.house_id}: {detail.reason}", err=True)
    click.echo(
        f"Condoned ${result.total_condoned} across {result.condoned_count} house(s), "
        f"{result.failure_count} failure(s)"
    )


@charge_group.command("penalties")
@click.argument("period_id", type=int)
@click.option("--as-of", "as_of", help="Reference date (YYYY-MM-DD, defaults to today)")
@click.pass_context
def generate_penalties(ctx, period_id: int, as_of: str | None):
    """Charge late-payment penalties for a period.

    Houses whose maintenance is still unpaid after the config's due day get
    one penalty charge.

    Examples:
        condoledger charge penalties 3
        condoledger charge penalties 3 --as-of 2025-03-15
    """
    today = parse_date_or_exit(ctx, as_of, "--as-of date")
    service = PeriodService(ctx.obj["db"])
    try:
        result = service.generate_penalties_for_period(period_id, today)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Charged ${result.penalty_amount} penalty to {len(result.penalized_house_ids)} "
        f"house(s) (due {result.due_date}), total ${result.total_amount}"
    )
    if result.already_penalized:
        click.echo(f"{result.already_penalized} house(s) already had a penalty")


def register_commands(cli):
    """Register charge commands with main CLI."""
    cli.add_command(charge_group, name="charge")
