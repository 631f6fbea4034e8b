"""House management commands."""

import click
from condoledger.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    resolve_house_or_exit,
)
from condoledger.domain.entities import OVERRIDABLE_CONCEPTS
from condoledger.domain.errors import DomainError
from condoledger.domain.houses import HouseService


@click.group()
def house_group():
    """Manage houses."""
    pass


@house_group.command("add")
@click.argument("number", type=int)
@click.pass_context
def add_house(ctx, number: int):
    """Register a house by its number.

    Examples:
        condoledger house add 12
    """
    service = HouseService(ctx.obj["db"])
    try:
        house = service.create_house(number)
        click.echo(f"Created house {house.number} (ID: {house.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@house_group.command("list")
@click.pass_context
def list_houses(ctx):
    """List all houses with their credit balance."""
    service = HouseService(ctx.obj["db"])

    houses = service.list_houses()
    if not houses:
        click.echo("No houses found.")
        return

    click.echo("\nHouses:")
    click.echo("-" * 40)
    for h in houses:
        balance = service.get_balance(h.id)
        click.echo(f"House {h.number:3d} | ID: {h.id:3d} | Credit: ${balance.credit_balance}")


@house_group.command("override")
@click.argument("house_number", metavar="HOUSE", type=int)
@click.argument("period_id", type=int)
@click.argument("concept", type=click.Choice([c.value for c in OVERRIDABLE_CONCEPTS]))
@click.argument("amount")
@click.pass_context
def set_override(ctx, house_number: int, period_id: int, concept: str, amount: str):
    """Set a custom amount for a house in a period.

    Only charges seeded afterwards use the override.

    Examples:
        condoledger house override 12 3 maintenance 650
    """
    house = resolve_house_or_exit(ctx, house_number)
    custom_amount = parse_amount_or_exit(ctx, amount)
    service = HouseService(ctx.obj["db"])
    try:
        override = service.set_override(house.id, period_id, concept, custom_amount)
        click.echo(
            f"House {house.number}: {override.concept_type.value} for period {period_id} "
            f"set to ${override.custom_amount}"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register house commands with main CLI."""
    cli.add_command(house_group, name="house")
