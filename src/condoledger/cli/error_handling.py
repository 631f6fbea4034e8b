"""CLI error handling and argument helpers."""

from datetime import date
from decimal import Decimal

import click

from condoledger.domain.entities import House
from condoledger.domain.errors import DomainError
from condoledger.domain.houses import HouseService
from condoledger.utils.amount_parser import parse_amount
from condoledger.utils.date_parser import parse_date


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def resolve_house_or_exit(ctx: click.Context, number: int) -> House:
    """Look up a house by number, or exit with a CLI error."""
    try:
        return HouseService(ctx.obj["db"]).require_house_by_number(number)
    except DomainError as e:
        handle_domain_error(ctx, e)


def parse_amount_or_exit(ctx: click.Context, value: str) -> Decimal:
    """Parse an amount argument, or exit with a CLI error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)


def parse_date_or_exit(ctx: click.Context, value: str | None, label: str) -> date | None:
    """Parse an optional date option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
