"""Main CLI entry point."""

import logging

import click
from condoledger.config import load_settings
from condoledger.database.factories import create_sqlite_database
from condoledger.domain.errors import DomainError

# Import and register all commands at module level
from condoledger.cli.commands import (
    house,
    config_cmd,
    period,
    charge,
    payment,
    statement,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CONDOLEDGER_DB_PATH environment variable)",
    envvar="CONDOLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="CONDOLEDGER_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Condoledger - Dues ledger for a multi-unit property.

    Track what every house owes per period, import bank statements and
    distribute incoming payments across pending periods.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["settings"] = load_settings()
        except DomainError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
house.register_commands(cli)
config_cmd.register_commands(cli)
period.register_commands(cli)
charge.register_commands(cli)
payment.register_commands(cli)
statement.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
