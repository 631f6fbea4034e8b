"""Bank statement commands."""

import click
from condoledger.cli.error_handling import handle_domain_error, parse_date_or_exit
from condoledger.domain.entities import TransactionStatus
from condoledger.domain.errors import DomainError
from condoledger.domain.statement_ingestion import StatementIngestionService, read_statement_csv


@click.group()
def statement_group():
    """Import and inspect bank statements."""
    pass


@statement_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--bank", "bank_name", required=True, help="Bank the statement came from")
@click.option("--show-warnings", is_flag=True, help="Print row warnings")
@click.pass_context
def import_statement(ctx, csv_file: str, bank_name: str, show_warnings: bool):
    """Import a bank statement CSV.

    Expected columns: date,time,concept,amount,currency,deposit. Rows already
    stored by an earlier import are skipped.

    Examples:
        condoledger statement import march.csv --bank Santander
    """
    service = StatementIngestionService(ctx.obj["db"])
    try:
        rows = read_statement_csv(csv_file)
        result = service.ingest_statement(rows, bank_name)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    for error in result.errors:
        click.echo(f"  {error}", err=True)
    if show_warnings:
        for warning in result.warnings:
            click.echo(f"  Warning: {warning}")

    click.echo(
        f"Processed {result.total_rows} row(s) from {result.bank_name}: "
        f"{result.accepted} new, {result.previously_processed} previously processed, "
        f"{len(result.errors)} error(s)"
    )
    if result.date_range is not None:
        click.echo(f"Date range: {result.date_range[0]} to {result.date_range[1]}")


@statement_group.command("summary")
@click.pass_context
def statement_summary(ctx):
    """Show totals over stored transactions."""
    summary = StatementIngestionService(ctx.obj["db"]).transaction_summary()
    click.echo(f"Total transactions: {summary['total']}")
    for status in TransactionStatus:
        click.echo(f"  {status.value}: {summary[status.value]}")
    click.echo(f"Total amount: ${summary['total_amount']}")
    click.echo(f"Currencies: {', '.join(summary['currencies']) or '-'}")
    click.echo(f"Banks: {', '.join(summary['banks']) or '-'}")


@statement_group.command("reconcile")
@click.option("--from", "start_date", help="Start date")
@click.option("--to", "end_date", help="End date")
@click.pass_context
def reconcile(ctx, start_date: str | None, end_date: str | None):
    """Report discrepancies over stored transactions."""
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")
    service = StatementIngestionService(ctx.obj["db"])
    try:
        report = service.reconcile(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Total: {report.total}  Matched: {report.matched}  Unmatched: {report.unmatched}")
    if report.success:
        click.echo("No discrepancies found.")
    for discrepancy in report.discrepancies:
        click.echo(f"  - {discrepancy}")


@statement_group.command("mark")
@click.argument("transaction_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in TransactionStatus]))
@click.pass_context
def mark_transaction(ctx, transaction_id: int, status: str):
    """Set the status of a stored transaction.

    Examples:
        condoledger statement mark 57 reconciled
    """
    service = StatementIngestionService(ctx.obj["db"])
    try:
        transaction = service.update_transaction_status(transaction_id, TransactionStatus(status))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Transaction {transaction.id} is now {transaction.status.value}")


def register_commands(cli):
    """Register statement commands with main CLI."""
    cli.add_command(statement_group, name="statement")
