"""Payment distribution commands."""

import click
from condoledger.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    resolve_house_or_exit,
)
from condoledger.domain.ai_distribution import AIDistributionAnalyzer
from condoledger.domain.distribution import DistributionService
from condoledger.domain.errors import DomainError
from condoledger.reasoning import create_reasoning_services


def _distribution_service(ctx) -> DistributionService:
    settings = ctx.obj["settings"]
    analyzer = None
    if settings.enable_ai_distribution:
        primary, secondary = create_reasoning_services(settings)
        analyzer = AIDistributionAnalyzer(primary, secondary, settings)
    return DistributionService(ctx.obj["db"], settings, analyzer)


@click.group()
def payment_group():
    """Distribute payments across pending periods."""
    pass


@payment_group.command("pending")
@click.argument("house_number", metavar="HOUSE", type=int)
@click.pass_context
def pending_periods(ctx, house_number: int):
    """List the periods a house still owes maintenance for."""
    house = resolve_house_or_exit(ctx, house_number)
    service = DistributionService(ctx.obj["db"], ctx.obj["settings"])
    periods = service.resolver.resolve_unpaid_periods(house.id)
    if not periods:
        click.echo(f"House {house.number} has no pending periods.")
        return

    click.echo(f"\nPending periods for house {house.number}:")
    click.echo("-" * 70)
    for p in periods:
        click.echo(
            f"ID: {p.period_id:3d} | {p.display_name:15s} | Expected: ${p.expected_maintenance:>8} | "
            f"Paid: ${p.paid_maintenance:>8} | Pending: ${p.pending_maintenance:>8}"
        )


@payment_group.command("plan")
@click.argument("house_number", metavar="HOUSE", type=int)
@click.argument("amount")
@click.option("--apply", "apply_plan", is_flag=True, help="Record the plan's allocations")
@click.option("--record-id", type=int, help="Payment record the allocations belong to")
@click.option(
    "--transaction-id",
    type=int,
    help="Bank transaction that funds the payment (marked processed when applied)",
)
@click.pass_context
def plan_payment(
    ctx,
    house_number: int,
    amount: str,
    apply_plan: bool,
    record_id: int | None,
    transaction_id: int | None,
):
    """Suggest how a payment should be split.

    Examples:
        condoledger payment plan 12 1600
        condoledger payment plan 12 1600 --apply --record-id 301
        condoledger payment plan 12 1600 --apply --transaction-id 57
    """
    if apply_plan and (record_id is None) == (transaction_id is None):
        click.echo("Error: --apply needs exactly one of --record-id or --transaction-id", err=True)
        ctx.exit(1)

    house = resolve_house_or_exit(ctx, house_number)
    payment_amount = parse_amount_or_exit(ctx, amount)
    service = _distribution_service(ctx)
    try:
        plan = service.plan_distribution(house.id, payment_amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nMethod: {plan.method.value}  Confidence: {plan.confidence.value}")
    click.echo(f"Reasoning: {plan.reasoning}")
    for allocation in plan.allocations:
        click.echo(
            f"  Period {allocation.period_id:3d} | {allocation.concept_type.value:12s} | "
            f"${allocation.amount}"
        )
    click.echo(f"Allocated: ${plan.total_allocated}  Credit: ${plan.remaining_as_credit}")
    if plan.requires_manual_review:
        click.echo("This payment requires manual review.")

    if not apply_plan:
        return
    try:
        if transaction_id is not None:
            created = service.apply_transaction(house.id, transaction_id, plan)
            click.echo(
                f"Recorded {len(created)} allocation(s) for transaction {transaction_id}, "
                f"now processed"
            )
        else:
            created = service.apply_plan(house.id, record_id, plan)
            click.echo(f"Recorded {len(created)} allocation(s) for record {record_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@payment_group.command("apply-credit")
@click.argument("house_number", metavar="HOUSE", type=int)
@click.pass_context
def apply_credit(ctx, house_number: int):
    """Spend a house's credit balance on its oldest pending charges."""
    house = resolve_house_or_exit(ctx, house_number)
    service = DistributionService(ctx.obj["db"], ctx.obj["settings"])
    try:
        result = service.apply_credit_to_periods(house.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    for allocation in result.allocations:
        click.echo(
            f"  Period {allocation.period_id:3d} | {allocation.concept_type.value:17s} | "
            f"${allocation.allocated_amount} ({allocation.payment_status.value})"
        )
    click.echo(
        f"Applied ${result.total_applied} of credit for house {house.number}. "
        f"Credit left: ${result.credit_after}"
    )


def register_commands(cli):
    """Register payment commands with main CLI."""
    cli.add_command(payment_group, name="payment")
