"""
payrail CLI.

Usage:
    payrail [OPTIONS] COMMAND [ARGS]...
"""
from __future__ import annotations

import asyncio
import json
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from payrail import __version__
from payrail.config import get_settings
from payrail.entropy import EntropySource, RandomEntropySource, SequenceEntropySource
from payrail.exceptions import PaymentValidationError, RailError
from payrail.gateway import PaymentGateway
from payrail.logging_config import setup_logging
from payrail.models import CheckStatus, ComplianceVerdict, PaymentRequest, PaymentType
from payrail.orchestrator import PaymentOrchestrator
from payrail.routing import select_rail

console = Console()

STATUS_STYLE = {
    CheckStatus.PASSED: "green",
    CheckStatus.WARNING: "yellow",
    CheckStatus.FAILED: "red",
}


def _entropy(seed: Optional[int], draws: Optional[str]) -> EntropySource:
    if draws:
        try:
            return SequenceEntropySource(float(d) for d in draws.split(",") if d.strip())
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--draws")
    return RandomEntropySource(seed)


def _build_request(payer: str, amount: int, currency: str, payment_type: str, token: Optional[str]) -> PaymentRequest:
    try:
        return PaymentRequest(
            payer_id=payer,
            amount_minor=amount,
            currency=currency,
            payment_type=PaymentType(payment_type),
            payment_token=token,
        )
    except PaymentValidationError as e:
        raise click.BadParameter(e.message)


def _print_verdict(verdict: ComplianceVerdict) -> None:
    table = Table(title="Compliance Checks")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Details")
    for check in verdict.checks:
        style = STATUS_STYLE[check.status]
        table.add_row(
            check.name,
            f"[{style}]{check.status.value}[/{style}]",
            str(check.score_contribution),
            check.detail,
        )
    console.print(table)

    result = "[green]PASSED[/green]" if verdict.passed else "[red]REJECTED[/red]"
    console.print(f"Verdict: {result}  Risk score: [cyan]{verdict.risk_score}[/cyan]")
    console.print(f"Recommended provider: [cyan]{verdict.recommended_provider.value}[/cyan]")


payment_options = [
    click.option("--payer", required=True, help="Payer ID"),
    click.option("--amount", required=True, type=int, help="Amount in minor units (cents)"),
    click.option("--currency", default="USD", help="ISO-4217 currency (default: USD)"),
    click.option(
        "--type", "payment_type",
        type=click.Choice([t.value for t in PaymentType]),
        default=PaymentType.CARD.value,
        help="Payment type (default: card)",
    ),
    click.option("--seed", type=int, help="Seed for simulated risk checks"),
    click.option("--draws", help="Comma-separated draws in [0, 1) for simulated risk checks"),
]


def with_payment_options(func):
    for option in reversed(payment_options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__, message="%(prog)s %(version)s")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose: bool):
    """payrail - risk-gated payment routing."""
    ctx.ensure_object(dict)
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json,
    )
    ctx.obj["settings"] = settings


@cli.command()
@with_payment_options
def evaluate(
    payer: str,
    amount: int,
    currency: str,
    payment_type: str,
    seed: Optional[int],
    draws: Optional[str],
):
    """Evaluate risk and routing without contacting a rail."""
    request = _build_request(payer, amount, currency, payment_type, None)
    orchestrator = PaymentOrchestrator()
    verdict = asyncio.run(orchestrator.evaluate(request, _entropy(seed, draws)))

    _print_verdict(verdict)
    if verdict.passed:
        routing = select_rail(verdict, request.payment_type)
        console.print(f"Rail: [cyan]{routing.rail.value}[/cyan] ({routing.reason})")


@cli.command()
@with_payment_options
@click.option("--token", help="Tokenized card payment method")
@click.option("--json", "as_json", is_flag=True, help="Print the outcome as JSON")
@click.pass_context
def pay(
    ctx,
    payer: str,
    amount: int,
    currency: str,
    payment_type: str,
    seed: Optional[int],
    draws: Optional[str],
    token: Optional[str],
    as_json: bool,
):
    """Run a payment through the configured rails."""
    request = _build_request(payer, amount, currency, payment_type, token)
    gateway = PaymentGateway.from_settings(ctx.obj["settings"], entropy=_entropy(seed, draws))

    async def _run():
        try:
            return await gateway.pay(request)
        finally:
            await gateway.close()

    outcome = asyncio.run(_run())

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
    else:
        _print_verdict(outcome.verdict)
        if outcome.success:
            result = outcome.rail_result
            console.print(f"\n[green]✓ Payment executed via {result.provider.value}[/green]")
            console.print(f"  Reference: [cyan]{result.provider_ref}[/cyan]")
            console.print(f"  Status: {result.status}")
            if result.hosted_url:
                console.print(f"  Hosted URL: {result.hosted_url}")
        else:
            console.print(f"\n[red]✗ {outcome.error_kind.value}: {outcome.detail}[/red]")

    if not outcome.success:
        ctx.exit(1)


@cli.command("client-session")
@click.option("--payer", required=True, help="Payer ID")
@click.option("--amount", required=True, type=int, help="Amount in minor units (cents)")
@click.option("--currency", default="USD", help="ISO-4217 currency (default: USD)")
@click.pass_context
def client_session(ctx, payer: str, amount: int, currency: str):
    """Create a card-rail client session for the checkout UI."""
    gateway = PaymentGateway.from_settings(ctx.obj["settings"])

    async def _run():
        try:
            return await gateway.create_client_session(payer, amount, currency.upper())
        finally:
            await gateway.close()

    try:
        session = asyncio.run(_run())
    except RailError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        ctx.exit(1)
        return

    click.echo(json.dumps(session.to_dict(), indent=2))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
