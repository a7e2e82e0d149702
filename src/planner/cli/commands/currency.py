"""Currency commands."""

import click
from planner.cli.error_handling import handle_domain_error
from planner.domain.currency import CurrencyService, is_known_currency
from planner.domain.errors import ValidationError, unknown_currency
from planner.utils.amount_parser import parse_amount


def _check_code(ctx, code: str) -> bool:
    if is_known_currency(code):
        return True
    handle_domain_error(ctx, ValidationError(unknown_currency(code)))
    return False


@click.group()
def currency_group():
    """Exchange rates and conversion."""
    pass


@currency_group.command("base")
@click.argument("code", required=False)
@click.pass_context
def base(ctx, code: str | None):
    """Show or set the base currency."""
    service = CurrencyService(ctx.obj["storage"])
    if code is None:
        click.echo(service.get_base_currency())
        return
    if not _check_code(ctx, code.upper()):
        return
    service.set_base_currency(code.upper())
    click.echo(f"Base currency set to {code.upper()}")


@currency_group.command("set-rate")
@click.argument("code")
@click.argument("rate", type=float)
@click.pass_context
def set_rate(ctx, code: str, rate: float):
    """Set how many base units one CODE is worth.

    Examples:
        planner currency set-rate EUR 385
    """
    if not _check_code(ctx, code.upper()):
        return
    service = CurrencyService(ctx.obj["storage"])
    service.set_rate(code.upper(), rate)
    click.echo(f"1 {code.upper()} = {rate} {service.get_base_currency()}")


@currency_group.command("rates")
@click.pass_context
def list_rates(ctx):
    """List all configured rates."""
    service = CurrencyService(ctx.obj["storage"])
    click.echo(f"\nRates (base {service.get_base_currency()}):")
    click.echo("-" * 40)
    for code, rate in sorted(service.get_all_rates().items()):
        click.echo(f"{code:5s} {rate}")


@currency_group.command("convert")
@click.argument("amount")
@click.argument("from_currency", metavar="FROM")
@click.argument("to_currency", metavar="TO")
@click.pass_context
def convert(ctx, amount: str, from_currency: str, to_currency: str):
    """Convert AMOUNT from one currency to another.

    Examples:
        planner currency convert 10 EUR HUF
    """
    service = CurrencyService(ctx.obj["storage"])
    try:
        value = float(parse_amount(amount))
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    result = service.convert(value, from_currency.upper(), to_currency.upper())
    click.echo(
        f"{service.format(value, from_currency.upper())} = "
        f"{service.format(result, to_currency.upper())}"
    )


@currency_group.command("refresh")
@click.option("--force", is_flag=True, help="Refresh even if rates are less than a day old")
@click.pass_context
def refresh(ctx, force: bool):
    """Reset stale rates to the built-in defaults."""
    service = CurrencyService(ctx.obj["storage"])
    result = service.refresh_rates(force=force)
    click.echo(result.message)


def register_commands(cli):
    """Register currency commands with main CLI."""
    cli.add_command(currency_group, name="currency")
