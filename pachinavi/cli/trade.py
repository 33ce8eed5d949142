"""Trade transition commands for PachiNavi CLI.

Handles approve, pay, complete and cancel, plus the buyer-side
shipping and contact edits allowed before approval.
"""

from typing import Optional

import click
from rich.panel import Panel

from pachinavi.cli.context import console, get_service, print_error
from pachinavi.exceptions import TradeEngineError, ValidationFailedError

ERROR_TITLES = {
    "NOT_FOUND": "Not Found",
    "UNAUTHORIZED": "Not Allowed",
    "VALIDATION_FAILED": "Validation Failed",
    "ILLEGAL_TRANSITION": "Illegal Transition",
    "CONCURRENT_MODIFICATION": "Conflict",
}

user_option = click.option(
    "-u", "--user", "user_id", required=True, help="Acting user ID."
)
role_option = click.option(
    "-r",
    "--role",
    type=click.Choice(["buyer", "seller"]),
    default=None,
    help="Role to act in (defaults to the user's role in the trade).",
)


def _report_error(e: TradeEngineError) -> None:
    """Print a trade engine error and exit."""
    message = e.message
    if isinstance(e, ValidationFailedError) and e.fields:
        message += "\n\n" + "\n".join(f"  • {name}" for name in e.fields)
    print_error(message, ERROR_TITLES.get(e.code, "Error"))
    raise SystemExit(1)


def _resolve_role(service, trade_id: str, user_id: str, role: Optional[str]) -> str:
    """Use the explicit role, else the role the user plays in the trade."""
    if role:
        return role
    trade = service.get_trade(trade_id)
    resolved = trade.role_of(user_id)
    return resolved.value if resolved else "buyer"


def _print_result(trade, verb: str) -> None:
    console.print(Panel(
        f"[bold]{trade.id}[/bold] {verb}\n\n"
        f"Status: [cyan]{trade.status.value}[/cyan]",
        title="[bold green]Done[/bold green]",
        border_style="green",
    ))


@click.command()
@click.argument("trade_id")
@user_option
@role_option
@click.option("--company", help="Shipping destination company name.")
@click.option("--postal-code", help="Shipping postal code.")
@click.option("--address", help="Shipping address.")
@click.option("--tel", help="Shipping phone number.")
@click.option("--person", help="Receiving contact person.")
@click.pass_context
def approve(
    ctx: click.Context,
    trade_id: str,
    user_id: str,
    role: Optional[str],
    company: Optional[str],
    postal_code: Optional[str],
    address: Optional[str],
    tel: Optional[str],
    person: Optional[str],
) -> None:
    """Approve a trade as the buyer.

    Shipping options override the trade's current shipping info;
    all of company, address, tel and person must end up filled in.

    \b
    Examples:
      pachinavi approve T-REQ-5001 -u user-a
      pachinavi approve T-REQ-5002 -u user-b --person "Hanako Sato"
    """
    service = get_service(ctx)
    try:
        trade = service.get_trade(trade_id)
        overrides = {
            "company_name": company,
            "postal_code": postal_code,
            "address": address,
            "tel": tel,
            "person_name": person,
        }
        overrides = {k: v for k, v in overrides.items() if v is not None}
        shipping = trade.shipping.model_copy(update=overrides)
        trade = service.approve(
            trade_id,
            user_id,
            _resolve_role(service, trade_id, user_id, role),
            shipping=shipping,
        )
    except TradeEngineError as e:
        _report_error(e)
    _print_result(trade, "approved")


@click.command()
@click.argument("trade_id")
@user_option
@role_option
@click.pass_context
def pay(ctx: click.Context, trade_id: str, user_id: str, role: Optional[str]) -> None:
    """Report payment of a trade as the buyer.

    \b
    Examples:
      pachinavi pay T-REQ-5001 -u user-a
    """
    from pachinavi.engine.totals import format_yen

    service = get_service(ctx)
    try:
        trade = service.mark_paid(
            trade_id, user_id, _resolve_role(service, trade_id, user_id, role)
        )
    except TradeEngineError as e:
        _report_error(e)
    _print_result(trade, f"marked paid ({format_yen(trade.payment_amount)})")


@click.command()
@click.argument("trade_id")
@user_option
@role_option
@click.pass_context
def complete(ctx: click.Context, trade_id: str, user_id: str, role: Optional[str]) -> None:
    """Confirm payment receipt and complete a trade as the seller.

    \b
    Examples:
      pachinavi complete T-REQ-5001 -u user-b
    """
    service = get_service(ctx)
    try:
        trade = service.mark_completed(
            trade_id, user_id, _resolve_role(service, trade_id, user_id, role)
        )
    except TradeEngineError as e:
        _report_error(e)
    _print_result(trade, "completed")


@click.command()
@click.argument("trade_id")
@user_option
@role_option
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def cancel(
    ctx: click.Context, trade_id: str, user_id: str, role: Optional[str], confirm: bool
) -> None:
    """Cancel a trade that is still in progress.

    \b
    Examples:
      pachinavi cancel T-REQ-5002 -u user-a
      pachinavi cancel T-REQ-5002 -u user-a --confirm
    """
    if not confirm and not click.confirm(f"Cancel trade {trade_id}?", default=False):
        console.print("[dim]Cancel aborted.[/dim]")
        return

    service = get_service(ctx)
    try:
        trade = service.cancel(trade_id, user_id, _resolve_role(service, trade_id, user_id, role))
    except TradeEngineError as e:
        _report_error(e)
    _print_result(trade, "canceled")


@click.command()
@click.argument("trade_id")
@user_option
@click.option("--company", help="Destination company name.")
@click.option("--postal-code", help="Postal code.")
@click.option("--address", help="Destination address.")
@click.option("--tel", help="Destination phone number.")
@click.option("--person", help="Receiving contact person.")
@click.pass_context
def shipping(
    ctx: click.Context,
    trade_id: str,
    user_id: str,
    company: Optional[str],
    postal_code: Optional[str],
    address: Optional[str],
    tel: Optional[str],
    person: Optional[str],
) -> None:
    """Edit the shipping destination before approval (buyer only).

    \b
    Examples:
      pachinavi shipping T-REQ-5002 -u user-b --person "Hanako Sato"
    """
    service = get_service(ctx)
    try:
        trade = service.get_trade(trade_id)
        overrides = {
            "company_name": company,
            "postal_code": postal_code,
            "address": address,
            "tel": tel,
            "person_name": person,
        }
        overrides = {k: v for k, v in overrides.items() if v is not None}
        trade = service.update_shipping(
            trade_id, user_id, "buyer", trade.shipping.model_copy(update=overrides)
        )
    except TradeEngineError as e:
        _report_error(e)

    missing = trade.shipping.missing_fields()
    note = (
        f"\n\n[yellow]Still missing before approval: {', '.join(missing)}[/yellow]"
        if missing else ""
    )
    console.print(Panel(
        f"Shipping info of [bold]{trade.id}[/bold] updated.{note}",
        title="[bold green]Done[/bold green]",
        border_style="green",
    ))


@click.command()
@click.argument("trade_id")
@click.argument("name")
@user_option
@click.pass_context
def contact(ctx: click.Context, trade_id: str, name: str, user_id: str) -> None:
    """Register a buyer-side contact person (buyer only).

    \b
    Examples:
      pachinavi contact T-REQ-5001 "Susumu Yamamoto" -u user-a
    """
    service = get_service(ctx)
    try:
        new_contact = service.add_contact(trade_id, user_id, "buyer", name)
    except TradeEngineError as e:
        _report_error(e)
    console.print(f"[green]✓[/green] Added contact {new_contact.name} ({new_contact.contact_id})")
