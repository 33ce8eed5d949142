"""Trade listing and statement commands for PachiNavi CLI.

Shows each user's trades with the pending todo, the settlement
statement of one trade, and its message history.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from pachinavi.cli.context import console, get_service, get_settings, get_store, print_error
from pachinavi.exceptions import TradeEngineError
from pachinavi.models import Role

SECTION_STYLES = {
    "approval": "yellow",
    "payment": "magenta",
    "confirmation": "cyan",
    "completed": "green",
    "canceled": "dim",
}


@click.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(force: bool) -> None:
    """Create a template configuration file.

    \b
    Examples:
      pachinavi init
    """
    from pachinavi.config import create_template_config, get_config_path

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {config_path}")
        return

    path = create_template_config(config_path)
    console.print(f"[green]✓[/green] Created config at [cyan]{path}[/cyan]")


@click.command()
@click.pass_context
def seed(ctx: click.Context) -> None:
    """Load the demo trades into the database.

    Trades that already exist are left untouched.
    """
    from pachinavi.db.seed import demo_trades

    settings = get_settings(ctx)
    service = get_service(ctx)
    added = 0
    for trade in demo_trades():
        trade = trade.model_copy(update={"tax_rate": settings.default_tax_rate})
        try:
            service.open_trade(trade)
            added += 1
        except ValueError:
            console.print(f"[dim]{trade.id} already exists, skipped[/dim]")
    console.print(f"[green]✓[/green] Seeded {added} trade(s)")


@click.command("list")
@click.option("-u", "--user", "user_id", required=True, help="User ID to list trades for.")
@click.option("--open", "open_only", is_flag=True, help="Only trades still in progress.")
@click.pass_context
def list_trades(ctx: click.Context, user_id: str, open_only: bool) -> None:
    """List a user's trades with what is pending on each.

    \b
    Examples:
      pachinavi list -u user-a
      pachinavi list -u user-b --open
    """
    from pachinavi.engine.todo import group_by_section
    from pachinavi.engine.totals import compute_totals, format_yen

    service = get_service(ctx)
    rows = service.todo_list(user_id, open_only=open_only)

    if not rows:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title=f"[bold]Trades of {user_id}[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title=f"Trades of {user_id}")
    table.add_column("Trade", style="cyan")
    table.add_column("Role")
    table.add_column("Counterparty")
    table.add_column("Section")
    table.add_column("Todo")
    table.add_column("Action", style="bold")
    table.add_column("Total", justify="right")

    groups = group_by_section((trade for trade, _ in rows), user_id)
    for section, entries in groups.items():
        style = SECTION_STYLES.get(section.value, "white")
        for trade, presentation in entries:
            role = trade.role_of(user_id)
            counterparty = trade.seller if role is Role.BUYER else trade.buyer
            totals = compute_totals(trade.items, trade.tax_rate)
            table.add_row(
                trade.id,
                role.value,
                counterparty.company_name,
                f"[{style}]{section.value}[/{style}]",
                presentation.title,
                presentation.primary_action.label if presentation.primary_action else "-",
                format_yen(totals.total),
            )

    console.print(table)


@click.command()
@click.argument("trade_id")
@click.option("-u", "--user", "user_id", required=True, help="Viewing user ID.")
@click.pass_context
def statement(ctx: click.Context, trade_id: str, user_id: str) -> None:
    """Show the settlement statement of a trade.

    \b
    Examples:
      pachinavi statement T-REQ-5001 -u user-a
    """
    from pachinavi.engine.totals import format_yen, line_amount

    service = get_service(ctx)
    try:
        stmt = service.statement(trade_id, user_id)
    except TradeEngineError as e:
        print_error(e.message)
        raise SystemExit(1)

    trade = stmt.trade
    presentation = stmt.presentation
    notes = stmt.diff_notes

    header = (
        f"Seller: [bold]{stmt.seller_name}[/bold]\n"
        f"Buyer:  [bold]{stmt.buyer_name}[/bold]\n"
        f"Status: [cyan]{trade.status.value}[/cyan] ({presentation.title})\n\n"
        f"{presentation.description}"
    )
    if presentation.primary_action:
        header += f"\n\nNext: [bold green]{presentation.primary_action.label}[/bold green]"
    console.print(Panel(header, title=f"[bold]{trade.id}[/bold]", border_style="blue"))

    items = Table(title="Items")
    items.add_column("Maker")
    items.add_column("Item")
    items.add_column("Qty", justify="right")
    items.add_column("Unit Price", justify="right")
    items.add_column("Amount", justify="right")
    items.add_column("Note", style="yellow")
    for index, item in enumerate(trade.items):
        note = ""
        if index == 0:
            note = " / ".join(n for n in (notes.quantity_note, notes.unit_price_note) if n)
        items.add_row(
            item.maker or "",
            item.item_name,
            str(item.quantity),
            format_yen(item.unit_price),
            format_yen(line_amount(item)),
            note,
        )
    console.print(items)

    totals = stmt.totals
    console.print(
        f"Subtotal: {format_yen(totals.subtotal)}   "
        f"Tax ({trade.tax_rate:.0%}): {format_yen(totals.tax)}   "
        f"[bold]Total: {format_yen(totals.total)}[/bold]"
    )

    extra = [n for n in (notes.storage_note, notes.shipping_count_note, notes.handling_count_note) if n]
    if extra:
        console.print(Panel(
            "\n".join(f"• {n}" for n in extra),
            title="[bold yellow]Differences from listing[/bold yellow]",
            border_style="yellow",
        ))

    ship = trade.shipping
    console.print(Panel(
        f"{ship.company_name or '-'}\n"
        f"〒{ship.postal_code or '-'} {ship.address or '-'}\n"
        f"TEL {ship.tel or '-'}  Contact: {ship.person_name or '-'}\n\n"
        f"Contacts: {', '.join(c.name for c in stmt.contacts) or '-'}",
        title="[bold]Shipping[/bold]",
        border_style="dim",
    ))


@click.command()
@click.argument("trade_id")
@click.option("-u", "--user", "user_id", required=True, help="Viewing user ID.")
@click.option("--post", "body", default=None, help="Post a message before listing.")
@click.pass_context
def messages(ctx: click.Context, trade_id: str, user_id: str, body: Optional[str]) -> None:
    """Show (and optionally post) messages about a trade.

    \b
    Examples:
      pachinavi messages T-REQ-5001 -u user-a
      pachinavi messages T-REQ-5001 -u user-a --post "Shipping on Friday"
    """
    service = get_service(ctx)
    try:
        trade = service.get_trade(trade_id)
        if body:
            role = trade.role_of(user_id)
            if role is None or trade.navi_id is None:
                print_error("Cannot post: not a party, or trade has no reference number")
                raise SystemExit(1)
            receiver = trade.seller if role is Role.BUYER else trade.buyer
            get_store(ctx).post_message(trade.navi_id, user_id, receiver.user_id, body)
        history = service.messages(trade_id, user_id)
    except TradeEngineError as e:
        print_error(e.message)
        raise SystemExit(1)

    if not history:
        console.print("[dim]No messages[/dim]")
        return

    table = Table(title=f"Messages of {trade_id}")
    table.add_column("Time", style="dim")
    table.add_column("From", style="cyan")
    table.add_column("Message")
    for message in history:
        table.add_row(message.timestamp.strftime("%Y/%m/%d %H:%M"), message.sender, message.body)
    console.print(table)
