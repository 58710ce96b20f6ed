"""CLI for Household Ledger using Typer."""

import logging
import sys
from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import LedgerError
from .models import CurrencySummary, GroupSnapshot, MemberDebtSummary
from .money import Money
from .service import DebtSummaryService, member_summary
from .sources import InMemorySnapshotSource, JsonSnapshotSource
from .splits import resolve_splits

app = typer.Typer(
    name="household-ledger",
    help="Inspect group balances and suggested settle-up payments",
)

console = Console()


def setup_logging(verbose: bool = False, level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def format_money(money: Money, settings: Settings, use_color: bool = True) -> str:
    """
    Format money in accounting style.

    Negative amounts use parentheses: (85.02 EUR)
    Positive amounts have spaces:      85.02 EUR
    """
    exponent = settings.exponent_for(money.currency)
    major = Decimal(abs(money.amount)).scaleb(-exponent)
    text = f"{major:,.{exponent}f} {money.currency}"
    if money.amount < 0:
        return f"([red]{text}[/red])" if use_color else f"({text})"
    if use_color and money.amount > 0:
        return f" [green]{text}[/green] "
    return f" {text} "


def _names(snapshot: GroupSnapshot) -> dict[int, str]:
    return {member.id: escape(member.name) for member in snapshot.members}


def display_currency(
    summary: CurrencySummary, names: dict[int, str], settings: Settings
):
    """Display balances and payments for one currency."""
    balances = Table(
        title=f"Balances ({summary.currency})",
        show_header=True,
        header_style="bold magenta",
    )
    balances.add_column("Member", style="cyan")
    balances.add_column("Balance", justify="right")
    for member_id, balance in summary.balances.items():
        balances.add_row(names.get(member_id, str(member_id)), format_money(balance, settings))
    console.print(balances)

    if not summary.debts:
        console.print(f"[green]All settled up in {summary.currency}.[/green]\n")
        return

    payments = Table(
        title=f"Suggested Payments ({summary.currency})",
        show_header=True,
        header_style="bold magenta",
    )
    payments.add_column("From", style="cyan")
    payments.add_column("To", style="cyan")
    payments.add_column("Amount", justify="right")
    for debt in summary.debts:
        payments.add_row(
            names.get(debt.from_member_id, str(debt.from_member_id)),
            names.get(debt.to_member_id, str(debt.to_member_id)),
            format_money(debt.amount, settings, use_color=False),
        )
    console.print(payments)
    console.print()


def display_member(view: MemberDebtSummary, names: dict[int, str], settings: Settings):
    """Display the "you owe / you are owed" view for one member."""
    name = names.get(view.member_id, str(view.member_id))
    console.print(f"\n[bold]{name}[/bold]")
    for balance in view.balances.values():
        console.print(f"  Balance: {format_money(balance, settings)}")
    for debt in view.owes:
        to_name = names.get(debt.to_member_id, str(debt.to_member_id))
        console.print(
            f"  You owe {to_name}: {format_money(debt.amount, settings, use_color=False)}"
        )
    for debt in view.owed:
        from_name = names.get(debt.from_member_id, str(debt.from_member_id))
        console.print(
            f"  {from_name} owes you: {format_money(debt.amount, settings, use_color=False)}"
        )
    if not view.owes and not view.owed:
        console.print("  [green]Nothing to settle.[/green]")


@app.command()
def summary(
    snapshot_path: Path = typer.Argument(..., help="Path to a group snapshot JSON file"),
    member: int | None = typer.Option(
        None, "--member", "-m", help="Show one member's view"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Show balances and suggested settle-up payments for a group snapshot.
    """
    try:
        settings = load_settings()
        setup_logging(verbose, settings.log_level)

        snapshot = JsonSnapshotSource(snapshot_path).read()
        service = DebtSummaryService(settings, InMemorySnapshotSource([snapshot]))
        group_summary = service.get_group_summary(snapshot.group_id)
        names = _names(snapshot)

        if member is not None:
            display_member(member_summary(group_summary, member), names, settings)
            return

        console.print(f"\n[bold]Group {snapshot.group_id}[/bold]\n")
        if not group_summary.currencies:
            console.print("[yellow]No expenses recorded.[/yellow]")
            return
        for currency_summary in group_summary.currencies.values():
            display_currency(currency_summary, names, settings)

    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            raise
        sys.exit(1)


@app.command()
def splits(
    snapshot_path: Path = typer.Argument(..., help="Path to a group snapshot JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Show how each expense in a snapshot is divided among its participants.
    """
    try:
        settings = load_settings()
        setup_logging(verbose, settings.log_level)

        snapshot = JsonSnapshotSource(snapshot_path).read()
        names = _names(snapshot)

        table = Table(title="Resolved Splits", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim", width=8)
        table.add_column("Description", style="cyan", width=24)
        table.add_column("Paid By", style="cyan")
        table.add_column("Policy", style="yellow", no_wrap=True)
        table.add_column("Shares", no_wrap=False)

        for expense in snapshot.expenses:
            try:
                resolved = resolve_splits(expense, settings.percentage_epsilon)
            except LedgerError as e:
                e.tag(expense_id=expense.id, group_id=snapshot.group_id)
                raise
            shares = ", ".join(
                f"{names.get(s.member_id, str(s.member_id))}: "
                f"{format_money(s.amount, settings, use_color=False).strip()}"
                for s in resolved
            )
            desc = escape(expense.description or "")
            if expense.is_settlement:
                desc = f"(settlement) {desc}".strip()
            table.add_row(
                str(expense.id),
                desc[:24] + "..." if len(desc) > 24 else desc,
                names.get(expense.payer_id, str(expense.payer_id)),
                expense.policy.value,
                shares,
            )

        console.print(table)

    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    app()
