"""Command-line interface for the rewards service."""

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from spinrewards.accounts.service import account_service
from spinrewards.logging_config import configure_logging, get_logger
from spinrewards.referral.service import referral_service
from spinrewards.spins.service import spin_service
from spinrewards.storage.db import db
from spinrewards.withdrawals.models import WithdrawalStatus
from spinrewards.withdrawals.service import withdrawal_service

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="spinrewards",
    help="Spin rewards service - operator commands",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


@app.command("init")
def init_database() -> None:
    """Initialize the database and create tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")
    db.create_tables()
    console.print("[bold green]✓[/bold green] Database initialized successfully")


@app.command("serve")
def serve(
    host: Annotated[str, typer.Option("--host", "-h", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Bind port")] = 8000,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Run the HTTP API."""
    import uvicorn

    console.print(f"[bold blue]Serving on http://{host}:{port}[/bold blue]")
    uvicorn.run("spinrewards.api.main:app", host=host, port=port, reload=reload)


@app.command("account")
def show_account(
    email: Annotated[str, typer.Argument(help="Account email")],
) -> None:
    """Show one account with today's spins and referral count."""
    account = account_service.get_by_email(email)
    if not account:
        console.print(f"[red]No account with email {email}[/red]")
        raise typer.Exit(code=1)

    count, remaining = spin_service.remaining_today(account.id)

    console.print(f"[bold]Account ID:[/bold] {account.id}")
    console.print(f"[bold]Username:[/bold] {account.username}")
    console.print(f"[bold]Email:[/bold] {account.email}")
    console.print(f"[bold]Points:[/bold] {account.points}")
    console.print(f"[bold]Referral code:[/bold] {account.referral_code}")
    console.print(f"[bold]Referred by:[/bold] {account.referred_by_id or '-'}")
    console.print(f"[bold]Referrals:[/bold] {referral_service.count_for_referrer(account.id)}")
    console.print(f"[bold]Spins today:[/bold] {count} ({remaining} left)")


@app.command("withdrawals")
def list_withdrawals(
    status: Annotated[
        Optional[WithdrawalStatus],
        typer.Option("--status", "-s", help="Only show this disposition"),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max rows")] = 100,
) -> None:
    """List withdrawal requests (read-only)."""
    requests = withdrawal_service.list_by_status(status, limit=limit)

    if not requests:
        console.print("[yellow]No withdrawal requests found[/yellow]")
        return

    table = Table(title="Withdrawal requests")
    table.add_column("ID", style="cyan")
    table.add_column("Account", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("USD", justify="right")
    table.add_column("Destination", style="green")
    table.add_column("Status")
    table.add_column("Created At")

    for w in requests:
        table.add_row(
            str(w.id),
            str(w.account_id),
            str(w.amount),
            f"{withdrawal_service.usd_value(w.amount):.2f}",
            w.destination,
            w.status,
            w.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


if __name__ == "__main__":
    app()
