"""Command Line Interface for Discharge Desk.

This module provides a terminal front end to the discharge approval board
using Typer and Rich: list pending discharges, approve or reject one, seed a
store from a JSON fixture.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from discharge_desk import __version__
from discharge_desk.dashboard.services.approval_board import DischargeApprovalBoard
from discharge_desk.domain.enums import DischargeAction, NoticeLevel
from discharge_desk.domain.models import StaffIdentity
from discharge_desk.domain.ports import DocumentStorePort, ValidationError
from discharge_desk.infrastructure.logging_config import setup_logging
from discharge_desk.infrastructure.seed_loader import load_seed_file
from discharge_desk.infrastructure.settings import settings

app = typer.Typer(
    name="discharge-desk",
    help="Discharge Desk: approve or reject pending patient discharges",
    add_completion=False
)
console = Console()

NOTICE_STYLES = {
    NoticeLevel.SUCCESS: "[green]✓[/green]",
    NoticeLevel.INFO: "[blue]i[/blue]",
    NoticeLevel.WARNING: "[yellow]⚠[/yellow]",
    NoticeLevel.ERROR: "[red]✗[/red]",
}


def create_store_cli() -> DocumentStorePort:
    """Create the document store from configuration (CLI wrapper)."""
    try:
        from discharge_desk.main import create_document_store
        return create_document_store(settings.store_config)
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to create document store: {str(e)}")
        raise typer.Exit(code=1)


def print_notices(board: DischargeApprovalBoard) -> list:
    notices = board.drain_notices()
    for notice in notices:
        console.print(f"{NOTICE_STYLES[notice.level]} {notice.message}")
    return notices


def render_pending_table(board: DischargeApprovalBoard) -> None:
    cards = board.cards()
    if not cards:
        console.print("[dim]No patients are currently pending discharge approval.[/dim]")
        return

    table = Table(title="Discharge Approval", show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Patient")
    table.add_column("Hosp. No", style="dim")
    table.add_column("Location")
    table.add_column("Total Bill", justify="right")
    table.add_column("Amount Paid", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("Approve")

    for card in cards:
        balance_style = "red" if card.financials.has_balance else "green"
        table.add_row(
            card.id,
            f"{card.name} {card.surname}",
            card.hospital_number,
            card.location or "-",
            f"${card.financials.total_bill:.2f}",
            f"${card.financials.amount_paid:.2f}",
            f"[{balance_style}]${card.financials.balance:.2f}[/{balance_style}]",
            "[green]available[/green]" if card.approve_enabled else f"[dim]{card.approve_hint}[/dim]",
        )
    console.print(table)


def run_decision(
    patient_id: str,
    action: DischargeAction,
    actor: StaffIdentity,
    reason: Optional[str] = None,
) -> None:
    store = create_store_cli()
    try:
        board = DischargeApprovalBoard(store, actor=actor)
        board.load()
        if print_notices(board):
            raise typer.Exit(code=1)

        patient = board.find_patient(patient_id)
        if patient is None:
            console.print(f"[red]✗[/red] Patient {patient_id} is not pending discharge")
            raise typer.Exit(code=1)

        if not board.open_modal(patient_id, action):
            console.print(f"[yellow]⚠[/yellow] Cannot approve with an outstanding balance "
                          f"(${patient.financials.balance:.2f})")
            raise typer.Exit(code=1)
        board.set_reason(reason or "")

        console.print(f"Confirm {action.value} for [bold]{patient.full_name}[/bold] ({patient.hospital_number})")
        result = board.confirm()
        print_notices(board)
        raise typer.Exit(code=0 if result.is_success() else 1)
    finally:
        store.close()


def staff_identity(staff_id: str, staff_name: str, staff_surname: str) -> StaffIdentity:
    if not staff_id.strip():
        console.print("[red]✗[/red] A staff id is required (--staff-id or WARD_STAFF_ID)")
        raise typer.Exit(code=1)
    return StaffIdentity(id=staff_id.strip(), name=staff_name, surname=staff_surname)


StaffIdOption = typer.Option("", "--staff-id", envvar="WARD_STAFF_ID", help="Acting staff member id")
StaffNameOption = typer.Option("", "--staff-name", envvar="WARD_STAFF_NAME", help="Acting staff member name")
StaffSurnameOption = typer.Option("", "--staff-surname", envvar="WARD_STAFF_SURNAME", help="Acting staff member surname")


@app.command()
def pending() -> None:
    """List patients pending discharge approval."""
    store = create_store_cli()
    try:
        board = DischargeApprovalBoard(store)
        with console.status("[bold green]Loading pending discharges..."):
            board.load()
        if print_notices(board):
            raise typer.Exit(code=1)
        render_pending_table(board)
    finally:
        store.close()


@app.command()
def approve(
    patient_id: str = typer.Argument(..., help="Patient document id"),
    staff_id: str = StaffIdOption,
    staff_name: str = StaffNameOption,
    staff_surname: str = StaffSurnameOption,
) -> None:
    """Approve a pending discharge (only when no balance is outstanding).

    Examples:
        discharge-desk approve p1 --staff-id u7 --staff-name Grace --staff-surname Hopper
    """
    run_decision(patient_id, DischargeAction.APPROVE, staff_identity(staff_id, staff_name, staff_surname))


@app.command()
def reject(
    patient_id: str = typer.Argument(..., help="Patient document id"),
    reason: str = typer.Option("", "--reason", "-r", help="Reason for rejection (required)"),
    staff_id: str = StaffIdOption,
    staff_name: str = StaffNameOption,
    staff_surname: str = StaffSurnameOption,
) -> None:
    """Reject a pending discharge and notify whoever requested it.

    Examples:
        discharge-desk reject p1 --reason "Awaiting final lab results" --staff-id u7
    """
    run_decision(patient_id, DischargeAction.REJECT, staff_identity(staff_id, staff_name, staff_surname), reason)


@app.command()
def seed(
    seed_file: Path = typer.Argument(..., help="JSON seed file", exists=True, dir_okay=False),
) -> None:
    """Load patients and admission history from a JSON seed file."""
    try:
        operations = load_seed_file(seed_file)
    except ValidationError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)

    store = create_store_cli()
    try:
        result = store.atomic_write(operations)
        if not result.is_success():
            console.print(f"[red]✗[/red] Failed to seed store: {result.error}")
            raise typer.Exit(code=1)
        console.print(f"[green]✓[/green] Wrote {result.value} document(s)")
    finally:
        store.close()


@app.command()
def info() -> None:
    """Display system information and configuration."""
    console.print("[bold blue]System Information[/bold blue]\n")

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    info_table.add_row("Version:", __version__)
    info_table.add_row("Store:", settings.store_config.describe())
    info_table.add_row("Log Level:", settings.log_level)
    info_table.add_row("JSON Logs:", "Enabled" if settings.json_logs else "Disabled")
    console.print(info_table)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version information"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Discharge Desk: approve or reject pending patient discharges."""
    if version:
        console.print(f"Discharge Desk v{__version__}")
        raise typer.Exit()
    setup_logging(use_json=settings.json_logs, log_level="DEBUG" if verbose else settings.log_level)
    if verbose:
        logging.getLogger(__name__).debug("Verbose logging enabled")
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


if __name__ == "__main__":
    app()
