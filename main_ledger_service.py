"""Mini README: Entry point CLI for the expense ledger.

This script exposes a Typer CLI that starts the FastAPI service and runs
individual ledger operations against a JSON state file. Gated commands take
the caller identity through ``--caller``; settings come from
``EXPENSELEDGER_`` environment variables when options are omitted.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional

import typer
import uvicorn

from expenseledger.configuration import get_settings
from expenseledger.ledger import ExpenseLedger, JsonFileLedgerStore, LedgerError
from expenseledger.logging_utils import configure_root_logger

cli = typer.Typer(help="Run and manage the single-owner expense ledger.")

DEFAULT_STATE_FILE = Path("ledger.json")


def _open_ledger(state_file: Optional[Path]) -> ExpenseLedger:
    settings = get_settings()
    configure_root_logger(settings.log_level)
    path = state_file or settings.state_file or DEFAULT_STATE_FILE
    return ExpenseLedger(JsonFileLedgerStore(path, owner=settings.owner))


def _fail(error: LedgerError) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


StateFileOption = typer.Option(None, "--state-file", help="JSON file holding the ledger state.")
CallerOption = typer.Option(..., "--caller", help="Identity performing the operation.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the 0.0.0.0 / :: bind addresses directly.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting expense ledger on {effective_host}:{effective_port}.\n"
        f"API available at http://{browser_host}:{effective_port}"
    )
    uvicorn.run(
        "expenseledger.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def add(
    title: str = typer.Argument(..., help="Short label for the expense."),
    amount: int = typer.Argument(..., help="Amount in the smallest unit."),
    caller: str = CallerOption,
    state_file: Optional[Path] = StateFileOption,
) -> None:
    """Record an expense and print its id."""

    ledger = _open_ledger(state_file)
    try:
        expense_id = ledger.add_expense(caller, title, amount)
    except LedgerError as error:
        _fail(error)
    typer.echo(str(expense_id))


@cli.command()
def remove(
    expense_id: int = typer.Argument(..., help="Id of the expense to remove."),
    caller: str = CallerOption,
    state_file: Optional[Path] = StateFileOption,
) -> None:
    """Tombstone an expense."""

    ledger = _open_ledger(state_file)
    try:
        ledger.remove_expense(caller, expense_id)
    except LedgerError as error:
        _fail(error)
    typer.echo(f"Removed expense {expense_id}")


@cli.command()
def show(
    expense_id: int = typer.Argument(..., help="Id of the expense to display."),
    state_file: Optional[Path] = StateFileOption,
) -> None:
    """Print a single expense."""

    ledger = _open_ledger(state_file)
    try:
        expense = ledger.get_expense(expense_id)
    except LedgerError as error:
        _fail(error)
    typer.echo(f"{expense.id}\t{expense.title}\t{expense.amount}\t{expense.timestamp}")


@cli.command()
def ids(state_file: Optional[Path] = StateFileOption) -> None:
    """Print every issued id, removed ones included."""

    ledger = _open_ledger(state_file)
    typer.echo(" ".join(str(expense_id) for expense_id in ledger.get_expense_ids()))


@cli.command()
def total(state_file: Optional[Path] = StateFileOption) -> None:
    """Print the sum of live expense amounts."""

    ledger = _open_ledger(state_file)
    try:
        amount = ledger.total_expenses()
    except LedgerError as error:
        _fail(error)
    typer.echo(str(amount))


@cli.command()
def transfer(
    new_owner: str = typer.Argument(..., help="Identity of the new owner."),
    caller: str = CallerOption,
    state_file: Optional[Path] = StateFileOption,
) -> None:
    """Transfer ledger ownership."""

    ledger = _open_ledger(state_file)
    try:
        ledger.transfer_ownership(caller, new_owner)
    except LedgerError as error:
        _fail(error)
    typer.echo(f"Ownership transferred to {new_owner}")


if __name__ == "__main__":
    cli()
