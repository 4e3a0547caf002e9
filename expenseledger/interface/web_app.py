"""Mini README: FastAPI surface for the expense ledger.

Structure:
    * create_application - application factory wiring ledger routes.
    * build_ledger - constructs the ledger described by the settings.

Gated routes read the caller identity from a request header (see
``ExpenseLedgerSettings.caller_header``); a missing header is treated like
any other non-owner. Ledger exceptions are translated into HTTP errors:
``Unauthorized`` -> 403, ``NotFound`` -> 404, ``InvalidArgument`` -> 400.
Notifications are captured by a ``NotificationLog`` so dashboards can poll
``/notifications``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import JSONResponse

from ..configuration import ExpenseLedgerSettings, get_settings
from ..ledger import (
    ExpenseLedger,
    InMemoryLedgerStore,
    InvalidArgument,
    JsonFileLedgerStore,
    LedgerOverflowError,
    NotFound,
    NotificationLog,
    Unauthorized,
    is_null_identity,
)
from ..logging_utils import configure_root_logger, get_logger

LOGGER = get_logger(__name__)


def build_ledger(settings: ExpenseLedgerSettings) -> ExpenseLedger:
    """Return a ledger on the configured state file, or in memory when unset."""

    if is_null_identity(settings.owner):
        raise InvalidArgument("A ledger cannot be owned by the null identity.")
    if settings.state_file is not None:
        LOGGER.info("Using ledger state file %s", settings.state_file)
        return ExpenseLedger(JsonFileLedgerStore(settings.state_file, owner=settings.owner))
    LOGGER.info("Using in-memory ledger owned by %r", settings.owner)
    return ExpenseLedger(InMemoryLedgerStore(settings.owner))


def create_application(
    ledger: Optional[ExpenseLedger] = None,
    settings: Optional[ExpenseLedgerSettings] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    configure_root_logger(settings.log_level)
    ledger = ledger or build_ledger(settings)
    notification_log = NotificationLog(max_entries=settings.notification_log_size)
    ledger.notifications.subscribe(notification_log)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        ledger.notifications.unsubscribe(notification_log)
        LOGGER.debug("Detached notification log from ledger")

    app = FastAPI(title="Expense Ledger", version="0.1.0", lifespan=lifespan)
    app.state.ledger = ledger
    app.state.notification_log = notification_log

    def caller_of(request: Request) -> Optional[str]:
        return request.headers.get(settings.caller_header)

    @app.get("/")
    async def snapshot() -> JSONResponse:
        """Return owner, index and live expenses in one payload."""

        try:
            payload = ledger.export_snapshot()
        except LedgerOverflowError as error:
            raise HTTPException(status_code=500, detail=str(error)) from error
        LOGGER.debug("Returning snapshot with %s ids", len(payload["expense_ids"]))
        return JSONResponse(payload)

    @app.post("/expenses")
    async def add_expense(
        request: Request,
        title: str = Form(...),
        amount: int = Form(...),
    ) -> JSONResponse:
        """Record an expense on behalf of the owner."""

        try:
            expense_id = ledger.add_expense(caller_of(request), title, amount)
        except Unauthorized as error:
            raise HTTPException(status_code=403, detail=str(error)) from error
        except InvalidArgument as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse({"id": expense_id}, status_code=201)

    @app.delete("/expenses/{expense_id}")
    async def remove_expense(expense_id: int, request: Request) -> JSONResponse:
        """Tombstone an expense."""

        try:
            ledger.remove_expense(caller_of(request), expense_id)
        except Unauthorized as error:
            raise HTTPException(status_code=403, detail=str(error)) from error
        except NotFound as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        return JSONResponse({"id": expense_id, "removed": True})

    @app.get("/expenses/{expense_id}")
    async def get_expense(expense_id: int) -> JSONResponse:
        try:
            expense = ledger.get_expense(expense_id)
        except NotFound as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        return JSONResponse(expense.as_dict())

    @app.get("/expense-ids")
    async def expense_ids() -> JSONResponse:
        """Return every issued id, tombstones included."""

        return JSONResponse({"expense_ids": ledger.get_expense_ids()})

    @app.get("/total")
    async def total() -> JSONResponse:
        try:
            amount = ledger.total_expenses()
        except LedgerOverflowError as error:
            LOGGER.error("Total aggregation overflowed: %s", error)
            raise HTTPException(status_code=500, detail=str(error)) from error
        return JSONResponse({"total": amount, "total_text": str(amount)})

    @app.post("/ownership")
    async def transfer_ownership(
        request: Request,
        new_owner: str = Form(...),
    ) -> JSONResponse:
        """Hand the ledger to a new owner."""

        try:
            ledger.transfer_ownership(caller_of(request), new_owner)
        except Unauthorized as error:
            raise HTTPException(status_code=403, detail=str(error)) from error
        except InvalidArgument as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse({"owner": new_owner})

    @app.get("/notifications")
    async def notifications() -> JSONResponse:
        """Return the most recent notifications published since the application started."""

        return JSONResponse({"notifications": notification_log.export()})

    return app
