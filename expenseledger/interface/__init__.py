"""Mini README: HTTP interface package for the expense ledger.

Exposes the FastAPI application factory used by the CLI and by uvicorn's
factory mode.
"""

from .web_app import build_ledger, create_application

__all__ = ["build_ledger", "create_application"]
