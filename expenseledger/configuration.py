"""Mini README: Centralised configuration for the expenseledger service.

Structure:
    * ExpenseLedgerSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read environment variables (prefixed with
    ``EXPENSELEDGER_``), pick the state file used by the CLI, and choose the
    host and port the HTTP interface binds to. The configuration is cached so
    validation runs only once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings

from .ledger.models import is_null_identity


class ExpenseLedgerSettings(BaseSettings):
    """Runtime configuration for the expense ledger."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    owner: str = Field(
        "owner",
        description="Identity that owns freshly created ledgers.",
        min_length=1,
    )
    state_file: Optional[Path] = Field(
        None,
        description=(
            "JSON file holding the persisted ledger state."
            " Leave unset to keep the HTTP interface's ledger in memory."
        ),
    )
    caller_header: str = Field(
        "X-Caller-Identity",
        description="HTTP header carrying the caller identity for gated routes.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the HTTP service exposes.",
        ge=1,
        le=65535,
    )
    notification_log_size: int = Field(
        1000,
        description="Most recent notifications kept for the /notifications route.",
        ge=1,
    )
    log_level: str = Field("INFO", description="Root logging level name.")

    class Config:
        env_prefix = "EXPENSELEDGER_"
        env_file = ".env"
        case_sensitive = False

    @validator("owner")
    def _reject_null_owner(cls, value: str) -> str:
        """Refuse owners that could never be matched by a real caller."""

        if is_null_identity(value):
            raise ValueError("owner must not be the null identity")
        return value

    @validator("state_file", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Optional[Path]:
        """Expand user directories and make sure the parent directory exists."""

        if value is None or value == "":
            return None
        path = Path(value).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


@lru_cache()
def get_settings() -> ExpenseLedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return ExpenseLedgerSettings()
