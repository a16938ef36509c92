"""Health-check utilities for the Postgres shared substrate."""

from __future__ import annotations

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError


def ping(engine: Engine, *, timeout_seconds: float = 1.0) -> bool:
    """Return ``True`` when the database answers a trivial query in time.

    Connection and query failures report ``False``; a health probe never
    raises for an unreachable database.
    """
    timeout_ms = max(1, int(timeout_seconds * 1000))
    try:
        with engine.connect() as conn:
            conn.execute(
                text("SELECT set_config('statement_timeout', :timeout_value, false)"),
                {"timeout_value": f"{timeout_ms}ms"},
            )
            conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        return False
    return True
