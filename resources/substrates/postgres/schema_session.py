"""Service-schema scoped session helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from resources.substrates.postgres.session import transactional_session


class ServiceSchemaSessionProvider:
    """Provide transactional sessions pinned to one service-owned schema."""

    def __init__(self, *, session_factory: sessionmaker[Session], schema: str) -> None:
        if not schema or not schema.replace("_", "").isalnum():
            raise ValueError("postgres schema must be non-empty alphanumeric/underscore")
        self._session_factory = session_factory
        self._schema = schema

    @property
    def schema(self) -> str:
        return self._schema

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a transaction-scoped session with local ``search_path`` set."""
        with transactional_session(self._session_factory) as db:
            db.execute(text(f"SET LOCAL search_path TO {self._schema}, public"))
            yield db
