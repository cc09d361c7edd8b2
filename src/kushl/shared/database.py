"""
Database session management with SQLAlchemy.

The key-value store is single-device, so the default backend is a local
SQLite file. Sessions are synchronous; async callers hop onto a worker
thread (see ``kushl.recurrence.supervisor``).
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kushl.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for ORM tables (create_all/drop_all in tests)."""


def _engine_options(database_url: str, echo: bool) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": echo}
    if database_url.startswith("sqlite"):
        # Sweeps run on a worker thread and share the same database.
        options["connect_args"] = {"check_same_thread": False}
        if make_url(database_url).database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    else:
        options.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return options


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, database_url: str | None = None, echo: bool | None = None) -> None:
        """Initialize database manager.

        Args:
            database_url: Optional database URL override.
            echo: Optional SQL echo override (defaults to settings.debug).
        """
        settings = get_settings()
        self._database_url = database_url or settings.storage_url
        self._echo = settings.debug if echo is None else echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def database_url(self) -> str:
        return self._database_url

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = create_engine(
                self._database_url,
                **_engine_options(self._database_url, self._echo),
            )
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Create a new database session context that commits on success."""
        with self.session_factory() as session:
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

    def create_all(self) -> None:
        """Create every registered table that does not exist yet."""
        # Register ORM tables on Base.metadata.
        import kushl.storage.models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None


__all__ = [
    "Base",
    "DatabaseManager",
]
