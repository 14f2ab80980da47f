# Database connection setup
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.exc import DBAPIError, DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings
from .core.exceptions import NotebookError, StoreError, StoreUnavailableError
from .core.logging import get_logger
from .core.models.base import BaseModel

logger = get_logger("database")


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite_connections(engine: AsyncEngine) -> None:
    """Per-connection SQLite setup.

    SQLite ignores FOREIGN KEY clauses unless asked on every connection, and
    its built-in lower() only folds ASCII, which breaks case-insensitive
    search on accented text.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for a database URL."""
    kwargs = {"echo": echo}
    if _is_sqlite(url) and ":memory:" in url:
        # keep the same memory DB across connections
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(url, **kwargs)
    if _is_sqlite(url):
        _configure_sqlite_connections(engine)
    return engine


class Database:
    """Connection provider: one session and one transaction per store operation."""

    def __init__(self, url: Optional[str] = None, echo: bool = False, engine: Optional[AsyncEngine] = None):
        if engine is None:
            if url is None:
                raise ValueError("Either url or engine is required")
            engine = build_engine(url, echo=echo)
        self.engine = engine
        self.session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        settings = settings or get_settings()
        return cls(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def transaction(self, operation: str = "operation") -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction.

        Commits when the block exits normally and rolls back on any exception.
        SQLAlchemy errors are logged and re-raised as StoreError or
        StoreUnavailableError; NotebookError subclasses pass through untouched.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except NotebookError:
            raise
        except (OperationalError, InterfaceError, DisconnectionError) as e:
            logger.error(f"Store unavailable during {operation}: {e}")
            raise StoreUnavailableError(f"Store unavailable during {operation}", operation=operation) from e
        except DBAPIError as e:
            if e.connection_invalidated:
                logger.error(f"Connection lost during {operation}: {e}")
                raise StoreUnavailableError(f"Connection lost during {operation}", operation=operation) from e
            logger.error(f"Store error during {operation}: {e}")
            raise StoreError(f"Store error during {operation}", operation=operation) from e
        except SQLAlchemyError as e:
            logger.error(f"Store error during {operation}: {e}")
            raise StoreError(f"Store error during {operation}", operation=operation) from e
        except OSError as e:
            logger.error(f"Store unreachable during {operation}: {e}")
            raise StoreUnavailableError(f"Store unreachable during {operation}", operation=operation) from e

    async def create_tables(self) -> None:
        """Create all tables."""
        from .core import models  # noqa: F401 - register every mapped class

        async with self.engine.begin() as conn:
            await conn.run_sync(BaseModel.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseModel.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


_database: Optional[Database] = None


def get_database() -> Database:
    """Get the process-wide database built from settings."""
    global _database
    if _database is None:
        _database = Database.from_settings()
    return _database
