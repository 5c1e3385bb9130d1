"""
Petstagram Backend — Data Access Layer
========================================

What:  The `Database` object: async SQLAlchemy engine (the connection pool),
       session factory, idempotent schema setup, and the FastAPI session
       dependency.
How:   One `Database` is constructed at process start by the app factory and
       stored on `app.state.database`. Route handlers receive a session
       through `get_db_session`, which commits on success and rolls back on
       error. There is no module-level engine.
Who:   The app lifespan (setup/dispose), the session dependency, the health
       check, and tests that build their own instance against SQLite.

Connection Pooling:
    pool_size     = db_pool_initial_capacity (default 10)
    max_overflow  = db_pool_max_capacity - db_pool_initial_capacity (default 40)
    pool_timeout  = db_pool_timeout (acquisition timeout, default 30s)
    pool_pre_ping = validates connections before use
    pool_recycle  = 3600s

    Each request holds exactly one pooled connection for the lifetime of its
    session and returns it on completion or failure.

Schema Setup:
    Tables are created one at a time, in foreign-key order, each in its own
    transaction (a failed CREATE aborts the surrounding transaction on
    PostgreSQL). "Table already exists" is benign and logged at INFO. Any
    other failure is logged at ERROR and recorded in the returned
    SchemaReport; the caller decides whether to abort startup.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncGenerator, AsyncIterator, Dict, List, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from petstagram.config import Settings
from petstagram.exceptions import SchemaAlreadyExists, SchemaError

logger = logging.getLogger(__name__)

# Creation order; likes and comments reference posts
ENTITY_TABLES = ("posts", "user_authentications", "likes", "comments")

# PostgreSQL SQLSTATE for duplicate_table
DUPLICATE_TABLE_SQLSTATE = "42P07"


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every entity model registers its table on `Base.metadata`, which both
    schema setup and Alembic read.
    """
    pass


# ── Schema Setup Result ───────────────────────────────────────────────────
@dataclass
class SchemaReport:
    """
    Outcome of `Database.setup_schema()`, one entry per table.

    created:  tables created by this run
    existing: tables that were already present (benign)
    failed:   tables that could not be created, with the error
    """

    created: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    failed: Dict[str, SchemaError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_errors(self) -> None:
        """Raise a single SchemaError summarising every failed table."""
        if self.ok:
            return
        tables = ", ".join(self.failed)
        raise SchemaError(
            message=f"Could not create table(s): {tables}",
            context={
                "tables": {name: err.context for name, err in self.failed.items()},
            },
        )


def is_duplicate_table_error(exc: BaseException) -> bool:
    """
    True when `exc` means the table already exists.

    PostgreSQL reports SQLSTATE 42P07. The asyncpg adapter exposes it on the
    wrapped DBAPI error or on its cause; SQLite only has the message text.
    """
    orig = getattr(exc, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code == DUPLICATE_TABLE_SQLSTATE:
            return True
    return "already exists" in str(orig if orig is not None else exc).lower()


def is_transient_connection_error(exc: BaseException) -> bool:
    """Connection-level failures worth retrying during startup."""
    if isinstance(exc, SchemaError):
        return False
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (OSError, InterfaceError, PoolTimeoutError))


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores FOREIGN KEY clauses unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the connection pool and schema for the four entity tables.

    Usage:
        database = Database(settings)
        report = await database.setup_schema()
        report.raise_for_errors()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        url = settings.sqlalchemy_url
        self.is_sqlite = url.get_backend_name() == "sqlite"

        engine_kwargs = {
            "pool_pre_ping": settings.db_pool_pre_ping,
            "echo": settings.log_level == "DEBUG",
        }
        # SQLite pools reject the sizing arguments
        if not self.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_initial_capacity,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: entities stay readable after the
        # dependency commits, while the response is being serialized
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    # ── Sessions ──────────────────────────────────────────────────────────
    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        One session (and one pooled connection) per unit of work.

        Commits when the block exits normally, rolls back and re-raises on
        any exception, and always returns the connection to the pool.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    # ── Schema ────────────────────────────────────────────────────────────
    async def setup_schema(self) -> SchemaReport:
        """
        Attempt to create every entity table.

        Safe to call on every process start: tables that already exist are
        reported in `SchemaReport.existing` and left untouched.
        """
        # Registers the models on Base.metadata
        import petstagram.models  # noqa: F401

        report = SchemaReport()
        for name in ENTITY_TABLES:
            try:
                await self._create_table(name)
            except SchemaAlreadyExists as exc:
                logger.info("Table %s already exists", name)
                report.existing.append(exc.table or name)
            except SchemaError as exc:
                logger.error(
                    "Database connection error while creating table %s: %s",
                    name,
                    exc.context.get("error", exc.message),
                )
                report.failed[name] = exc
            else:
                logger.info("Created table %s", name)
                report.created.append(name)
        return report

    async def _create_table(self, name: str) -> None:
        table = Base.metadata.tables[name]
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient_connection_error),
            stop=stop_after_attempt(self.settings.schema_retry_attempts),
            wait=wait_exponential_jitter(
                initial=self.settings.schema_retry_min_wait,
                max=self.settings.schema_retry_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    async with self.engine.begin() as conn:
                        await conn.run_sync(table.create, checkfirst=False)
        except (SQLAlchemyError, OSError) as exc:
            if is_duplicate_table_error(exc):
                raise SchemaAlreadyExists(name) from exc
            raise SchemaError(
                message=f"Could not create table {name}",
                table=name,
                context={"error_type": type(exc).__name__, "error": str(exc)},
            ) from exc

    # ── Lifecycle Helpers ─────────────────────────────────────────────────
    async def ping(self) -> bool:
        """SELECT 1 through the pool; False when the database is unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Database ping failed: %s", str(exc))
            return False
        return True

    async def dispose(self) -> None:
        """Close every pooled connection. Called on application shutdown."""
        await self.engine.dispose()


# ── FastAPI Dependencies ──────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """The process-wide Database created by the app factory."""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database has not been initialised on app.state")
    return database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Example usage in a route:
        @router.get("/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with get_database(request).session() as session:
        yield session
