"""Async engine and session factory.

The stores never own a session: applications build one here (or anywhere
else) and hand it to :class:`~sqlidentity.stores.user_store.UserStore` /
:class:`~sqlidentity.stores.role_store.RoleStore`.
"""

from __future__ import annotations

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from sqlidentity.core.config import get_settings
from sqlidentity.core.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let pysqlite/aiosqlite honour ``begin_nested()``.

    The driver defers BEGIN until the first DML statement, which breaks
    SAVEPOINT; take over transaction demarcation instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_engine_from_settings(database_url: str | None = None, **kwargs) -> AsyncEngine:
    settings = get_settings()
    url = database_url or settings.database_url
    engine = create_async_engine(url, echo=settings.echo_sql, **kwargs)
    if url.startswith("sqlite"):
        enable_sqlite_savepoints(engine)
    logger.debug("Engine created", dialect=engine.dialect.name)
    return engine


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_engine_from_settings()
    return _engine


def get_session_factory() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(), expire_on_commit=False, autoflush=True
        )
    return _session_factory


async def create_schema(engine: AsyncEngine, metadata: MetaData | None = None) -> None:
    """Create the identity tables if missing. Development helper, not a migration tool."""
    if metadata is None:
        from sqlidentity.models import Base

        metadata = Base.metadata
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Identity schema ensured", tables=sorted(metadata.tables))
