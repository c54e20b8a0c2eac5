"""Run store coroutines from synchronous click commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click
from sqlalchemy.ext.asyncio import async_sessionmaker

from sqlidentity.core.database import create_engine_from_settings
from sqlidentity.models.schema import DEFAULT_SCHEMA
from sqlidentity.stores.role_store import RoleStore
from sqlidentity.stores.user_store import UserStore

T = TypeVar("T")


def run_with_stores(
    ctx: click.Context, fn: Callable[[UserStore, RoleStore], Awaitable[T]]
) -> T:
    """Open one session, hand both stores to *fn*, commit on success."""

    async def _run() -> T:
        engine = create_engine_from_settings(ctx.obj["database_url"])
        factory = async_sessionmaker(engine, expire_on_commit=False)
        try:
            async with factory() as session:
                try:
                    result = await fn(
                        UserStore(session, DEFAULT_SCHEMA), RoleStore(session, DEFAULT_SCHEMA)
                    )
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
                return result
        finally:
            await engine.dispose()

    return asyncio.run(_run())
