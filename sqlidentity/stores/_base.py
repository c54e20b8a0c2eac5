"""Plumbing shared by the user and role stores."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy.exc import MultipleResultsFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sqlidentity.core.cancellation import CancellationToken
from sqlidentity.core.exceptions import (
    InvalidArgumentError,
    InvalidOperationError,
    PersistenceError,
)
from sqlidentity.models.schema import DEFAULT_SCHEMA, IdentitySchema

T = TypeVar("T")


def require(value: T | None, argument: str) -> T:
    if value is None:
        raise InvalidArgumentError(argument)
    return value


def require_text(value: str | None, argument: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgumentError(argument, "Value cannot be null or empty")
    return value


def check_canceled(cancellation_token: CancellationToken | None) -> None:
    if cancellation_token is not None:
        cancellation_token.raise_if_cancellation_requested()


class SqlStore:
    """Holds a caller-owned session and the identity schema.

    The store never commits, closes or disposes the session; :meth:`close`
    and ``async with store`` are no-ops kept for framework symmetry.
    """

    def __init__(self, session: AsyncSession, schema: IdentitySchema = DEFAULT_SCHEMA) -> None:
        if session is None:
            raise InvalidArgumentError("session")
        self._session = session
        self._schema = schema

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def schema(self) -> IdentitySchema:
        return self._schema

    async def close(self) -> None:
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @asynccontextmanager
    async def _persistence(self) -> AsyncIterator[None]:
        """Translate driver failures into :class:`PersistenceError`.

        Statements run with autoflush off, so pending edits on tracked
        entities are never written as a side effect of a store query.
        """
        try:
            with self._session.no_autoflush:
                yield
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    async def _execute(self, statement: Any) -> Any:
        async with self._persistence():
            return await self._session.execute(statement)

    def _detach(self, entities: Sequence[T]) -> list[T]:
        """Remove loaded entities from the identity map.

        Keeps in-memory ``set_*`` mutations out of later autoflushes; only an
        explicit ``update`` writes them.
        """
        for entity in entities:
            self._session.expunge(entity)
        return list(entities)

    def _detached(self, entity: T | None, argument: str) -> T:
        """Return *entity* outside the session so setting attributes stays in memory."""
        require(entity, argument)
        if entity in self._session:
            self._session.expunge(entity)
        return entity

    async def _first(self, statement: Any) -> Any | None:
        result = await self._execute(statement.limit(1))
        entity = result.scalars().first()
        if entity is None:
            return None
        return self._detach([entity])[0]

    async def _all(self, statement: Any) -> list[Any]:
        result = await self._execute(statement)
        return self._detach(result.scalars().unique().all())

    async def _scalar_one_or_none(self, statement: Any) -> Any | None:
        async with self._persistence():
            result = await self._session.execute(statement)
            try:
                return result.scalar_one_or_none()
            except MultipleResultsFound as exc:
                raise InvalidOperationError("Query matched more than one row") from exc
