"""FastAPI dependency providers — register the stores once, resolve them per request.

Usage::

    app = FastAPI()
    add_identity_stores(app)              # default string-keyed schema

    @app.get("/users/{user_id}")
    async def read_user(user_id: str, users: UserStoreDep): ...
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sqlidentity.core.database import get_session_factory
from sqlidentity.core.logging import get_logger
from sqlidentity.models.schema import DEFAULT_SCHEMA, IdentitySchema
from sqlidentity.stores.role_store import RoleStore
from sqlidentity.stores.user_store import UserStore

logger = get_logger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for the duration of a request."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


class IdentityStores:
    """Builds store instances bound to a request's session."""

    def __init__(
        self,
        schema: IdentitySchema = DEFAULT_SCHEMA,
        user_store_cls: type[UserStore] = UserStore,
        role_store_cls: type[RoleStore] = RoleStore,
    ) -> None:
        self.schema = schema
        self.user_store_cls = user_store_cls
        self.role_store_cls = role_store_cls

    def user_store(self, session: AsyncSession) -> UserStore:
        return self.user_store_cls(session, self.schema)

    def role_store(self, session: AsyncSession) -> RoleStore:
        return self.role_store_cls(session, self.schema)


def add_identity_stores(app: FastAPI, schema: IdentitySchema = DEFAULT_SCHEMA, **kwargs) -> IdentityStores:
    """Register store factories on *app* unless some are already registered."""
    existing = getattr(app.state, "identity_stores", None)
    if existing is not None:
        logger.debug("Identity stores already registered — keeping existing")
        return existing
    stores = IdentityStores(schema, **kwargs)
    app.state.identity_stores = stores
    logger.info("Identity stores registered", user_model=schema.user.__name__,
                role_model=schema.role.__name__, key=schema.keys.name)
    return stores


def get_identity_stores(request: Request) -> IdentityStores:
    stores = getattr(request.app.state, "identity_stores", None)
    if stores is None:
        raise RuntimeError("Identity stores are not registered; call add_identity_stores(app)")
    return stores


StoresDep = Annotated[IdentityStores, Depends(get_identity_stores)]
DbDep = Annotated[AsyncSession, Depends(get_db)]


async def get_user_store(db: DbDep, stores: StoresDep) -> UserStore:
    return stores.user_store(db)


async def get_role_store(db: DbDep, stores: StoresDep) -> RoleStore:
    return stores.role_store(db)


UserStoreDep = Annotated[UserStore, Depends(get_user_store)]
RoleStoreDep = Annotated[RoleStore, Depends(get_role_store)]
