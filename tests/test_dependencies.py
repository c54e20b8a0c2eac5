"""Tests for the FastAPI store registration."""

import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from sqlidentity.api.dependencies import (
    IdentityStores,
    RoleStoreDep,
    UserStoreDep,
    add_identity_stores,
    get_db,
)
from sqlidentity.core.exceptions import RoleNotFoundError
from sqlidentity.models import IdentityRole, IdentityUser


def build_app() -> FastAPI:
    app = FastAPI()
    add_identity_stores(app)

    @app.post("/roles/{name}", status_code=201)
    async def create_role(name: str, roles: RoleStoreDep) -> dict:
        role = IdentityRole(name, normalized_name=name.upper())
        await roles.create(role)
        return {"id": await roles.get_role_id(role)}

    @app.post("/users/{name}", status_code=201)
    async def create_user(name: str, users: UserStoreDep) -> dict:
        user = IdentityUser(name, normalized_user_name=name.upper())
        await users.create(user)
        return {"id": await users.get_user_id(user)}

    @app.get("/users/{user_id}")
    async def read_user(user_id: str, users: UserStoreDep) -> dict:
        user = await users.find_by_id(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return {"id": user.id, "user_name": user.user_name, "roles": await users.get_roles(user)}

    @app.put("/users/{user_id}/roles/{role}", status_code=204)
    async def add_role(user_id: str, role: str, users: UserStoreDep) -> None:
        user = await users.find_by_id(user_id)
        try:
            await users.add_to_role(user, role)
        except RoleNotFoundError as e:
            raise HTTPException(status_code=409, detail=str(e))

    return app


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client wired to a test app with a test DB."""
    app = build_app()
    factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=True)

    async def override_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.mark.asyncio
async def test_stores_resolve_per_request(client):
    r = await client.post("/users/alice")
    assert r.status_code == 201
    user_id = r.json()["id"]

    r2 = await client.get(f"/users/{user_id}")
    assert r2.status_code == 200
    assert r2.json()["user_name"] == "alice"


@pytest.mark.asyncio
async def test_role_membership_across_requests(client):
    await client.post("/roles/Admin")
    user_id = (await client.post("/users/bob")).json()["id"]

    r = await client.put(f"/users/{user_id}/roles/admin")
    assert r.status_code == 204
    assert (await client.get(f"/users/{user_id}")).json()["roles"] == ["Admin"]

    r2 = await client.put(f"/users/{user_id}/roles/Missing")
    assert r2.status_code == 409


@pytest.mark.asyncio
async def test_unknown_user_is_404(client):
    r = await client.get("/users/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 404


def test_registration_keeps_first_provider():
    app = FastAPI()
    first = add_identity_stores(app)
    second = add_identity_stores(app)
    assert first is second
    assert isinstance(app.state.identity_stores, IdentityStores)


@pytest.mark.asyncio
async def test_missing_registration_raises(engine):
    app = FastAPI()

    @app.get("/probe")
    async def probe(users: UserStoreDep) -> dict:
        return {}

    factory = async_sessionmaker(engine)

    async def override_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_db
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=True), base_url="http://test"
    ) as ac:
        with pytest.raises(RuntimeError, match="add_identity_stores"):
            await ac.get("/probe")
