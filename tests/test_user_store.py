"""Tests for UserStore CRUD, lookups and scalar properties."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sqlidentity.models import Base, IdentityUser, column_values
from sqlidentity.stores import UserStore
from sqlidentity.stores.capabilities import (
    QueryableUserStore,
    UserClaimStore,
    UserEmailStore,
    UserLockoutStore,
    UserLoginStore,
    UserPasswordStore,
    UserPhoneNumberStore,
    UserRoleStore,
    UserSecurityStampStore,
    UserStoreBase,
    UserTwoFactorStore,
)


def test_user_store_capabilities(user_store):
    for capability in (
        UserStoreBase, UserLoginStore, UserRoleStore, UserClaimStore,
        UserPasswordStore, UserSecurityStampStore, UserEmailStore,
        UserLockoutStore, UserPhoneNumberStore, UserTwoFactorStore,
        QueryableUserStore,
    ):
        assert isinstance(user_store, capability), capability.__name__


@pytest.mark.asyncio
async def test_create_then_find_by_id_round_trips(user_store, make_user):
    user = make_user("bob")
    user.password_hash = "hash"
    user.phone_number = "+33 1 23 45 67 89"
    user.two_factor_enabled = True
    user.lockout_enabled = True
    user.access_failed_count = 2

    result = await user_store.create(user)
    assert result.succeeded

    found = await user_store.find_by_id(user.id)
    assert found is not None
    assert found is not user
    assert column_values(found) == column_values(user)


@pytest.mark.asyncio
async def test_find_by_name_and_email(user_store, alice):
    assert (await user_store.find_by_name("ALICE")).id == alice.id
    assert (await user_store.find_by_email("ALICE@EXAMPLE.COM")).id == alice.id
    # Exact match only: the caller normalizes
    assert await user_store.find_by_name("alice") is None
    assert await user_store.find_by_email("nobody@example.com") is None
    assert await user_store.find_by_id(None) is None


@pytest.mark.asyncio
async def test_get_user_id_is_string_form(user_store, alice):
    assert await user_store.get_user_id(alice) == alice.id
    assert await user_store.get_user_name(alice) == "alice"
    assert await user_store.get_normalized_user_name(alice) == "ALICE"


@pytest.mark.asyncio
async def test_set_email_requires_update_to_persist(user_store, alice):
    await user_store.set_email(alice, "a@b.com")
    assert await user_store.get_email(alice) == "a@b.com"

    stored = await user_store.find_by_id(alice.id)
    assert stored.email == "alice@example.com"

    await user_store.update(alice)
    stored = await user_store.find_by_id(alice.id)
    assert stored.email == "a@b.com"


@pytest.mark.asyncio
async def test_loaded_entity_mutation_does_not_autoflush(user_store, alice):
    loaded = await user_store.find_by_id(alice.id)
    await user_store.set_phone_number(loaded, "555-0100")
    await user_store.set_two_factor_enabled(loaded, True)

    # Another query would autoflush an attached entity
    again = await user_store.find_by_name("ALICE")
    assert again.phone_number is None
    assert again.two_factor_enabled is False


@pytest.mark.asyncio
async def test_all_setters_round_trip_after_update(user_store, alice):
    end = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    await user_store.set_user_name(alice, "alice2")
    await user_store.set_normalized_user_name(alice, "ALICE2")
    await user_store.set_normalized_email(alice, "ALICE2@EXAMPLE.COM")
    await user_store.set_email_confirmed(alice, True)
    await user_store.set_password_hash(alice, "AQAAAA==")
    await user_store.set_security_stamp(alice, "stamp-2")
    await user_store.set_phone_number(alice, "555-0100")
    await user_store.set_phone_number_confirmed(alice, True)
    await user_store.set_two_factor_enabled(alice, True)
    await user_store.set_lockout_enabled(alice, True)
    await user_store.set_lockout_end_date(alice, end)
    await user_store.update(alice)

    stored = await user_store.find_by_name("ALICE2")
    assert stored.id == alice.id
    assert await user_store.get_email_confirmed(stored) is True
    assert await user_store.get_normalized_email(stored) == "ALICE2@EXAMPLE.COM"
    assert await user_store.get_password_hash(stored) == "AQAAAA=="
    assert await user_store.has_password(stored) is True
    assert await user_store.get_security_stamp(stored) == "stamp-2"
    assert await user_store.get_phone_number(stored) == "555-0100"
    assert await user_store.get_phone_number_confirmed(stored) is True
    assert await user_store.get_two_factor_enabled(stored) is True
    assert await user_store.get_lockout_enabled(stored) is True
    stored_end = await user_store.get_lockout_end_date(stored)
    # SQLite drops tzinfo
    assert stored_end.replace(tzinfo=timezone.utc) == end


@pytest.mark.asyncio
async def test_has_password(user_store, make_user):
    user = make_user("carol")
    assert await user_store.has_password(user) is False
    await user_store.set_password_hash(user, "h")
    assert await user_store.has_password(user) is True


@pytest.mark.asyncio
async def test_delete_user(user_store, alice):
    result = await user_store.delete(alice)
    assert result.succeeded
    assert await user_store.find_by_id(alice.id) is None


@pytest.mark.asyncio
async def test_increment_access_failed_count_is_server_side(user_store, alice):
    stale = await user_store.find_by_id(alice.id)
    predictions = [await user_store.increment_access_failed_count(stale) for _ in range(3)]

    # Each call predicts from the unchanged in-memory count
    assert predictions == [1, 1, 1]
    assert await user_store.get_access_failed_count(stale) == 0

    stored = await user_store.find_by_id(alice.id)
    assert stored.access_failed_count == 3


@pytest.mark.asyncio
async def test_reset_access_failed_count_is_in_memory(user_store, alice):
    await user_store.increment_access_failed_count(alice)
    user = await user_store.find_by_id(alice.id)
    assert user.access_failed_count == 1

    await user_store.reset_access_failed_count(user)
    assert await user_store.get_access_failed_count(user) == 0
    assert (await user_store.find_by_id(alice.id)).access_failed_count == 1

    await user_store.update(user)
    assert (await user_store.find_by_id(alice.id)).access_failed_count == 0


@pytest.mark.asyncio
async def test_update_is_last_writer_wins(user_store, alice):
    first = await user_store.find_by_id(alice.id)
    second = await user_store.find_by_id(alice.id)
    await user_store.set_phone_number(first, "111")
    await user_store.set_email(second, "second@example.com")
    await user_store.update(first)
    await user_store.update(second)

    stored = await user_store.find_by_id(alice.id)
    assert stored.email == "second@example.com"
    assert stored.phone_number is None


@pytest.mark.asyncio
async def test_lockout_end_in_future(user_store, alice):
    soon = datetime.now(timezone.utc) + timedelta(minutes=5)
    await user_store.set_lockout_end_date(alice, soon)
    assert await user_store.get_lockout_end_date(alice) == soon


@pytest.mark.asyncio
async def test_users_query_is_composable(user_store, alice, make_user):
    await user_store.create(make_user("bob"))
    model = user_store.schema.user
    result = await user_store.session.execute(
        user_store.users.where(model.user_name != "alice").order_by(model.user_name)
    )
    assert [u.user_name for u in result.scalars()] == ["bob"]


@pytest.mark.asyncio
async def test_setter_on_queried_user_stays_in_memory(user_store, alice):
    loaded = (await user_store.session.execute(user_store.users)).scalars().first()
    await user_store.set_normalized_email(loaded, "CHANGED@EXAMPLE.COM")

    assert loaded not in user_store.session
    assert await user_store.find_by_email("CHANGED@EXAMPLE.COM") is None
    await user_store.session.commit()
    assert await user_store.find_by_email("CHANGED@EXAMPLE.COM") is None

    await user_store.update(loaded)
    assert (await user_store.find_by_email("CHANGED@EXAMPLE.COM")).id == alice.id


@pytest.mark.asyncio
async def test_concurrent_increments_from_separate_sessions(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)

    user = IdentityUser("carol", normalized_user_name="CAROL")
    async with factory() as session:
        await UserStore(session).create(user)
        await session.commit()

    async def fail_login() -> int:
        async with factory() as session:
            predicted = await UserStore(session).increment_access_failed_count(user)
            await session.commit()
            return predicted

    callers = 5
    try:
        predictions = await asyncio.gather(*(fail_login() for _ in range(callers)))
        async with factory() as session:
            stored = await UserStore(session).find_by_id(str(user.id))
    finally:
        await engine.dispose()

    assert predictions == [1] * callers
    assert stored.access_failed_count == callers
