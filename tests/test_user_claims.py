"""Tests for UserStore claim management."""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from sqlidentity.core.claims import Claim
from sqlidentity.core.exceptions import PersistenceError

DEPT = Claim("department", "engineering")


@pytest.mark.asyncio
async def test_add_then_remove_claim(user_store, alice):
    await user_store.add_claims(alice, [DEPT])
    assert await user_store.get_claims(alice) == [DEPT]

    await user_store.remove_claims(alice, [DEPT])
    assert await user_store.get_claims(alice) == []


@pytest.mark.asyncio
async def test_claims_are_not_deduplicated(user_store, alice):
    await user_store.add_claims(alice, [DEPT, DEPT, Claim("level", "3")])
    claims = await user_store.get_claims(alice)
    assert sorted(claims, key=lambda c: (c.type, c.value)) == [DEPT, DEPT, Claim("level", "3")]

    # Removal drops every matching row
    await user_store.remove_claims(alice, [DEPT])
    assert await user_store.get_claims(alice) == [Claim("level", "3")]


@pytest.mark.asyncio
async def test_add_claims_accepts_generators(user_store, alice):
    await user_store.add_claims(alice, (Claim("n", str(i)) for i in range(3)))
    assert len(await user_store.get_claims(alice)) == 3


@pytest.mark.asyncio
async def test_add_claims_is_all_or_nothing(user_store, alice):
    await user_store.add_claims(alice, [DEPT])
    unbindable = Claim("bad", object())

    with pytest.raises(PersistenceError) as exc_info:
        await user_store.add_claims(alice, [Claim("level", "3"), unbindable])
    assert isinstance(exc_info.value.__cause__, SQLAlchemyError)

    # The first claim of the failed batch was rolled back with the savepoint
    assert await user_store.get_claims(alice) == [DEPT]


@pytest.mark.asyncio
async def test_claims_are_scoped_to_user(user_store, alice, make_user):
    bob = make_user("bob")
    await user_store.create(bob)
    await user_store.add_claims(alice, [DEPT])
    await user_store.add_claims(bob, [Claim("department", "sales")])

    await user_store.remove_claims(bob, [DEPT])
    assert await user_store.get_claims(alice) == [DEPT]


@pytest.mark.asyncio
async def test_replace_claim_updates_every_match(user_store, alice):
    await user_store.add_claims(alice, [DEPT, DEPT, Claim("level", "3")])
    new = Claim("department", "research")

    await user_store.replace_claim(alice, DEPT, new)

    claims = await user_store.get_claims(alice)
    assert claims.count(new) == 2
    assert DEPT not in claims
    assert Claim("level", "3") in claims


@pytest.mark.asyncio
async def test_replace_missing_claim_is_noop(user_store, alice):
    await user_store.add_claims(alice, [DEPT])
    await user_store.replace_claim(alice, Claim("x", "y"), Claim("z", "w"))
    assert await user_store.get_claims(alice) == [DEPT]


@pytest.mark.asyncio
async def test_get_users_for_claim(user_store, alice, make_user):
    bob = make_user("bob")
    carol = make_user("carol")
    await user_store.create(bob)
    await user_store.create(carol)
    await user_store.add_claims(alice, [DEPT])
    await user_store.add_claims(bob, [DEPT])
    await user_store.add_claims(carol, [Claim("department", "sales")])

    users = await user_store.get_users_for_claim(DEPT)
    assert sorted(u.user_name for u in users) == ["alice", "bob"]
    assert await user_store.get_users_for_claim(Claim("department", "ENGINEERING")) == []
