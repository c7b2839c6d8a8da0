"""Descendant resolution over created-by links."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import update

from arcade_admin.db.models import Account as AccountModel
from arcade_admin.modules.accounts.models import Account, AccountCreateInput
from arcade_admin.modules.accounts.service import AccountService
from arcade_admin.modules.hierarchy.service import HierarchyResolver, sort_listing
from arcade_admin.modules.permissions.exceptions import AccessDeniedError

pytestmark = pytest.mark.anyio


@pytest.fixture
def accounts(session):
    return AccountService.with_session(session)


@pytest.fixture
def resolver(session):
    return HierarchyResolver.with_session(session)


async def new_account(accounts, username, role, parent=None):
    return await accounts.create_account(
        AccountCreateInput(
            username=username,
            password="secret123",
            role=role,
            created_by=parent.id if parent else None,
        )
    )


@pytest.fixture
async def tree(accounts):
    admin = await new_account(accounts, "admin", "admin")
    sd1 = await new_account(accounts, "sd1", "super_distributor", admin)
    d1 = await new_account(accounts, "dist1", "distributor", sd1)
    r1 = await new_account(accounts, "ret1", "retailer", d1)
    u1 = await new_account(accounts, "usr1", "user", r1)
    return {"admin": admin, "sd1": sd1, "d1": d1, "r1": r1, "u1": u1}


async def test_three_hops_down(resolver, tree):
    users = await resolver.descendants_of(tree["sd1"].id, "user")
    assert [account.id for account in users] == [tree["u1"].id]


async def test_skip_level_creation_is_found(resolver, accounts, tree):
    direct = await new_account(accounts, "direct_user", "user", tree["sd1"])

    users = await resolver.descendants_of(tree["sd1"].id, "user")

    assert {account.id for account in users} == {tree["u1"].id, direct.id}


async def test_all_roles_without_filter(resolver, tree):
    found = await resolver.descendants_of(tree["sd1"].id)
    assert {account.username for account in found} == {"dist1", "ret1", "usr1"}
    assert tree["sd1"].id not in {account.id for account in found}


async def test_newest_first(resolver, accounts, tree):
    second = await new_account(accounts, "usr2", "user", tree["r1"])
    users = await resolver.descendants_of(tree["r1"].id, "user")
    assert [account.id for account in users] == [second.id, tree["u1"].id]


async def test_idempotent(resolver, tree):
    first = await resolver.descendants_of(tree["admin"].id, "retailer")
    second = await resolver.descendants_of(tree["admin"].id, "retailer")
    assert [account.id for account in first] == [account.id for account in second]


async def test_unknown_root_is_empty(resolver, tree):
    assert await resolver.descendants_of("does-not-exist", "user") == []


async def test_cycle_does_not_loop(resolver, session, tree):
    # corrupt data: the super distributor claims its own grandchild as creator
    await session.execute(
        update(AccountModel).where(AccountModel.id == tree["sd1"].id).values(created_by=tree["r1"].id)
    )

    found = await resolver.descendants_of(tree["sd1"].id)

    assert sorted(account.username for account in found) == ["dist1", "ret1", "usr1"]


async def test_is_descendant(resolver, tree):
    assert await resolver.is_descendant(tree["sd1"].id, tree["u1"].id)
    assert not await resolver.is_descendant(tree["u1"].id, tree["sd1"].id)
    assert not await resolver.is_descendant(tree["d1"].id, tree["d1"].id)


async def test_stats_of_subtree(resolver, accounts, session, tree):
    await accounts.repository.apply_balance_delta(tree["r1"].id, 25, floor=None)
    await accounts.repository.apply_balance_delta(tree["u1"].id, 5, floor=None)

    stats = await resolver.stats_of(tree["d1"].id)

    assert stats.counts_by_role == {"retailer": 1, "user": 1}
    assert stats.total_balance == 30
    assert stats.total_retailers == 1
    assert stats.total_distributors == 0
    assert stats.total_super_distributors is None


async def test_stats_for_admin_is_global(resolver, tree):
    stats = await resolver.stats_for(tree["admin"])
    assert stats.total_super_distributors == 1
    assert stats.total_users == 1


async def test_stats_for_user_is_denied(resolver, tree):
    with pytest.raises(AccessDeniedError):
        await resolver.stats_for(tree["u1"])


async def test_visible_accounts_scoped_to_subtree(resolver, accounts, tree):
    other_sd = await new_account(accounts, "sd2", "super_distributor", tree["admin"])
    await new_account(accounts, "dist2", "distributor", other_sd)

    own = await resolver.visible_accounts(tree["sd1"], "distributor")
    everyone = await resolver.visible_accounts(tree["admin"], "distributor")

    assert [account.username for account in own] == ["dist1"]
    assert {account.username for account in everyone} == {"dist1", "dist2"}
    with pytest.raises(AccessDeniedError):
        await resolver.visible_accounts(tree["d1"], "super_distributor")


def test_sort_listing_breaks_ties_by_id():
    stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
    older = datetime(2024, 4, 1, tzinfo=timezone.utc)

    def account(account_id, created_at):
        return Account(
            id=account_id,
            username=account_id,
            role="user",
            unique_id=account_id,
            password_hash="x",
            created_at=created_at,
        )

    ordered = sort_listing(
        [account("c", stamp), account("a", stamp), account("z", None), account("b", older)]
    )

    assert [item.id for item in ordered] == ["a", "c", "b", "z"]
