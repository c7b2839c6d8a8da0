"""Role table and decision behaviour of the authorization policy."""

import pytest

from arcade_admin.modules.accounts.models import Account, Role
from arcade_admin.modules.hierarchy.service import HierarchyResolver
from arcade_admin.modules.permissions.exceptions import AccessDeniedError
from arcade_admin.modules.permissions.policy import Operation, authorize, can_manage_role
from arcade_admin.modules.permissions.service import AuthorizationService

ALLOWED = {
    Role.ADMIN: set(Role),
    Role.SUPER_DISTRIBUTOR: {Role.DISTRIBUTOR, Role.RETAILER, Role.USER},
    Role.DISTRIBUTOR: {Role.RETAILER, Role.USER},
    Role.RETAILER: {Role.USER},
    Role.USER: set(),
}


def make_account(account_id, role, created_by=None):
    return Account(
        id=account_id,
        username=account_id,
        role=role.value if isinstance(role, Role) else role,
        unique_id=account_id.upper(),
        password_hash="x",
        created_by=created_by,
    )


class FakeAccounts:
    """Just enough of the account repository for ancestor walks."""

    def __init__(self, *accounts):
        self.accounts = {account.id: account for account in accounts}

    async def get_by_id(self, account_id):
        return self.accounts.get(account_id)


class TestRoleTable:
    @pytest.mark.parametrize("actor_role", list(Role))
    @pytest.mark.parametrize("target_role", list(Role))
    @pytest.mark.parametrize("operation", [op for op in Operation if op is not Operation.READ])
    def test_every_pair_is_decided(self, actor_role, target_role, operation):
        actor = make_account("actor", actor_role)
        target = make_account("target", target_role)

        decision = authorize(actor, target, operation)

        assert decision.allowed is (target_role in ALLOWED[actor_role])
        if not decision:
            assert decision.reason

    def test_super_distributor_cannot_touch_peer(self):
        actor = make_account("sd1", Role.SUPER_DISTRIBUTOR)
        peer = make_account("sd2", Role.SUPER_DISTRIBUTOR)
        assert not authorize(actor, peer, Operation.UPDATE)

    def test_unknown_actor_role_is_denied(self):
        actor = make_account("ghost", "operator")
        target = make_account("u1", Role.USER)
        decision = authorize(actor, target, Operation.READ)
        assert not decision
        assert "operator" in decision.reason

    @pytest.mark.parametrize("role", list(Role))
    def test_self_read_is_always_allowed(self, role):
        actor = make_account("me", role)
        assert authorize(actor, actor, Operation.READ)

    def test_self_update_follows_role_table(self):
        retailer = make_account("r1", Role.RETAILER)
        assert not authorize(retailer, retailer, Operation.UPDATE)

    def test_can_manage_role_rejects_unknown_target(self):
        assert not can_manage_role("admin", "root")
        assert can_manage_role(Role.DISTRIBUTOR, "user")


@pytest.mark.anyio
class TestSubtreeRestriction:
    @pytest.fixture
    def accounts(self):
        return FakeAccounts(
            make_account("admin", Role.ADMIN),
            make_account("sd1", Role.SUPER_DISTRIBUTOR, "admin"),
            make_account("sd2", Role.SUPER_DISTRIBUTOR, "admin"),
            make_account("d1", Role.DISTRIBUTOR, "sd1"),
            make_account("d2", Role.DISTRIBUTOR, "sd2"),
        )

    async def test_cross_subtree_allowed_by_default(self, accounts):
        service = AuthorizationService(HierarchyResolver(accounts))
        decision = await service.check(accounts.accounts["sd1"], accounts.accounts["d2"], Operation.CREDIT)
        assert decision

    async def test_cross_subtree_denied_when_restricted(self, accounts):
        service = AuthorizationService(HierarchyResolver(accounts), restrict_to_subtree=True)
        sd1 = accounts.accounts["sd1"]

        assert await service.check(sd1, accounts.accounts["d1"], Operation.UPDATE)
        with pytest.raises(AccessDeniedError):
            await service.ensure(sd1, accounts.accounts["d2"], Operation.UPDATE)

    async def test_admin_is_never_restricted(self, accounts):
        service = AuthorizationService(HierarchyResolver(accounts), restrict_to_subtree=True)
        assert await service.check(accounts.accounts["admin"], accounts.accounts["d2"], Operation.BAN)

    def test_ensure_can_create(self, accounts):
        service = AuthorizationService(HierarchyResolver(accounts))
        service.ensure_can_create(accounts.accounts["sd1"], "user")
        with pytest.raises(AccessDeniedError):
            service.ensure_can_create(accounts.accounts["sd1"], "super_distributor")
