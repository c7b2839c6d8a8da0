"""Request classification, recording and retrieval of audit entries."""

from datetime import datetime, timedelta, timezone

import pytest

from arcade_admin.core.config import AuditSettings
from arcade_admin.db.models import AuditLog
from arcade_admin.infrastructure.database.repositories import SqlAuditRepository
from arcade_admin.modules.audit.classifier import classify_request, extract_resource_id
from arcade_admin.modules.audit.exceptions import InvalidAuditQueryError
from arcade_admin.modules.audit.models import ActionKind, AuditFilters, LogStatus
from arcade_admin.modules.audit.service import AuditLogService, AuditRecorder, scrub


class TestClassifier:
    @pytest.mark.parametrize(
        "method,path,expected",
        [
            ("POST", "/api/auth/login", ActionKind.LOGIN),
            ("POST", "/api/auth/refresh", ActionKind.LOGIN),
            ("POST", "/api/auth/logout", ActionKind.LOGOUT),
            ("POST", "/api/auth/change-password", ActionKind.PASSWORD_CHANGE),
            ("POST", "/api/auth/users", ActionKind.CREATE_USER),
            ("PUT", "/api/users/user/abc", ActionKind.UPDATE_USER),
            ("DELETE", "/api/users/user/abc", ActionKind.DELETE_USER),
            ("POST", "/api/users/user/abc/ban", ActionKind.BAN_USER),
            ("POST", "/api/users/user/abc/unban", ActionKind.UNBAN_USER),
            ("POST", "/api/users/user/abc/transfer-credit", ActionKind.CREDIT_TRANSFER),
            ("POST", "/api/users/user/abc/adjust-credit", ActionKind.CREDIT_ADJUSTMENT),
            ("PUT", "/api/auth/profile", ActionKind.PROFILE_UPDATE),
            ("POST", "/api/admin/settings", ActionKind.SYSTEM_CONFIG_CHANGE),
            ("POST", "/api/users/bulk", ActionKind.BULK_OPERATION),
        ],
    )
    def test_logged_requests(self, method, path, expected):
        action, _ = classify_request(method, path)
        assert action is expected

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/games"),
            ("GET", "/api/games/42"),
            ("GET", "/api/games/stats"),
            ("GET", "/api/users/distributors"),
            ("GET", "/api/users/user/abc"),
            ("GET", "/api/logs"),
            ("POST", "/api/users/user/abc/promote"),
            ("GET", "/api/auth/profile"),
        ],
    )
    def test_unlogged_requests(self, method, path):
        action, _ = classify_request(method, path)
        assert action is None

    def test_trailing_slash_and_prefix(self):
        action, resource_id = classify_request("post", "/v2/users/user/u-1/ban/", api_prefix="/v2")
        assert action is ActionKind.BAN_USER
        assert resource_id == "u-1"

    def test_resource_ids(self):
        assert extract_resource_id("/api/users/user/u-9/transfer-credit") == "u-9"
        assert extract_resource_id("/api/users/user/u-9") == "u-9"
        assert extract_resource_id("/api/games/17") == "17"
        assert extract_resource_id("/api/games/stats") is None
        assert extract_resource_id("/api/users/retailers") is None


def test_scrub_removes_passwords():
    cleaned = scrub(
        {
            "targetUsername": "d1",
            "password": "secret",
            "changes": {"email": "a@b.c", "password": "hunter2", "newPassword": "x"},
        }
    )
    assert cleaned == {"targetUsername": "d1", "changes": {"email": "a@b.c"}}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"page": 0},
        {"page": -1},
        {"limit": 0},
        {"limit": 101},
        {"sort_by": "actor"},
        {"sort_order": "sideways"},
    ],
)
def test_invalid_pagination(kwargs):
    service = AuditLogService(repository=None, settings=AuditSettings(max_page_size=100))
    with pytest.raises(InvalidAuditQueryError):
        service.build_pagination(**kwargs)


def test_pagination_defaults_apply_only_when_missing():
    service = AuditLogService(repository=None, settings=AuditSettings(max_page_size=100))

    pagination = service.build_pagination()

    assert (pagination.page, pagination.limit) == (1, 50)
    assert (pagination.sort_by, pagination.sort_order) == ("createdAt", "desc")


@pytest.mark.anyio
@pytest.mark.parametrize("hours", [0, -3])
async def test_recent_rejects_non_positive_window(hours):
    service = AuditLogService(repository=None, settings=AuditSettings())
    with pytest.raises(InvalidAuditQueryError):
        await service.recent(hours)


@pytest.mark.anyio
@pytest.mark.parametrize("days", [0, -1])
async def test_purge_rejects_non_positive_retention(days):
    service = AuditLogService(repository=None, settings=AuditSettings())
    with pytest.raises(InvalidAuditQueryError):
        await service.purge_older_than(days)


@pytest.mark.anyio
class TestAuditLogService:
    @pytest.fixture
    def recorder(self, session, session_factory):
        return AuditRecorder(session_factory)

    @pytest.fixture
    def service(self, session):
        return AuditLogService(
            SqlAuditRepository(session),
            AuditSettings(max_page_size=100, recent_limit=2),
        )

    async def test_record_and_filter(self, recorder, service):
        await recorder.record(
            actor_id="a1",
            action=ActionKind.CREDIT_TRANSFER,
            details={"targetUsername": "retail_one", "description": "Transferred 5", "password": "x"},
            resource_id="t1",
        )
        await recorder.record(actor_id="a2", action=ActionKind.BAN_USER, status=LogStatus.FAILED)

        page = await service.list_logs(AuditFilters(action="CREDIT_TRANSFER"), service.build_pagination())

        assert page.total == 1
        entry = page.entries[0]
        assert entry.resource_id == "t1"
        assert entry.status == "SUCCESS"
        assert "password" not in entry.details

    async def test_search_matches_username_and_description(self, recorder, service):
        await recorder.record(actor_id="a1", action="LOGIN", details={"targetUsername": "Alice_100%"})
        await recorder.record(actor_id="a1", action="LOGOUT", details={"description": "bye bob"})

        by_name = await service.search("alice_100%", service.build_pagination())
        by_text = await service.search("BOB", service.build_pagination())
        by_action = await service.search("logo", service.build_pagination())

        assert [entry.action for entry in by_name.entries] == ["LOGIN"]
        assert [entry.action for entry in by_text.entries] == ["LOGOUT"]
        assert [entry.action for entry in by_action.entries] == ["LOGOUT"]

    async def test_pagination(self, recorder, service):
        for _ in range(5):
            await recorder.record(actor_id="a1", action="LOGIN")

        page = await service.list_logs(AuditFilters(), service.build_pagination(page=2, limit=2))

        assert page.total == 5
        assert page.total_pages == 3
        assert len(page.entries) == 2

    async def test_unknown_action_filter(self, service):
        with pytest.raises(InvalidAuditQueryError):
            await service.list_logs(AuditFilters(action="TELEPORT"), service.build_pagination())

    async def test_blank_search_rejected(self, service):
        with pytest.raises(InvalidAuditQueryError):
            await service.search("   ", service.build_pagination())

    async def test_recent_is_capped(self, recorder, service):
        for _ in range(3):
            await recorder.record(actor_id="a1", action="LOGIN")
        assert len(await service.recent()) == 2

    async def test_stats(self, recorder, service):
        await recorder.record(actor_id="a1", action="LOGIN")
        await recorder.record(actor_id="a1", action="LOGIN")
        await recorder.record(actor_id=None, action="FAILED_LOGIN", status="FAILED")
        await recorder.record(actor_id="a1", action="BAN_USER")

        stats = await service.stats()

        assert stats.total_logs == 4
        assert stats.failed_count == 1
        assert stats.success_rate == 75.0
        assert stats.action_breakdown == {"LOGIN": 2, "FAILED_LOGIN": 1, "BAN_USER": 1}

    async def test_purge_older_than(self, session, recorder, service):
        await recorder.record(actor_id="a1", action="LOGIN")
        session.add(
            AuditLog(
                actor_id="a1",
                action="LOGOUT",
                status="SUCCESS",
                created_at=datetime.now(timezone.utc) - timedelta(days=120),
            )
        )
        await session.flush()

        removed = await service.purge_older_than(90)

        assert removed == 1
        assert (await service.stats()).total_logs == 1

    async def test_recorder_swallows_failures(self):
        def broken_factory():
            raise RuntimeError("database unavailable")

        recorder = AuditRecorder(broken_factory)
        await recorder.record(actor_id="a1", action="LOGIN")

    async def test_disabled_recorder_writes_nothing(self, session_factory, service):
        await AuditRecorder(session_factory, enabled=False).record(actor_id="a1", action="LOGIN")
        assert (await service.stats()).total_logs == 0
