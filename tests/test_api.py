"""End-to-end flows through the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from arcade_admin.modules.ledger.service import CreditLedger
from tests.conftest import ADMIN_PASSWORD, create_account, login


@pytest.fixture
def chain(client, admin_headers):
    """admin -> sd1 -> dist1 -> ret1 -> usr1, each created by the tier above."""
    sd1 = create_account(client, admin_headers, "sd1", "super_distributor")
    sd1_headers = login(client, "sd1")
    d1 = create_account(client, sd1_headers, "dist1", "distributor")
    d1_headers = login(client, "dist1")
    r1 = create_account(client, d1_headers, "ret1", "retailer")
    r1_headers = login(client, "ret1")
    u1 = create_account(client, r1_headers, "usr1", "user")
    return {
        "sd1": (sd1, sd1_headers),
        "d1": (d1, d1_headers),
        "r1": (r1, r1_headers),
        "u1": (u1, None),
    }


def get_account(client, headers, account_id):
    resp = client.get(f"/api/users/user/{account_id}", headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


class TestScenarios:
    def test_admin_funds_super_distributor(self, client, admin_headers):
        sd1 = create_account(client, admin_headers, "sd1", "super_distributor")
        assert sd1["creditBalance"] == 0
        assert sd1["uniqueId"].startswith("SD")

        resp = client.post(
            f"/api/users/user/{sd1['id']}/adjust-credit", json={"amount": 1000}, headers=admin_headers
        )

        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["balanceBefore"] == 0
        assert body["data"]["balanceAfter"] == 1000
        assert get_account(client, admin_headers, sd1["id"])["creditBalance"] == 1000

    def test_transfer_down_one_tier(self, client, admin_headers, chain):
        sd1, sd1_headers = chain["sd1"]
        d1, _ = chain["d1"]
        client.post(f"/api/users/user/{sd1['id']}/adjust-credit", json={"amount": 1000}, headers=admin_headers)

        resp = client.post(f"/api/users/user/{d1['id']}/transfer-credit", json={"amount": 400}, headers=sd1_headers)

        assert resp.status_code == 200, resp.text
        data = resp.json()["data"]
        assert data["fromUser"]["creditBalance"] == 600
        assert data["toUser"]["creditBalance"] == 400
        assert data["amount"] == 400

        mine = client.get("/api/users/my-distributors", headers=sd1_headers).json()
        assert [account["id"] for account in mine["data"]] == [d1["id"]]
        assert mine["count"] == 1

    def test_three_hops_down(self, client, chain):
        _, sd1_headers = chain["sd1"]
        u1, _ = chain["u1"]

        resp = client.get("/api/users/my-users", headers=sd1_headers)

        assert resp.status_code == 200
        assert [account["id"] for account in resp.json()["data"]] == [u1["id"]]

    def test_retailer_cannot_update_distributor(self, client, chain):
        d1, _ = chain["d1"]
        _, r1_headers = chain["r1"]

        resp = client.put(f"/api/users/user/{d1['id']}", json={"email": "x@example.com"}, headers=r1_headers)

        assert resp.status_code == 403
        assert resp.json() == {"success": False, "message": "Access denied", "code": "FORBIDDEN"}

    def test_ban_twice(self, client, chain):
        u1, _ = chain["u1"]
        _, r1_headers = chain["r1"]
        u1_headers = login(client, "usr1")
        assert client.get("/api/auth/profile", headers=u1_headers).json()["data"]["isOnline"] is True

        resp = client.post(f"/api/users/user/{u1['id']}/ban", headers=r1_headers)

        assert resp.status_code == 200, resp.text
        banned = resp.json()["data"]
        assert banned["isBanned"] is True
        assert banned["isActive"] is False
        assert banned["isOnline"] is False

        again = client.post(f"/api/users/user/{u1['id']}/ban", headers=r1_headers)
        assert again.status_code == 409
        assert again.json()["message"] == "User is already banned"

        # the banned account's existing token stops working immediately
        assert client.get("/api/auth/profile", headers=u1_headers).status_code == 401

    def test_unban_restores_access(self, client, chain):
        u1, _ = chain["u1"]
        _, r1_headers = chain["r1"]
        client.post(f"/api/users/user/{u1['id']}/ban", headers=r1_headers)

        resp = client.post(f"/api/users/user/{u1['id']}/unban", headers=r1_headers)

        assert resp.json()["data"]["isBanned"] is False
        assert resp.json()["data"]["isActive"] is True
        login(client, "usr1")
        assert client.post(f"/api/users/user/{u1['id']}/unban", headers=r1_headers).status_code == 409


class TestAuditTrail:
    def test_one_entry_per_transfer(self, client, admin_headers, chain):
        sd1, sd1_headers = chain["sd1"]
        d1, _ = chain["d1"]
        client.post(f"/api/users/user/{sd1['id']}/adjust-credit", json={"amount": 50}, headers=admin_headers)
        client.post(f"/api/users/user/{d1['id']}/transfer-credit", json={"amount": 20}, headers=sd1_headers)

        resp = client.get(
            "/api/logs",
            params={"action": "CREDIT_TRANSFER", "status": "SUCCESS"},
            headers=admin_headers,
        )

        assert resp.status_code == 200, resp.text
        entries = resp.json()["data"]
        assert len(entries) == 1
        entry = entries[0]
        assert entry["resourceId"] == d1["id"]
        assert entry["actorId"] == sd1["id"]
        assert entry["actor"]["username"] == "sd1"
        assert entry["details"]["amount"] == 20
        assert entry["details"]["balanceAfter"] == 20
        assert resp.json()["pagination"] == {"page": 1, "limit": 50, "total": 1, "totalPages": 1}

    def test_failed_transfer_is_recorded_as_failed(self, client, admin_headers, chain):
        d1, _ = chain["d1"]
        _, sd1_headers = chain["sd1"]
        client.post(f"/api/users/user/{d1['id']}/transfer-credit", json={"amount": 5}, headers=sd1_headers)

        resp = client.get("/api/logs", params={"action": "CREDIT_TRANSFER"}, headers=admin_headers)

        assert [entry["status"] for entry in resp.json()["data"]] == ["FAILED"]

    def test_unhandled_error_is_recorded_as_failed(self, app, admin_headers, chain, monkeypatch):
        d1, _ = chain["d1"]
        _, sd1_headers = chain["sd1"]

        async def broken_transfer(self, target_id, amount, actor):
            raise RuntimeError("ledger offline")

        monkeypatch.setattr(CreditLedger, "transfer", broken_transfer)
        raw = TestClient(app, raise_server_exceptions=False)
        resp = raw.post(f"/api/users/user/{d1['id']}/transfer-credit", json={"amount": 5}, headers=sd1_headers)
        assert resp.status_code == 500
        assert resp.json()["success"] is False

        logs = raw.get("/api/logs", params={"action": "CREDIT_TRANSFER"}, headers=admin_headers).json()["data"]

        assert len(logs) == 1
        assert logs[0]["status"] == "FAILED"
        assert logs[0]["resourceId"] == d1["id"]
        assert logs[0]["details"]["metadata"]["statusCode"] == 500
        assert logs[0]["details"]["amount"] == 5

    def test_failed_login_has_no_actor(self, client, admin):
        client.post("/api/auth/login", json={"username": "admin", "password": "wrong-password"})
        headers = login(client, "admin", ADMIN_PASSWORD)

        resp = client.get("/api/logs/action/failed_login", headers=headers)

        entries = resp.json()["data"]
        assert len(entries) == 1
        assert "actorId" not in entries[0]
        assert entries[0]["details"]["targetUsername"] == "admin"

    def test_reads_are_not_logged(self, client, admin_headers):
        client.get("/api/users/distributors", headers=admin_headers)
        client.get("/api/games", headers=admin_headers)

        stats = client.get("/api/logs/stats", headers=admin_headers).json()["data"]

        assert stats["actionBreakdown"] == {"LOGIN": 1}

    def test_logs_are_admin_only(self, client, chain):
        _, sd1_headers = chain["sd1"]
        for path in ("/api/logs", "/api/logs/recent", "/api/logs/stats", "/api/logs/search?q=x"):
            resp = client.get(path, headers=sd1_headers)
            assert resp.status_code == 403, path
            assert resp.json()["message"] == "Admin access required"

    def test_bad_log_query(self, client, admin_headers):
        assert client.get("/api/logs", params={"limit": 1000}, headers=admin_headers).status_code == 400
        assert client.get("/api/logs", params={"page": 0}, headers=admin_headers).status_code == 400
        assert client.get("/api/logs", params={"limit": 0}, headers=admin_headers).status_code == 400
        assert client.get("/api/logs/recent", params={"hours": 0}, headers=admin_headers).status_code == 400
        assert client.get("/api/logs/search", params={"q": " "}, headers=admin_headers).status_code == 400


class TestAuth:
    def test_missing_token(self, client):
        resp = client.get("/api/users/distributors")
        assert resp.status_code == 401
        assert resp.json()["success"] is False

    def test_garbage_token(self, client):
        resp = client.get("/api/auth/profile", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "INVALID_TOKEN"

    def test_wrong_password(self, client, admin):
        resp = client.post("/api/auth/login", json={"username": "ADMIN", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid credentials"

    def test_cookie_session(self, client, admin):
        resp = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
        assert "accessToken" in resp.cookies

        assert client.get("/api/auth/profile").json()["data"]["username"] == "admin"

        refreshed = client.post("/api/auth/refresh")
        assert refreshed.status_code == 200, refreshed.text

        client.post("/api/auth/logout")
        client.cookies.clear()
        assert client.get("/api/auth/profile").status_code == 401

    def test_refresh_with_body(self, client, admin):
        tokens = client.post(
            "/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD}
        ).json()["data"]
        client.cookies.clear()

        resp = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert resp.status_code == 200
        assert resp.json()["data"]["accessToken"]

        # an access token is not accepted as a refresh token
        bad = client.post("/api/auth/refresh", json={"refreshToken": tokens["accessToken"]})
        assert bad.status_code == 401

    def test_change_password(self, client, admin_headers):
        resp = client.post(
            "/api/auth/change-password",
            json={"oldPassword": ADMIN_PASSWORD, "newPassword": "n3w-secret", "confirmPassword": "n3w-secret"},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text
        login(client, "admin", "n3w-secret")

    def test_change_password_mismatch(self, client, admin_headers):
        resp = client.post(
            "/api/auth/change-password",
            json={"oldPassword": ADMIN_PASSWORD, "newPassword": "aaaaaa", "confirmPassword": "bbbbbb"},
            headers=admin_headers,
        )
        assert resp.status_code == 400


class TestAccounts:
    def test_duplicate_username(self, client, admin_headers):
        create_account(client, admin_headers, "dup", "retailer")
        resp = client.post(
            "/api/auth/users",
            json={"username": "DUP", "password": "secret123", "role": "user"},
            headers=admin_headers,
        )
        assert resp.status_code == 409

    @pytest.mark.parametrize("username", ["d1", " u1 ", "x" * 51])
    def test_username_length_enforced(self, client, admin_headers, username):
        resp = client.post(
            "/api/auth/users",
            json={"username": username, "password": "secret123", "role": "user"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_three_character_username_accepted(self, client, admin_headers):
        account = create_account(client, admin_headers, "ab1", "user")
        assert account["username"] == "ab1"

    def test_cannot_create_peer(self, client, chain):
        _, sd1_headers = chain["sd1"]
        resp = client.post(
            "/api/auth/users",
            json={"username": "sd9", "password": "secret123", "role": "super_distributor"},
            headers=sd1_headers,
        )
        assert resp.status_code == 403

    def test_skip_level_create(self, client, chain):
        sd1, sd1_headers = chain["sd1"]
        direct = create_account(client, sd1_headers, "direct", "user")
        assert direct["parentId"] == sd1["id"]

        users = client.get("/api/users/users", headers=sd1_headers).json()["data"]
        assert {account["username"] for account in users} == {"usr1", "direct"}

    def test_role_listings_are_gated(self, client, chain):
        _, r1_headers = chain["r1"]
        assert client.get("/api/users/distributors", headers=r1_headers).status_code == 403
        assert client.get("/api/users/my-users-as-distributor", headers=r1_headers).status_code == 403
        assert client.get("/api/users/my-users-as-retailer", headers=r1_headers).status_code == 200

    @pytest.mark.parametrize("path", ["/api/users/my-distributors", "/api/users/my-retailers", "/api/users/my-users"])
    def test_own_tier_listings_are_for_super_distributors(self, client, admin_headers, chain, path):
        _, sd1_headers = chain["sd1"]
        _, d1_headers = chain["d1"]
        assert client.get(path, headers=sd1_headers).status_code == 200

        for headers in (admin_headers, d1_headers):
            resp = client.get(path, headers=headers)
            assert resp.status_code == 403
            assert resp.json()["message"] == "Access denied - Super distributors only"

    def test_missing_account(self, client, admin_headers):
        resp = client.get("/api/users/user/nope", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"

    def test_not_found_before_permission(self, client, chain):
        _, r1_headers = chain["r1"]
        assert client.delete("/api/users/user/nope", headers=r1_headers).status_code == 404

    def test_update_and_delete(self, client, admin_headers, chain):
        u1, _ = chain["u1"]

        updated = client.put(
            f"/api/users/user/{u1['id']}",
            json={"email": "u1@example.com", "commissionRate": 5},
            headers=admin_headers,
        )
        assert updated.status_code == 200, updated.text
        assert updated.json()["data"]["email"] == "u1@example.com"
        assert updated.json()["data"]["commissionRate"] == 5

        assert client.delete(f"/api/users/user/{u1['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/users/user/{u1['id']}", headers=admin_headers).status_code == 404

    def test_cannot_delete_self(self, client, admin_headers, admin):
        resp = client.delete(f"/api/users/user/{admin.id}", headers=admin_headers)
        assert resp.status_code == 400

    def test_stats(self, client, admin_headers, chain):
        _, sd1_headers = chain["sd1"]

        scoped = client.get("/api/users/stats", headers=sd1_headers).json()["data"]
        overall = client.get("/api/users/stats", headers=admin_headers).json()["data"]

        assert scoped["totalDistributors"] == 1
        assert scoped["totalUsers"] == 1
        assert "totalSuperDistributors" not in scoped
        assert overall["totalSuperDistributors"] == 1

    def test_online_users(self, client, chain):
        _, r1_headers = chain["r1"]
        assert client.get("/api/users/online-users", headers=r1_headers).json()["data"] == []

        login(client, "usr1")
        online = client.get("/api/users/online-users", headers=r1_headers).json()["data"]
        assert [account["username"] for account in online] == ["usr1"]


class TestCredit:
    @pytest.mark.parametrize("amount", ["100", -5, 0, None, True])
    def test_invalid_transfer_amount(self, client, chain, amount):
        d1, _ = chain["d1"]
        _, sd1_headers = chain["sd1"]
        resp = client.post(
            f"/api/users/user/{d1['id']}/transfer-credit", json={"amount": amount}, headers=sd1_headers
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_AMOUNT"

    def test_insufficient_balance(self, client, chain):
        d1, _ = chain["d1"]
        _, sd1_headers = chain["sd1"]
        resp = client.post(
            f"/api/users/user/{d1['id']}/transfer-credit", json={"amount": 1}, headers=sd1_headers
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "INSUFFICIENT_BALANCE"

    def test_history(self, client, admin_headers, chain):
        sd1, sd1_headers = chain["sd1"]
        client.post(f"/api/users/user/{sd1['id']}/adjust-credit", json={"amount": 30}, headers=admin_headers)

        resp = client.get(f"/api/users/user/{sd1['id']}/transactions", headers=sd1_headers)

        assert resp.status_code == 200, resp.text
        assert resp.json()["data"][0]["type"] == "adjustment"
        assert resp.json()["pagination"]["total"] == 1


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["environment"] == "test"
