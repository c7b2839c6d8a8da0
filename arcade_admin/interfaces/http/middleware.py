"""Request auditing middleware."""

from __future__ import annotations

import time
from typing import Any, Optional

from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from arcade_admin.modules.audit.classifier import classify_request
from arcade_admin.modules.audit.models import ActionKind, LogStatus
from arcade_admin.modules.audit.service import AuditRecorder


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    for header in ("x-real-ip", "x-client-ip"):
        value = request.headers.get(header)
        if value:
            return value
    return request.client.host if request.client else None


def contribute(request: Request, **details: Any) -> None:
    """Attach route-level facts (amounts, usernames, balances) to the audit entry."""
    current = getattr(request.state, "audit_details", None) or {}
    current.update({key: value for key, value in details.items() if value is not None})
    request.state.audit_details = current


class AuditMiddleware(BaseHTTPMiddleware):
    """Records one audit entry per classified request once the response is out.

    Requests are only recorded when the authentication gate resolved an actor,
    except failed logins which are recorded without one.
    """

    def __init__(self, app, recorder: AuditRecorder, api_prefix: str = "/api") -> None:
        super().__init__(app)
        self.recorder = recorder
        self.api_prefix = api_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # unhandled errors become a 500 outside this middleware, so record now
            entry = self._entry(request, 500, started)
            if entry is not None:
                await self.recorder.record(**entry)
            raise

        entry = self._entry(request, response.status_code, started)
        if entry is not None:
            # runs after the body has been sent; the endpoint's own background work
            # already ran inside call_next
            response.background = BackgroundTask(self.recorder.record, **entry)
        return response

    def _entry(self, request: Request, status_code: int, started: float) -> Optional[dict[str, Any]]:
        action, resource_id = classify_request(request.method, request.url.path, self.api_prefix)
        if action is None:
            return None

        succeeded = 200 <= status_code < 400
        actor_id = getattr(request.state, "actor_id", None)
        details: dict[str, Any] = dict(getattr(request.state, "audit_details", None) or {})

        if actor_id is None:
            if action is not ActionKind.LOGIN or request.url.path.endswith("/refresh") or succeeded:
                return None
            action = ActionKind.FAILED_LOGIN
            details.setdefault("description", "Failed login attempt")

        if resource_id is not None:
            details.setdefault("targetUserId", resource_id)
        user_agent = request.headers.get("user-agent")
        if user_agent:
            details["deviceInfo"] = user_agent
        details["metadata"] = {
            "responseTime": round((time.perf_counter() - started) * 1000),
            "statusCode": status_code,
            "method": request.method,
            "path": request.url.path,
        }
        return {
            "actor_id": actor_id,
            "action": action,
            "status": LogStatus.SUCCESS if succeeded else LogStatus.FAILED,
            "details": details,
            "resource_id": resource_id,
            "ip_address": client_ip(request),
            "user_agent": user_agent,
        }
