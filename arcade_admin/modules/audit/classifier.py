"""Map an HTTP request onto the audit action it represents."""

from __future__ import annotations

import re
from typing import Optional

from .models import ActionKind

_MUTATING = frozenset({"POST", "PUT", "DELETE"})

_USER_ITEM = re.compile(r"^/user/(?P<id>[^/]+)$")
_USER_SUB = re.compile(r"^/user/(?P<id>[^/]+)/(?P<verb>[^/]+)$")
_GAME_ITEM = re.compile(r"^/(?P<id>[^/]+)$")

_AUTH_POST_RULES = (
    ("/login", ActionKind.LOGIN),
    ("/logout", ActionKind.LOGOUT),
    # a token refresh counts as a fresh login
    ("/refresh", ActionKind.LOGIN),
    ("/change-password", ActionKind.PASSWORD_CHANGE),
)

_USER_POST_VERBS = {
    "ban": ActionKind.BAN_USER,
    "unban": ActionKind.UNBAN_USER,
    "transfer-credit": ActionKind.CREDIT_TRANSFER,
    "adjust-credit": ActionKind.CREDIT_ADJUSTMENT,
}


def _strip(path: str, prefix: str) -> Optional[str]:
    if path == prefix or path.startswith(prefix + "/"):
        return path[len(prefix):] or "/"
    return None


def extract_resource_id(path: str, api_prefix: str = "/api") -> Optional[str]:
    """The affected account or session id, when the path names one."""
    for mount, pattern in (("/users", _USER_SUB), ("/users", _USER_ITEM), ("/logs", _USER_ITEM)):
        rest = _strip(path, api_prefix + mount)
        if rest is not None:
            match = pattern.match(rest)
            if match:
                return match.group("id")
    rest = _strip(path, api_prefix + "/games")
    if rest is not None:
        match = _GAME_ITEM.match(rest)
        if match and match.group("id") not in {"stats", "machines"}:
            return match.group("id")
    return None


def classify_request(
    method: str, path: str, api_prefix: str = "/api"
) -> tuple[Optional[ActionKind], Optional[str]]:
    """Return ``(action, resource_id)``; ``action`` is None for unlogged requests."""
    method = method.upper()
    path = path.rstrip("/") or "/"
    resource_id = extract_resource_id(path, api_prefix)

    rest = _strip(path, api_prefix + "/auth")
    if rest is not None and method == "POST":
        if rest == "/users":
            return ActionKind.CREATE_USER, resource_id
        for fragment, action in _AUTH_POST_RULES:
            if fragment in rest:
                return action, resource_id

    rest = _strip(path, api_prefix + "/users")
    if rest is not None:
        if _USER_ITEM.match(rest):
            if method == "PUT":
                return ActionKind.UPDATE_USER, resource_id
            if method == "DELETE":
                return ActionKind.DELETE_USER, resource_id
        match = _USER_SUB.match(rest)
        if match and method == "POST":
            action = _USER_POST_VERBS.get(match.group("verb"))
            if action is not None:
                return action, resource_id

    if _strip(path, api_prefix + "/games") is not None and method == "GET":
        return None, resource_id

    if "/profile" in path and method == "PUT":
        return ActionKind.PROFILE_UPDATE, resource_id
    if "/admin" in path and method in _MUTATING:
        return ActionKind.SYSTEM_CONFIG_CHANGE, resource_id
    if "/bulk" in path and method in _MUTATING:
        return ActionKind.BULK_OPERATION, resource_id
    return None, resource_id
