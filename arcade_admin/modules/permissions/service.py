"""Policy enforcement bound to configuration and the live hierarchy."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.core.config import Settings, get_settings
from arcade_admin.modules.accounts.models import Account
from arcade_admin.modules.hierarchy.service import HierarchyResolver

from .exceptions import AccessDeniedError
from .policy import ALLOW, Decision, Operation, authorize, can_manage_role, deny

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthorizationService:
    resolver: HierarchyResolver
    restrict_to_subtree: bool = False

    @classmethod
    def with_session(cls, session: AsyncSession, settings: Settings | None = None) -> "AuthorizationService":
        settings = settings or get_settings()
        return cls(
            HierarchyResolver.with_session(session),
            restrict_to_subtree=settings.permissions.restrict_to_subtree,
        )

    async def check(self, actor: Account, target: Account, operation: Operation) -> Decision:
        decision = authorize(actor, target, operation)
        if not decision:
            return decision
        if (
            self.restrict_to_subtree
            and not actor.is_admin()
            and actor.id != target.id
            and not await self.resolver.is_descendant(actor.id, target.id)
        ):
            return deny(f"{target.id} is outside the subtree of {actor.id}")
        return ALLOW

    async def ensure(self, actor: Account, target: Account, operation: Operation) -> None:
        decision = await self.check(actor, target, operation)
        if not decision:
            logger.info(
                "Denied %s by %s (%s) on %s: %s",
                operation.value,
                actor.username,
                actor.role,
                target.id,
                decision.reason,
            )
            raise AccessDeniedError()

    def ensure_can_create(self, actor: Account, role: str) -> None:
        if not can_manage_role(actor.role, role):
            logger.info("Denied create of %s by %s (%s)", role, actor.username, actor.role)
            raise AccessDeniedError()
