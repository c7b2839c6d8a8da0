"""
Delete audit log entries older than the retention window.
"""
import argparse
import asyncio
from typing import Optional

from arcade_admin.core.config import get_settings
from arcade_admin.core.logging import configure_logging
from arcade_admin.infrastructure.database.session import get_session
from arcade_admin.modules.audit.service import AuditLogService


async def purge(days: Optional[int]) -> int:
    settings = get_settings()
    configure_logging(settings)

    removed = 0
    async for db in get_session():
        service = AuditLogService.with_session(db, settings)
        removed = await service.purge_older_than(days)
    return removed


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="retention in days (defaults to AUDIT__RETENTION_DAYS)",
    )
    args = parser.parse_args()
    if args.days is not None and args.days < 1:
        parser.error("--days must be at least 1")
    removed = asyncio.run(purge(args.days))
    print(f"Removed {removed} audit log entries")


if __name__ == "__main__":
    main()
