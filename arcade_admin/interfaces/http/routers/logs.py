"""Audit log queries (admin only)."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from arcade_admin.core.security import get_current_admin
from arcade_admin.interfaces.http.deps import get_audit_log_service
from arcade_admin.modules.accounts.models import Account
from arcade_admin.modules.audit.models import AuditFilters, AuditPage, Pagination
from arcade_admin.modules.audit.service import AuditLogService
from arcade_admin.schemas import ApiResponse, AuditEntryOut, AuditStatsOut, PaginationMeta

router = APIRouter()

EntryPage = ApiResponse[list[AuditEntryOut]]


def pagination_params(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    service: AuditLogService = Depends(get_audit_log_service),
) -> Pagination:
    return service.build_pagination(page, limit, sort_by, sort_order)


def _page(result: AuditPage) -> EntryPage:
    return EntryPage(
        data=[AuditEntryOut.from_domain(entry) for entry in result.entries],
        count=len(result.entries),
        pagination=PaginationMeta(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("", response_model=EntryPage, response_model_exclude_none=True)
@router.get("/", response_model=EntryPage, response_model_exclude_none=True, include_in_schema=False)
async def list_logs(
    _: Account = Depends(get_current_admin),
    user_id: Optional[str] = Query(None, alias="userId"),
    action: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    resource_id: Optional[str] = Query(None, alias="resourceId"),
    search: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    pagination: Pagination = Depends(pagination_params),
    service: AuditLogService = Depends(get_audit_log_service),
):
    filters = AuditFilters(
        actor_id=user_id,
        action=action,
        status=status,
        resource_id=resource_id,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    return _page(await service.list_logs(filters, pagination))


@router.get("/user/{user_id}", response_model=EntryPage, response_model_exclude_none=True)
async def logs_by_user(
    user_id: str,
    _: Account = Depends(get_current_admin),
    pagination: Pagination = Depends(pagination_params),
    service: AuditLogService = Depends(get_audit_log_service),
):
    return _page(await service.logs_by_actor(user_id, pagination))


@router.get("/action/{action}", response_model=EntryPage, response_model_exclude_none=True)
async def logs_by_action(
    action: str,
    _: Account = Depends(get_current_admin),
    pagination: Pagination = Depends(pagination_params),
    service: AuditLogService = Depends(get_audit_log_service),
):
    return _page(await service.logs_by_action(action.upper(), pagination))


@router.get("/recent", response_model=EntryPage, response_model_exclude_none=True)
async def recent_logs(
    _: Account = Depends(get_current_admin),
    hours: Optional[int] = Query(None),
    service: AuditLogService = Depends(get_audit_log_service),
):
    entries = await service.recent(hours)
    return EntryPage(data=[AuditEntryOut.from_domain(entry) for entry in entries], count=len(entries))


@router.get("/stats", response_model=ApiResponse[AuditStatsOut], response_model_exclude_none=True)
async def log_stats(
    _: Account = Depends(get_current_admin),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    service: AuditLogService = Depends(get_audit_log_service),
):
    stats = await service.stats(start_date, end_date)
    return ApiResponse(data=AuditStatsOut.from_domain(stats))


@router.get("/search", response_model=EntryPage, response_model_exclude_none=True)
async def search_logs(
    _: Account = Depends(get_current_admin),
    q: str = Query(""),
    pagination: Pagination = Depends(pagination_params),
    service: AuditLogService = Depends(get_audit_log_service),
):
    return _page(await service.search(q, pagination))
