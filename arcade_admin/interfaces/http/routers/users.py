"""Hierarchy listings, account management and credit endpoints."""
from math import ceil

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.core.errors import InvalidInputError
from arcade_admin.core.security import get_current_account
from arcade_admin.interfaces.http.deps import (
    get_account_service,
    get_authorization_service,
    get_credit_ledger,
    get_db_session,
    get_hierarchy_resolver,
)
from arcade_admin.interfaces.http.middleware import contribute
from arcade_admin.modules.accounts.models import Account, AccountUpdateInput, Role
from arcade_admin.modules.accounts.service import AccountService
from arcade_admin.modules.hierarchy.service import HierarchyResolver
from arcade_admin.modules.ledger.service import CreditLedger
from arcade_admin.modules.permissions.exceptions import AccessDeniedError
from arcade_admin.modules.permissions.policy import Operation
from arcade_admin.modules.permissions.service import AuthorizationService
from arcade_admin.schemas import (
    AccountOut,
    AdjustmentOut,
    ApiResponse,
    CreditAmountRequest,
    CreditTransactionOut,
    HierarchyStatsOut,
    PaginationMeta,
    TransferOut,
    UpdateUserRequest,
)

router = APIRouter()

AccountList = ApiResponse[list[AccountOut]]


def _listing(accounts: list[Account]) -> AccountList:
    return AccountList(data=[AccountOut.from_domain(account) for account in accounts], count=len(accounts))


async def _visible(actor: Account, role: Role, resolver: HierarchyResolver) -> AccountList:
    return _listing(await resolver.visible_accounts(actor, role.value))


_ROLE_LABELS = {
    Role.SUPER_DISTRIBUTOR: "Super distributors",
    Role.DISTRIBUTOR: "Distributors",
    Role.RETAILER: "Retailers",
}


async def _own(actor: Account, role: Role, resolver: HierarchyResolver, *, as_role: Role) -> AccountList:
    if actor.role != as_role.value:
        raise AccessDeniedError(f"Access denied - {_ROLE_LABELS[as_role]} only")
    return _listing(await resolver.descendants_of(actor.id, role.value))


# ---- listings -------------------------------------------------------------


@router.get("/super-distributors", response_model=AccountList, response_model_exclude_none=True)
async def list_super_distributors(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _visible(current, Role.SUPER_DISTRIBUTOR, resolver)


@router.get("/distributors", response_model=AccountList, response_model_exclude_none=True)
async def list_distributors(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _visible(current, Role.DISTRIBUTOR, resolver)


@router.get("/retailers", response_model=AccountList, response_model_exclude_none=True)
async def list_retailers(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _visible(current, Role.RETAILER, resolver)


@router.get("/users", response_model=AccountList, response_model_exclude_none=True)
async def list_users(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _visible(current, Role.USER, resolver)


@router.get("/stats", response_model=ApiResponse[HierarchyStatsOut], response_model_exclude_none=True)
async def hierarchy_stats(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    stats = await resolver.stats_for(current)
    return ApiResponse(data=HierarchyStatsOut.from_domain(stats))


@router.get("/my-distributors", response_model=AccountList, response_model_exclude_none=True)
async def my_distributors(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _own(current, Role.DISTRIBUTOR, resolver, as_role=Role.SUPER_DISTRIBUTOR)


@router.get("/my-retailers", response_model=AccountList, response_model_exclude_none=True)
async def my_retailers(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _own(current, Role.RETAILER, resolver, as_role=Role.SUPER_DISTRIBUTOR)


@router.get("/my-users", response_model=AccountList, response_model_exclude_none=True)
async def my_users(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _own(current, Role.USER, resolver, as_role=Role.SUPER_DISTRIBUTOR)


@router.get("/my-retailers-as-distributor", response_model=AccountList, response_model_exclude_none=True)
async def my_retailers_as_distributor(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _own(current, Role.RETAILER, resolver, as_role=Role.DISTRIBUTOR)


@router.get("/my-users-as-distributor", response_model=AccountList, response_model_exclude_none=True)
async def my_users_as_distributor(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _own(current, Role.USER, resolver, as_role=Role.DISTRIBUTOR)


@router.get("/my-users-as-retailer", response_model=AccountList, response_model_exclude_none=True)
async def my_users_as_retailer(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return await _own(current, Role.USER, resolver, as_role=Role.RETAILER)


@router.get("/online-users", response_model=AccountList, response_model_exclude_none=True)
async def online_users(
    current: Account = Depends(get_current_account),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
):
    return _listing(await resolver.online_users(current))


# ---- single account -------------------------------------------------------


async def _target(
    user_id: str,
    actor: Account,
    operation: Operation,
    account_service: AccountService,
    authorization: AuthorizationService,
) -> Account:
    target = await account_service.require(user_id)
    await authorization.ensure(actor, target, operation)
    return target


@router.get("/user/{user_id}", response_model=ApiResponse[AccountOut], response_model_exclude_none=True)
async def get_user(
    user_id: str,
    current: Account = Depends(get_current_account),
    account_service: AccountService = Depends(get_account_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
):
    target = await _target(user_id, current, Operation.READ, account_service, authorization)
    return ApiResponse(data=AccountOut.from_domain(target))


@router.put("/user/{user_id}", response_model=ApiResponse[AccountOut], response_model_exclude_none=True)
async def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    request: Request,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
):
    target = await _target(user_id, current, Operation.UPDATE, account_service, authorization)
    changes = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or name == "email"
    }
    contribute(request, targetUsername=target.username, changes=payload.model_dump(exclude_unset=True, by_alias=True))
    if changes.get("role") not in (None, target.role):
        authorization.ensure_can_create(current, changes["role"])

    updated = await account_service.update_account(target.id, AccountUpdateInput(**changes))
    await db.commit()
    return ApiResponse(message="User updated successfully", data=AccountOut.from_domain(updated))


@router.delete("/user/{user_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
async def delete_user(
    user_id: str,
    request: Request,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
):
    if user_id == current.id:
        raise InvalidInputError("You cannot delete your own account")
    target = await _target(user_id, current, Operation.DELETE, account_service, authorization)
    contribute(request, targetUsername=target.username)
    await account_service.delete_account(target.id)
    await db.commit()
    return ApiResponse(message="User deleted successfully")


@router.post("/user/{user_id}/ban", response_model=ApiResponse[AccountOut], response_model_exclude_none=True)
async def ban_user(
    user_id: str,
    request: Request,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
):
    target = await _target(user_id, current, Operation.BAN, account_service, authorization)
    contribute(request, targetUsername=target.username)
    banned = await account_service.ban(target.id)
    await db.commit()
    return ApiResponse(message="User banned successfully", data=AccountOut.from_domain(banned))


@router.post("/user/{user_id}/unban", response_model=ApiResponse[AccountOut], response_model_exclude_none=True)
async def unban_user(
    user_id: str,
    request: Request,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
):
    target = await _target(user_id, current, Operation.BAN, account_service, authorization)
    contribute(request, targetUsername=target.username)
    restored = await account_service.unban(target.id)
    await db.commit()
    return ApiResponse(message="User unbanned successfully", data=AccountOut.from_domain(restored))


# ---- credit ---------------------------------------------------------------


@router.post(
    "/user/{user_id}/transfer-credit",
    response_model=ApiResponse[TransferOut],
    response_model_exclude_none=True,
)
async def transfer_credit(
    user_id: str,
    request: Request,
    payload: CreditAmountRequest,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    ledger: CreditLedger = Depends(get_credit_ledger),
):
    contribute(request, amount=payload.amount)
    result = await ledger.transfer(user_id, payload.amount, current)
    await db.commit()
    contribute(
        request,
        targetUsername=result.target.username,
        balanceBefore=result.target_balance_before,
        balanceAfter=result.target.balance,
        description=f"Transferred {result.amount:g} to {result.target.username}",
    )
    return ApiResponse(
        message="Credit transferred successfully",
        data=TransferOut(
            from_user=AccountOut.from_domain(result.source),
            to_user=AccountOut.from_domain(result.target),
            amount=result.amount,
        ),
    )


@router.post(
    "/user/{user_id}/adjust-credit",
    response_model=ApiResponse[AdjustmentOut],
    response_model_exclude_none=True,
)
async def adjust_credit(
    user_id: str,
    request: Request,
    payload: CreditAmountRequest,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    ledger: CreditLedger = Depends(get_credit_ledger),
):
    contribute(request, amount=payload.amount)
    result = await ledger.adjust(user_id, payload.amount, current)
    await db.commit()
    contribute(
        request,
        targetUsername=result.account.username,
        balanceBefore=result.balance_before,
        balanceAfter=result.account.balance,
        description=f"Adjusted {result.account.username} by {result.delta:+g}",
    )
    return ApiResponse(
        message="Credit adjusted successfully",
        data=AdjustmentOut(
            user=AccountOut.from_domain(result.account),
            amount=result.delta,
            balance_before=result.balance_before,
            balance_after=result.account.balance,
        ),
    )


@router.get(
    "/user/{user_id}/transactions",
    response_model=ApiResponse[list[CreditTransactionOut]],
    response_model_exclude_none=True,
)
async def credit_history(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    current: Account = Depends(get_current_account),
    ledger: CreditLedger = Depends(get_credit_ledger),
):
    records, total = await ledger.history(user_id, current, limit=limit, offset=(page - 1) * limit)
    return ApiResponse(
        data=[CreditTransactionOut.from_domain(record) for record in records],
        count=len(records),
        pagination=PaginationMeta(page=page, limit=limit, total=total, total_pages=ceil(total / limit)),
    )
