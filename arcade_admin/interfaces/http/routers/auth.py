"""Authentication endpoints and account creation."""
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.core.config import Settings
from arcade_admin.core.errors import UnauthenticatedError
from arcade_admin.core.security import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_current_account,
)
from arcade_admin.interfaces.http.deps import (
    get_account_service,
    get_app_settings,
    get_authorization_service,
    get_db_session,
)
from arcade_admin.interfaces.http.middleware import contribute
from arcade_admin.modules.accounts.exceptions import InvalidAccountDataError
from arcade_admin.modules.accounts.models import Account, AccountCreateInput
from arcade_admin.modules.accounts.service import AccountService
from arcade_admin.modules.permissions.exceptions import AccessDeniedError
from arcade_admin.modules.permissions.service import AuthorizationService
from arcade_admin.schemas import (
    AccountOut,
    ApiResponse,
    ChangePasswordRequest,
    CreateUserRequest,
    LoginRequest,
    LoginResult,
    RefreshRequest,
)

router = APIRouter()


def _set_auth_cookies(response: Response, settings: Settings, access: str, refresh: Optional[str] = None) -> None:
    response.set_cookie(
        ACCESS_COOKIE,
        access,
        max_age=settings.security.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.security.cookie_secure,
        samesite="strict",
    )
    if refresh is not None:
        response.set_cookie(
            REFRESH_COOKIE,
            refresh,
            max_age=settings.security.refresh_token_expire_days * 24 * 3600,
            httponly=True,
            secure=settings.security.cookie_secure,
            samesite="strict",
        )


@router.post("/login", response_model=ApiResponse[LoginResult], response_model_exclude_none=True)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
):
    contribute(request, targetUsername=payload.username.strip().lower())
    account = await account_service.authenticate(payload.username, payload.password)
    await account_service.mark_logged_in(account.id)
    await db.commit()
    account = await account_service.require(account.id)
    request.state.actor_id = account.id

    access = create_access_token(account, settings)
    refresh = create_refresh_token(account, settings)
    _set_auth_cookies(response, settings, access, refresh)
    return ApiResponse(
        message="Login successful",
        data=LoginResult(user=AccountOut.from_domain(account), access_token=access, refresh_token=refresh),
    )


@router.post("/refresh", response_model=ApiResponse[LoginResult], response_model_exclude_none=True)
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshRequest] = None,
    account_service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
):
    token = (payload.refresh_token if payload else None) or request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise UnauthenticatedError("Refresh token not found")
    account = await account_service.get_by_id(decode_refresh_token(token, settings))
    if account is None:
        raise UnauthenticatedError("User not found")
    if not account.can_authenticate():
        raise UnauthenticatedError("Account is inactive or banned")
    request.state.actor_id = account.id

    access = create_access_token(account, settings)
    _set_auth_cookies(response, settings, access)
    return ApiResponse(
        message="Token refreshed successfully",
        data=LoginResult(user=AccountOut.from_domain(account), access_token=access, refresh_token=token),
    )


@router.post("/logout", response_model=ApiResponse[None], response_model_exclude_none=True)
async def logout(
    response: Response,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
):
    await account_service.mark_logged_out(current.id)
    await db.commit()
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)
    return ApiResponse(message="Logout successful")


@router.get("/profile", response_model=ApiResponse[AccountOut], response_model_exclude_none=True)
async def profile(current: Account = Depends(get_current_account)):
    return ApiResponse(data=AccountOut.from_domain(current))


@router.post("/change-password", response_model=ApiResponse[None], response_model_exclude_none=True)
async def change_password(
    payload: ChangePasswordRequest,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
):
    await account_service.change_password(
        current.id,
        current_password=payload.old_password,
        new_password=payload.new_password,
        confirm_password=payload.confirm_password,
    )
    await db.commit()
    return ApiResponse(message="Password changed successfully")


@router.post(
    "/users",
    response_model=ApiResponse[AccountOut],
    response_model_exclude_none=True,
    status_code=201,
)
async def create_user(
    payload: CreateUserRequest,
    request: Request,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    account_service: AccountService = Depends(get_account_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
):
    contribute(request, targetUsername=payload.username.strip().lower(), role=payload.role)
    authorization.ensure_can_create(current, payload.role)

    creator_id = current.id
    if payload.created_by and payload.created_by != current.id:
        if not current.is_admin():
            raise AccessDeniedError("Only admins may assign another creator")
        if await account_service.get_by_id(payload.created_by) is None:
            raise InvalidAccountDataError("Creator account does not exist")
        creator_id = payload.created_by

    account = await account_service.create_account(
        AccountCreateInput(
            username=payload.username,
            password=payload.password,
            role=payload.role,
            email=payload.email,
            commission_rate=payload.commission_rate,
            created_by=creator_id,
            is_active=payload.is_active,
        )
    )
    await db.commit()
    contribute(request, targetUserId=account.id, description=f"Created {account.role} {account.username}")
    return ApiResponse(message="User created successfully", data=AccountOut.from_domain(account))


__all__ = ["router"]
