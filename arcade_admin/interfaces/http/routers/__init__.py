from fastapi import APIRouter

from arcade_admin.interfaces.http.routers import auth, games, logs, users


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(users.router, prefix="/users", tags=["users"])
    router.include_router(logs.router, prefix="/logs", tags=["logs"])
    router.include_router(games.router, prefix="/games", tags=["games"])
    return router


__all__ = [
    "create_api_router",
]
