from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from arcade_admin import __version__
from arcade_admin.core.config import Settings, get_settings
from arcade_admin.core.logging import configure_logging
from arcade_admin.infrastructure.database.session import build_session_factory, get_engine, init_db
from arcade_admin.interfaces.http.errors import register_exception_handlers
from arcade_admin.interfaces.http.middleware import AuditMiddleware
from arcade_admin.interfaces.http.routers import create_api_router
from arcade_admin.modules.audit.service import AuditRecorder
from arcade_admin.schemas import HealthResponse


def create_app(settings: Optional[Settings] = None, engine: Optional[AsyncEngine] = None) -> FastAPI:
    settings = settings or get_settings()
    engine = engine or get_engine(settings)
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.database.auto_create:
            await init_db(engine)
        yield

    app = FastAPI(
        title=settings.project_name,
        description="Hierarchical admin backend for arcade operators",
        version=__version__,
        lifespan=lifespan,
    )

    session_factory = build_session_factory(engine)
    recorder = AuditRecorder(session_factory, enabled=settings.audit.enabled)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.audit_recorder = recorder

    app.add_middleware(AuditMiddleware, recorder=recorder, api_prefix=settings.api_prefix)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", environment=settings.environment, version=__version__)

    return app
