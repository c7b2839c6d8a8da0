"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./arcade_admin.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None
    auto_create: bool = True


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me-access", min_length=8)
    refresh_secret_key: str = Field(default="change-me-refresh", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    issuer: str = "arcade-admin-backend"
    audience: str = "arcade-admin-frontend"
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    cookie_secure: bool = False


class AuditSettings(BaseModel):
    enabled: bool = True
    retention_days: int = Field(default=90, ge=1)
    recent_hours: int = 24
    recent_limit: int = 100
    max_page_size: int = 500


class PermissionSettings(BaseModel):
    # False keeps the role-class check only; True additionally requires the
    # target to sit inside the actor's own subtree.
    restrict_to_subtree: bool = False


class CreditSettings(BaseModel):
    enforce_non_negative_adjust: bool = True


class CorsSettings(BaseModel):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Arcade Admin Server"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    audit: AuditSettings = AuditSettings()
    permissions: PermissionSettings = PermissionSettings()
    credit: CreditSettings = CreditSettings()
    cors: CorsSettings = CorsSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes

    @property
    def expose_stack_traces(self) -> bool:
        return self.environment == "development" and self.debug


@lru_cache()
def get_settings() -> Settings:
    return Settings()
