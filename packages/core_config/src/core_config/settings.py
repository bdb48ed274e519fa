from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from core_config.constants import (
    DEFAULT_API_PREFIX,
    DEFAULT_GRAPH_FANOUT_WORKERS,
    DEFAULT_USERS_DATABASE_URL,
)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True,
    )

    environment: str = Field(default="dev", alias="ENVIRONMENT")
    service_log_level: str = Field(default="INFO", alias="SERVICE_LOG_LEVEL")

    # Upstream flow manager. Left unset, every workflow route answers 500
    # FLOW_MANAGER_SERVICE_URL_NOT_CONFIGURED; the process still boots.
    flow_manager_service_url: Optional[str] = Field(default=None, alias="FLOW_MANAGER_SERVICE_URL")

    # Local user storage (principal email -> company unique identifier)
    users_database_url: str = Field(default=DEFAULT_USERS_DATABASE_URL, alias="USERS_DATABASE_URL")

    # HTTP surface
    api_prefix: str = Field(default=DEFAULT_API_PREFIX, alias="API_PREFIX")
    api_rate_limit_default: str = Field(default="100/minute", alias="API_RATE_LIMIT_DEFAULT")

    # Aggregate reads (GET /graph)
    graph_fanout_workers: int = Field(default=DEFAULT_GRAPH_FANOUT_WORKERS, ge=1, alias="GRAPH_FANOUT_WORKERS")

    @field_validator("flow_manager_service_url", mode="before")
    @classmethod
    def _blank_url_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

def get_settings() -> "Settings":
    return Settings()  # type: ignore
