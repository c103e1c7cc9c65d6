"""Application configuration using pydantic-settings."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


class ApiConfig(BaseSettings):
    """Backend API location."""

    base_url: str | None = None
    development_url: str = "https://localhost:54696/"
    production_url: str = "https://todogether.sinanfen.me/"
    verify_ssl: bool = True

    model_config = SettingsConfigDict(env_prefix="TODOGETHER_API_")


class AuthConfig(BaseSettings):
    """Session storage and token lifecycle configuration."""

    storage_backend: str = "file"
    storage_path: Path = Field(default_factory=lambda: Path.home() / ".todogether" / "storage.json")
    storage_key: str = "todogether_tokens"

    # Per-call deadlines in seconds
    refresh_timeout: float = 5.0
    user_timeout: float = 5.0
    validation_timeout: float = 10.0

    # Coalesce overlapping refresh calls into one request
    single_flight_refresh: bool = True
    min_password_length: int = 6

    model_config = SettingsConfigDict(env_prefix="TODOGETHER_AUTH_")


class RequestConfig(BaseSettings):
    """Request gateway retry policy.

    The delay before attempt ``n + 1`` is ``backoff_factor * backoff_base ** n``,
    capped at ``backoff_max`` when set, plus up to ``backoff_jitter`` seconds.
    """

    retry_attempts: int = Field(default=3, ge=1)
    timeout: float = 10.0
    backoff_factor: float = 1.0
    backoff_base: float = 2.0
    backoff_max: float | None = None
    backoff_jitter: float = 0.0

    model_config = SettingsConfigDict(env_prefix="TODOGETHER_REQUEST_")


@dataclass(frozen=True)
class ApiEndpoints:
    """Absolute backend URLs derived from a base URL ending in ``/``."""

    base_url: str

    @property
    def health(self) -> str:
        return self.base_url

    @property
    def login(self) -> str:
        return f"{self.base_url}auth/login"

    @property
    def register(self) -> str:
        return f"{self.base_url}auth/register"

    @property
    def refresh(self) -> str:
        return f"{self.base_url}auth/refresh"

    @property
    def logout(self) -> str:
        return f"{self.base_url}auth/logout"

    @property
    def current_user(self) -> str:
        return f"{self.base_url}users/me"

    @property
    def update_profile(self) -> str:
        return f"{self.base_url}users/profile"

    @property
    def partner_overview(self) -> str:
        return f"{self.base_url}partner/overview"

    @property
    def todo_lists(self) -> str:
        return f"{self.base_url}todolists"

    @property
    def partner_todo_lists(self) -> str:
        return f"{self.base_url}todolists/partner"

    def todo_list(self, todo_list_id: int | str) -> str:
        return f"{self.base_url}todolists/{todo_list_id}"

    def todo_items(self, todo_list_id: int | str) -> str:
        return f"{self.base_url}todolists/{todo_list_id}/items"

    def todo_item(self, todo_list_id: int | str, item_id: int | str) -> str:
        return f"{self.base_url}todolists/{todo_list_id}/items/{item_id}"


class AppConfig(BaseSettings):
    """Top-level application configuration."""

    app_name: str = "To-dogether"
    version: str = "1.0.0"
    environment: Literal["development", "production"] = "development"
    log_level: str | None = None
    json_logs: bool | None = None
    log_file: Path | None = None

    realtime_sync: bool = True
    sync_interval: float | None = None

    api: ApiConfig = Field(default_factory=ApiConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)

    model_config = SettingsConfigDict(
        env_prefix="TODOGETHER_",
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def api_base_url(self) -> str:
        """Base URL for the current environment, always with a trailing slash."""
        url = self.api.base_url or (
            self.api.development_url if self.is_development else self.api.production_url
        )
        return url if url.endswith("/") else f"{url}/"

    @property
    def endpoints(self) -> ApiEndpoints:
        return ApiEndpoints(self.api_base_url)

    @property
    def effective_log_level(self) -> str:
        return self.log_level or ("DEBUG" if self.is_development else "INFO")

    @property
    def effective_sync_interval(self) -> float:
        """Polling interval: 5s in development, 10s in production unless overridden."""
        if self.sync_interval is not None:
            return self.sync_interval
        return 5.0 if self.is_development else 10.0


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()
