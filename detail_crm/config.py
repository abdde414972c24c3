"""CRM configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class CRMSettings(BaseSettings):
    environment: str = Field(
        "development",
        validation_alias=AliasChoices("CRM_ENVIRONMENT", "VERCEL_ENV"),
    )
    database_url: str = "sqlite+aiosqlite:///detail_crm.db"
    echo_sql: bool = False
    app_title: str = "Detail Dynamics CRM"

    # Public base URLs used to build OAuth redirect URIs
    app_url: str = Field(
        "",
        validation_alias=AliasChoices("CRM_APP_URL", "NEXT_PUBLIC_APP_URL"),
    )
    production_url: str = "https://detail-dynamics-crm.vercel.app"

    auth_secret: str = ""
    auth_cookie_name: str = "dd_crm_session"
    auth_cookie_secure: bool = False
    auth_session_ttl_seconds: int = 86400 * 7
    auth_rate_limit_window_seconds: int = 300
    auth_rate_limit_max_attempts: int = 10
    auth_rate_limit_block_seconds: int = 600

    # Google (Calendar, Gmail, Business Profile share one OAuth client)
    google_client_id: str | None = Field(
        None, validation_alias=AliasChoices("CRM_GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_ID")
    )
    google_client_secret: str | None = Field(
        None, validation_alias=AliasChoices("CRM_GOOGLE_CLIENT_SECRET", "GOOGLE_CLIENT_SECRET")
    )
    google_redirect_uri: str | None = Field(
        None, validation_alias=AliasChoices("CRM_GOOGLE_REDIRECT_URI", "GOOGLE_REDIRECT_URI")
    )

    # Microsoft (Outlook / Office 365)
    microsoft_client_id: str | None = Field(
        None, validation_alias=AliasChoices("CRM_MICROSOFT_CLIENT_ID", "MICROSOFT_CLIENT_ID")
    )
    microsoft_client_secret: str | None = Field(
        None,
        validation_alias=AliasChoices("CRM_MICROSOFT_CLIENT_SECRET", "MICROSOFT_CLIENT_SECRET"),
    )

    # Direct PostgreSQL access for admin schema commands
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_name: str = "postgres"
    db_password: str | None = Field(
        None, validation_alias=AliasChoices("CRM_DB_PASSWORD", "DB_PASSWORD")
    )

    storage_dir: str = "data/storage"
    metrics_window_days: int = 30

    model_config = {"env_prefix": "CRM_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def templates_dir(self) -> Path:
        return self.base_dir / "templates"

    @property
    def storage_root(self) -> Path:
        path = Path(self.storage_dir)
        if not path.is_absolute():
            path = self.project_dir / path
        return path

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}

    @property
    def base_url(self) -> str:
        """Public origin of the deployed app, without a trailing slash."""
        if self.is_production:
            return self.production_url.rstrip("/")
        return (self.app_url or "http://localhost:3000").rstrip("/")

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def microsoft_configured(self) -> bool:
        return bool(self.microsoft_client_id and self.microsoft_client_secret)

    def admin_database_url(self) -> str | None:
        """PostgreSQL URL built from DB_PASSWORD, or None when no password is set."""
        if not self.db_password:
            return None
        password = quote(self.db_password, safe="")
        return (
            f"postgresql+asyncpg://{self.db_user}:{password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = CRMSettings()
