"""Configuration management for ActivityCalendar."""

from pathlib import Path
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _google_env(name: str) -> AliasChoices:
    """Accept both the prefixed and the bare Google variable name."""
    return AliasChoices(f"CALENDAR_{name}", name)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    # Application
    app_name: str = "ActivityCalendar"
    debug: bool = False
    log_level: str = "INFO"

    # Paths
    upload_dir: Path = Path("public/uploads")
    upload_url_prefix: str = "/uploads"
    frontend_dir: Path | None = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Google Sheets / Drive
    google_spreadsheet_id: str | None = Field(
        default=None, validation_alias=_google_env("GOOGLE_SPREADSHEET_ID")
    )
    google_drive_folder_id: str | None = Field(
        default=None, validation_alias=_google_env("GOOGLE_DRIVE_FOLDER_ID")
    )
    # Credential sources, tried in this order
    google_service_account_json: str | None = Field(
        default=None, validation_alias=_google_env("GOOGLE_SERVICE_ACCOUNT_JSON")
    )
    google_service_account_file: Path | None = Field(
        default=None, validation_alias=_google_env("GOOGLE_SERVICE_ACCOUNT_FILE")
    )
    google_service_account_email: str | None = Field(
        default=None, validation_alias=_google_env("GOOGLE_SERVICE_ACCOUNT_EMAIL")
    )
    google_private_key: str | None = Field(
        default=None, validation_alias=_google_env("GOOGLE_PRIVATE_KEY")
    )

    # Upload limits
    max_upload_size_bytes: int = 25 * 1024 * 1024  # raw upload ceiling
    max_compressed_size_bytes: int = 5 * 1024 * 1024  # target after compression

    # Image processing
    image_compression_enabled: bool = True
    max_image_dimension: int = 2000
    image_quality: int = 85
    thumbnail_size: int = 200
    thumbnail_quality: int = 70

    # Login
    dev_login_enabled: bool = True  # admin/admin when no spreadsheet is configured

    # Rate limiting (requests per minute)
    rate_limit_enabled: bool = True
    rate_limit_default: str = "120/minute"
    rate_limit_uploads: str = "20/minute"
    rate_limit_auth: str = "10/minute"

    # CORS (Cross-Origin Resource Sharing)
    cors_enabled: bool = True
    cors_allow_origins: list[str] = []  # Empty = same-origin only
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_max_age: int = 600

    @property
    def sheets_configured(self) -> bool:
        return bool(self.google_spreadsheet_id)

    @property
    def drive_configured(self) -> bool:
        return bool(self.google_drive_folder_id)

    def setup_directories(self) -> None:
        """Ensure required directories exist."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.setup_directories()
    return settings
