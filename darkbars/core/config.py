# darkbars/core/config.py
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pathlib import Path

class Settings(BaseSettings):
    app_name: str = Field(default="Dark Bars API", alias="APP_NAME")
    app_env: str = Field(default="dev", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "text"] = Field(default="json", alias="LOG_FORMAT")

    # Backend selection: structured | grounded | webhook
    venue_backend: Literal["structured", "grounded", "webhook"] = Field(default="structured", alias="VENUE_BACKEND")

    # Keys
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")

    # Bases
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    gemini_base: str = Field(default="https://generativelanguage.googleapis.com/v1beta", alias="GEMINI_BASE")
    webhook_url: str | None = Field(default=None, alias="WEBHOOK_URL")
    # "{ip}" is replaced with the caller's address
    ip_geolocation_url: str | None = Field(default="https://ipapi.co/{ip}/json/", alias="IP_GEOLOCATION_URL")

    # Timeouts
    geolocation_timeout_ms: int = Field(default=10000, ge=1, alias="GEOLOCATION_TIMEOUT_MS")
    backend_timeout_s: float = Field(default=30.0, gt=0, alias="BACKEND_TIMEOUT_S")

    # Mirror the browser's permission state (PUT /bars/permission)
    permission_monitoring: bool = Field(default=True, alias="PERMISSION_MONITORING")

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[1] / ".env"),  # darkbars/.env
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

settings = Settings()
