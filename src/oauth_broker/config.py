import os
from typing import Self

from cryptography.fernet import Fernet
from pydantic import BaseModel, Field, model_validator, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, EnvSettingsSource
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


class DbSettings(BaseModel):
    url: str = Field(default_factory=lambda: os.getenv("DATABASE_URL", "").strip())
    echo: bool = Field(default_factory=lambda: os.getenv("DB_ECHO", "").strip().lower() in {"1", "true", "yes"})

    @model_validator(mode="after")
    def _validate(self) -> Self:
        if not self.url:
            raise ValueError("DATABASE_URL environment variable must be set.")
        return self


class FrontendSettings(BaseModel):
    # Browser lands here after every OAuth callback, success or failure
    base_url: str = Field(
        default_factory=lambda: (os.getenv("FRONTEND_URL", "").strip() or "http://localhost:3000").rstrip("/")
    )


class OAuthSettings(BaseModel):
    encryption_key: str = Field(default_factory=lambda: os.getenv("OAUTH_ENCRYPTION_KEY", "").strip())
    # Unset means provider calls have no timeout
    http_timeout_seconds: float | None = Field(default_factory=lambda: _optional_float("OAUTH_HTTP_TIMEOUT_SECONDS"))

    @model_validator(mode="after")
    def _validate(self) -> Self:
        if not self.encryption_key:
            raise ValueError("OAUTH_ENCRYPTION_KEY environment variable must be set.")
        try:
            Fernet(self.encryption_key.encode("utf-8"))
        except (ValueError, TypeError) as exc:
            raise ValueError("Invalid OAUTH_ENCRYPTION_KEY. Expected urlsafe base64 32 bytes.") from exc
        if self.http_timeout_seconds is not None and self.http_timeout_seconds <= 0:
            raise ValueError("OAUTH_HTTP_TIMEOUT_SECONDS must be greater than zero.")
        return self


class RelaxedEnvSettingsSource(EnvSettingsSource):
    def decode_complex_value(self, field_name, field, value):
        try:
            return super().decode_complex_value(field_name, field, value)
        except Exception:
            return value


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")
    api_prefix: str = Field(default_factory=lambda: os.getenv("API_PREFIX", "/api").strip() or "/api")
    cors_allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"])
    cors_allow_credentials: bool = Field(default=True)
    db: DbSettings = DbSettings()
    frontend: FrontendSettings = FrontendSettings()
    oauth: OAuthSettings = OAuthSettings()

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value):
        if value is None:
            return ["*"]
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or stripped == "*":
                return ["*"]
            return [item.strip() for item in stripped.split(",") if item.strip()]
        if isinstance(value, (list, tuple, set)):
            origins = [str(item).strip() for item in value if str(item).strip()]
            return origins or ["*"]
        raise ValueError("Invalid cors_allowed_origins format; provide comma-separated string or list.")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            RelaxedEnvSettingsSource(settings_cls),
            dotenv_settings,
            file_secret_settings,
        )


settings = Settings()
