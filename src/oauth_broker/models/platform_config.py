from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

_JSON = JSON().with_variant(JSONB(), "postgresql")


class PlatformOAuthConfig(Base):
    """Primary OAuth client configuration, one enabled row per platform."""

    __tablename__ = "platform_oauth_configs"

    platform_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    platform_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    client_id: Mapped[str] = mapped_column(String(512), nullable=False)
    client_secret: Mapped[str] = mapped_column(String(1024), nullable=False)
    redirect_uri: Mapped[str] = mapped_column(Text, nullable=False)
    scopes: Mapped[Any] = mapped_column(_JSON, nullable=True, comment="List of scopes or delimited string")
    api_endpoint: Mapped[str | None] = mapped_column(Text, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)


class LegacyPlatformSetting(Base):
    """Older configuration rows; fields may live only inside `setting_value`."""

    __tablename__ = "platform_settings"

    platform_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    client_id: Mapped[str | None] = mapped_column(String(512), nullable=True)
    client_secret: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    redirect_uri: Mapped[str | None] = mapped_column(Text, nullable=True)
    scopes: Mapped[Any] = mapped_column(_JSON, nullable=True)
    api_endpoint: Mapped[str | None] = mapped_column(Text, nullable=True)
    setting_value: Mapped[dict[str, Any] | None] = mapped_column(_JSON, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
