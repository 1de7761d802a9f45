from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from ..utils.time import now_db_utc


class OAuthToken(Base):
    """Credentials issued to one user for one platform.

    (user_id, platform_id) is deliberately not unique: concurrent callbacks can
    insert twice, and reads collapse the extra rows.
    """

    __tablename__ = "oauth_tokens"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    platform_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    access_token_encrypted: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    token_type: Mapped[str] = mapped_column(String(50), nullable=False, default="Bearer")
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    token_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
        comment="Provider token response with secret fields redacted",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_db_utc, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_db_utc, nullable=False, index=True)

    __table_args__ = (Index("ix_oauth_tokens_user_platform", "user_id", "platform_id"),)
