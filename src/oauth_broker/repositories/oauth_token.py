"""Repository for OAuth token storage."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base import BaseRepository
from ..models.oauth_token import OAuthToken
from ..utils.time import now_db_utc


class OAuthTokenRepository(BaseRepository[OAuthToken]):
    """Data access layer for OAuth tokens keyed by (user_id, platform_id)."""

    def __init__(self, session: AsyncSession):
        super().__init__(OAuthToken, session)

    async def list_for_user_platform(self, user_id: str, platform_id: str) -> List[OAuthToken]:
        """All rows for the key, most recently updated first."""
        stmt = (
            select(OAuthToken)
            .where(
                OAuthToken.user_id == user_id,
                OAuthToken.platform_id == platform_id,
            )
            .order_by(OAuthToken.updated_at.desc(), OAuthToken.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_latest(self, user_id: str, platform_id: str) -> Optional[OAuthToken]:
        rows = await self.list_for_user_platform(user_id, platform_id)
        return rows[0] if rows else None

    async def upsert(
        self,
        *,
        user_id: str,
        platform_id: str,
        access_token_encrypted: str,
        refresh_token_encrypted: Optional[str],
        token_type: str,
        scope: Optional[str],
        expires_at: Optional[datetime],
        token_data: Optional[Dict[str, Any]],
    ) -> OAuthToken:
        """Overwrite the newest row for the key in place, or insert the first one."""
        now = now_db_utc()
        existing = await self.get_latest(user_id, platform_id)
        if existing:
            existing.access_token_encrypted = access_token_encrypted
            existing.refresh_token_encrypted = refresh_token_encrypted
            existing.token_type = token_type
            existing.scope = scope
            existing.expires_at = expires_at
            existing.token_data = token_data
            existing.updated_at = now
            await self.session.flush()
            return existing

        record = OAuthToken(
            user_id=user_id,
            platform_id=platform_id,
            access_token_encrypted=access_token_encrypted,
            refresh_token_encrypted=refresh_token_encrypted,
            token_type=token_type,
            scope=scope,
            expires_at=expires_at,
            token_data=token_data,
            created_at=now,
            updated_at=now,
        )
        return await self.create(record)
