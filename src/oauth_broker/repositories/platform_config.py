"""Repositories for the primary and legacy platform configuration tables."""

from __future__ import annotations

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base import BaseRepository
from ..models.platform_config import LegacyPlatformSetting, PlatformOAuthConfig


class PlatformOAuthConfigRepository(BaseRepository[PlatformOAuthConfig]):
    def __init__(self, session: AsyncSession):
        super().__init__(PlatformOAuthConfig, session)

    async def get_enabled(self, platform_id: str) -> Optional[PlatformOAuthConfig]:
        stmt = (
            select(PlatformOAuthConfig)
            .where(
                PlatformOAuthConfig.platform_id == platform_id,
                PlatformOAuthConfig.enabled.is_(True),
            )
            .order_by(PlatformOAuthConfig.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_enabled(self) -> List[PlatformOAuthConfig]:
        stmt = (
            select(PlatformOAuthConfig)
            .where(PlatformOAuthConfig.enabled.is_(True))
            .order_by(PlatformOAuthConfig.platform_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class LegacyPlatformSettingRepository(BaseRepository[LegacyPlatformSetting]):
    def __init__(self, session: AsyncSession):
        super().__init__(LegacyPlatformSetting, session)

    async def get_enabled(self, platform_id: str) -> Optional[LegacyPlatformSetting]:
        stmt = (
            select(LegacyPlatformSetting)
            .where(
                LegacyPlatformSetting.platform_id == platform_id,
                LegacyPlatformSetting.enabled.is_(True),
            )
            .order_by(LegacyPlatformSetting.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
