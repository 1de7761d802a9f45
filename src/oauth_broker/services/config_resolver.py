"""Resolution of per-platform OAuth client configuration."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..interfaces.repositories import ILegacyPlatformSettingRepository, IPlatformOAuthConfigRepository
from ..models.platform_config import LegacyPlatformSetting, PlatformOAuthConfig
from ..schemas.platform import PlatformConfig, PlatformId

logger = logging.getLogger(__name__)

# Column name -> key used inside the legacy `setting_value` blob
_LEGACY_FIELDS = {
    "client_id": "clientId",
    "client_secret": "clientSecret",
    "redirect_uri": "redirectUri",
    "scopes": "scopes",
    "api_endpoint": "apiEndpoint",
}


class ConfigSourceUnavailable(Exception):
    """The configuration tables could not be queried."""

    def __init__(self, platform_id: Optional[str], message: str):
        super().__init__(message)
        self.platform_id = platform_id


class ConfigResolver:
    """Reads the primary config table, falling back to the legacy one."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        config_repository_factory: Callable[..., IPlatformOAuthConfigRepository],
        legacy_repository_factory: Callable[..., ILegacyPlatformSettingRepository],
    ):
        self.session = session
        self.config_repo = config_repository_factory(session=session)
        self.legacy_repo = legacy_repository_factory(session=session)

    async def resolve(self, platform_id: PlatformId) -> Optional[PlatformConfig]:
        platform = PlatformId(platform_id)
        try:
            primary = await self.config_repo.get_enabled(platform.value)
            if primary:
                config = self._from_primary(platform, primary)
                if config:
                    logger.debug("Platform config resolved | platform=%s | source=primary", platform.value)
                    return config

            legacy = await self.legacy_repo.get_enabled(platform.value)
        except SQLAlchemyError as exc:
            logger.error("Platform config lookup failed | platform=%s | error=%s", platform.value, exc)
            raise ConfigSourceUnavailable(platform.value, "Platform configuration source unavailable") from exc

        if legacy:
            config = self._from_legacy(platform, legacy)
            if config:
                logger.debug("Platform config resolved | platform=%s | source=legacy", platform.value)
                return config

        logger.info("Platform not configured | platform=%s", platform.value)
        return None

    async def list_enabled(self) -> List[PlatformOAuthConfig]:
        try:
            return await self.config_repo.list_enabled()
        except SQLAlchemyError as exc:
            logger.error("Listing platform configs failed | error=%s", exc)
            raise ConfigSourceUnavailable(None, "Platform configuration source unavailable") from exc

    @staticmethod
    def _build(platform: PlatformId, source: str, fields: Dict[str, Any]) -> Optional[PlatformConfig]:
        try:
            return PlatformConfig(platform_id=platform, enabled=True, **fields)
        except ValidationError as exc:
            logger.warning(
                "Incomplete platform config ignored | platform=%s | source=%s | errors=%s",
                platform.value,
                source,
                exc.error_count(),
            )
            return None

    @classmethod
    def _from_primary(cls, platform: PlatformId, row: PlatformOAuthConfig) -> Optional[PlatformConfig]:
        return cls._build(
            platform,
            "primary",
            {column: getattr(row, column) for column in _LEGACY_FIELDS},
        )

    @classmethod
    def _from_legacy(cls, platform: PlatformId, row: LegacyPlatformSetting) -> Optional[PlatformConfig]:
        blob = row.setting_value if isinstance(row.setting_value, dict) else {}
        fields = {column: getattr(row, column) or blob.get(key) for column, key in _LEGACY_FIELDS.items()}
        return cls._build(platform, "legacy", fields)
