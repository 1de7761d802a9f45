"""
Repository protocol definitions to decouple services from SQLAlchemy concrete implementations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from oauth_broker.models.oauth_token import OAuthToken
    from oauth_broker.models.platform_config import LegacyPlatformSetting, PlatformOAuthConfig


class IOAuthTokenRepository(Protocol):
    async def list_for_user_platform(self, user_id: str, platform_id: str) -> List["OAuthToken"]:
        ...

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
    ) -> "OAuthToken":
        ...

    async def delete_by_id(self, id: int) -> int:
        ...


class IPlatformOAuthConfigRepository(Protocol):
    async def get_enabled(self, platform_id: str) -> Optional["PlatformOAuthConfig"]:
        ...

    async def list_enabled(self) -> List["PlatformOAuthConfig"]:
        ...


class ILegacyPlatformSettingRepository(Protocol):
    async def get_enabled(self, platform_id: str) -> Optional["LegacyPlatformSetting"]:
        ...
