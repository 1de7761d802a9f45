"""Repository pattern implementations for clean data access."""

from .base import BaseRepository
from .oauth_token import OAuthTokenRepository
from .platform_config import PlatformOAuthConfigRepository, LegacyPlatformSettingRepository

__all__ = [
    "BaseRepository",
    "OAuthTokenRepository",
    "PlatformOAuthConfigRepository",
    "LegacyPlatformSettingRepository",
]
