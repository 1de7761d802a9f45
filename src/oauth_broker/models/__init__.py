__all__ = (
    "Base",
    "DatabaseHelper",
    "db_helper",
    "OAuthToken",
    "PlatformOAuthConfig",
    "LegacyPlatformSetting",
)

from .base import Base
from .db_helper import DatabaseHelper, db_helper
from .oauth_token import OAuthToken
from .platform_config import PlatformOAuthConfig, LegacyPlatformSetting
