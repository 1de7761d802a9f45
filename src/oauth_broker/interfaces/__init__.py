"""
Service and repository protocols for dependency injection.

Use cases depend on these abstractions rather than concrete implementations.
"""

from .services import (
    IConfigResolver,
    IStateCodec,
    ITokenExchangeStrategy,
    ITokenExchangeRegistry,
    ITokenStore,
)
from .repositories import (
    IOAuthTokenRepository,
    IPlatformOAuthConfigRepository,
    ILegacyPlatformSettingRepository,
)

__all__ = [
    "IConfigResolver",
    "IStateCodec",
    "ITokenExchangeStrategy",
    "ITokenExchangeRegistry",
    "ITokenStore",
    "IOAuthTokenRepository",
    "IPlatformOAuthConfigRepository",
    "ILegacyPlatformSettingRepository",
]
