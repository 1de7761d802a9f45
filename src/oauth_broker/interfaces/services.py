"""
Service protocols for dependency injection.

Use cases depend on these abstractions so tests can substitute stubs for the
database-backed and network-backed implementations.
"""

from typing import Any, Dict, List, Optional, Protocol

from ..models.platform_config import PlatformOAuthConfig
from ..schemas.oauth import CallbackState, OAuthTokenData, TokenResponse
from ..schemas.platform import PlatformConfig, PlatformId


class IConfigResolver(Protocol):
    """Protocol for resolving a platform's OAuth client configuration."""

    async def resolve(self, platform_id: PlatformId) -> Optional[PlatformConfig]:
        """
        Return the enabled configuration for a platform.

        Returns:
            PlatformConfig, or None when the platform is not configured

        Raises:
            ConfigSourceUnavailable: the configuration tables could not be read
        """
        ...

    async def list_enabled(self) -> List[PlatformOAuthConfig]:
        ...


class IStateCodec(Protocol):
    """Protocol for the opaque `state` round-tripped through the provider."""

    def encode(self, user_id: str, platform_id: str) -> str:
        ...

    def decode(self, state: str) -> CallbackState:
        ...


class ITokenExchangeStrategy(Protocol):
    """Protocol for one provider's authorization-code exchange."""

    platform_ids: tuple
    token_url: str
    authorize_url: str

    async def exchange(self, code: str, config: PlatformConfig) -> TokenResponse:
        ...

    def authorize_params(self, config: PlatformConfig, state: str) -> Dict[str, Any]:
        ...

    def build_authorize_url(self, config: PlatformConfig, state: str) -> str:
        ...


class ITokenExchangeRegistry(Protocol):
    def get(self, platform_id: PlatformId) -> ITokenExchangeStrategy:
        ...


class ITokenStore(Protocol):
    """Protocol for token persistence."""

    async def fetch_current(self, user_id: str, platform_id: PlatformId) -> Optional[OAuthTokenData]:
        """
        Return the live token for a user/platform.

        Returns:
            OAuthTokenData, or None when absent or expired

        Raises:
            StoreUnavailable: the token table could not be read
        """
        ...

    async def get_access_token(self, user_id: str, platform_id: PlatformId) -> Optional[str]:
        ...

    async def upsert(self, token: OAuthTokenData) -> OAuthTokenData:
        ...
