"""Authorize URL use case - starts the OAuth flow for a user and platform."""

from __future__ import annotations

import logging
from typing import Callable

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..interfaces.services import IConfigResolver, IStateCodec, ITokenExchangeRegistry
from ..schemas.platform import PlatformId
from ..services.config_resolver import ConfigSourceUnavailable

logger = logging.getLogger(__name__)


class UnsupportedPlatform(ValueError):
    """The requested platform is not one the broker knows."""


class PlatformNotConfigured(Exception):
    """The platform has no enabled client configuration."""


class AuthorizeUrl(BaseModel):
    platform: PlatformId
    auth_url: str
    state: str


class BuildAuthorizeUrlUseCase:
    """Builds the provider consent URL with a state bound to the user."""

    def __init__(
        self,
        session: AsyncSession,
        config_resolver_factory: Callable[..., IConfigResolver],
        exchange_registry: ITokenExchangeRegistry,
        state_codec: IStateCodec,
    ):
        self.session = session
        self.config_resolver: IConfigResolver = config_resolver_factory(session=session)
        self.exchange_registry = exchange_registry
        self.state_codec = state_codec

    async def execute(self, platform: str, user_id: str) -> AuthorizeUrl:
        platform_id = PlatformId.parse(platform)
        if platform_id is None:
            raise UnsupportedPlatform(f"OAuth not implemented for platform: {platform}")

        try:
            config = await self.config_resolver.resolve(platform_id)
        except ConfigSourceUnavailable as exc:
            raise PlatformNotConfigured(f"Platform {platform_id.value} not configured or not enabled") from exc
        if config is None:
            raise PlatformNotConfigured(f"Platform {platform_id.value} not configured or not enabled")

        state = self.state_codec.encode(user_id, platform_id.value)
        auth_url = self.exchange_registry.get(platform_id).build_authorize_url(config, state)
        logger.info("Authorize URL built | platform=%s | user_id=%s", platform_id.value, user_id)
        return AuthorizeUrl(platform=platform_id, auth_url=auth_url, state=state)
