"""OAuth callback use case - turns a provider redirect into stored credentials."""

from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..interfaces.services import IConfigResolver, IStateCodec, ITokenExchangeRegistry, ITokenStore
from ..schemas.oauth import OAuthTokenData
from ..schemas.platform import PlatformId
from ..services.config_resolver import ConfigSourceUnavailable
from ..services.state_codec import InvalidState
from ..services.token_exchange import ExchangeFailed
from ..services.token_store import StoreUnavailable
from ..utils.time import expires_at_from, now_db_utc

logger = logging.getLogger(__name__)


class PlatformMismatch(ValueError):
    """The platform bound into `state` differs from the callback path."""


@dataclass(frozen=True)
class CallbackOutcome:
    """Where to send the browser, plus a machine-readable reason for logs and tests."""

    redirect_url: str
    success: bool
    reason: str
    message: Optional[str] = None


class HandleOAuthCallbackUseCase:
    """
    Use case for the provider -> broker redirect.

    Steps, each a possible exit with an error redirect:
    provider error, missing parameters, state decode, platform match,
    config lookup, code exchange, token persistence. The browser is always
    redirected to the front end; nothing here raises to the route.
    """

    def __init__(
        self,
        session: AsyncSession,
        config_resolver_factory: Callable[..., IConfigResolver],
        token_store_factory: Callable[..., ITokenStore],
        exchange_registry: ITokenExchangeRegistry,
        state_codec: IStateCodec,
        frontend_url: str,
        clock: Callable[[], datetime] = now_db_utc,
    ):
        self.session = session
        self.config_resolver: IConfigResolver = config_resolver_factory(session=session)
        self.token_store: ITokenStore = token_store_factory(session=session)
        self.exchange_registry = exchange_registry
        self.state_codec = state_codec
        self.frontend_url = frontend_url.rstrip("/")
        self._clock = clock

    def _callback_url(self, platform: str, query: str) -> str:
        return f"{self.frontend_url}/auth/callback/{urllib.parse.quote(platform, safe='')}?{query}"

    def _fail(self, platform: str, reason: str, message: str) -> CallbackOutcome:
        logger.warning("OAuth callback rejected | platform=%s | reason=%s | message=%s", platform, reason, message)
        return CallbackOutcome(
            redirect_url=self._callback_url(platform, "error=" + urllib.parse.quote(message, safe="!*'()")),
            success=False,
            reason=reason,
            message=message,
        )

    def _succeed(self, platform: PlatformId) -> CallbackOutcome:
        query = urllib.parse.urlencode({"connected": platform.value, "success": "true"})
        return CallbackOutcome(
            redirect_url=self._callback_url(platform.value, query),
            success=True,
            reason="connected",
        )

    async def execute(
        self,
        platform: str,
        code: Optional[str] = None,
        state: Optional[str] = None,
        error: Optional[str] = None,
    ) -> CallbackOutcome:
        logger.info(
            "OAuth callback received | platform=%s | has_code=%s | has_state=%s | error=%s",
            platform,
            bool(code),
            bool(state),
            error,
        )

        # 1. Provider-reported failure (e.g. the user denied consent)
        if error:
            return self._fail(platform, "provider_error", error)

        if not code or not state:
            return self._fail(platform, "missing_parameters", "missing_parameters")

        # 2. Recover the user bound to this redirect
        try:
            callback_state = self.state_codec.decode(state)
        except InvalidState:
            return self._fail(platform, "invalid_state", "invalid_state")

        try:
            self._ensure_platform_matches(platform, callback_state.platform_id)
        except PlatformMismatch as exc:
            return self._fail(platform, "platform_mismatch", str(exc))

        platform_id = PlatformId.parse(platform)
        if platform_id is None:
            return self._fail(platform, "unsupported_platform", f"OAuth not implemented for platform: {platform}")

        # 3. Client configuration
        not_configured = f"Platform {platform_id.value} not configured or not enabled"
        try:
            config = await self.config_resolver.resolve(platform_id)
        except ConfigSourceUnavailable:
            return self._fail(platform, "config_unavailable", not_configured)
        if config is None:
            return self._fail(platform, "not_configured", not_configured)

        # 4. Code exchange; codes are single-use so failures are final
        try:
            token_response = await self.exchange_registry.get(platform_id).exchange(code, config)
        except ExchangeFailed as exc:
            return self._fail(platform, "exchange_failed", exc.provider_message)

        # 5. Persist
        token = OAuthTokenData(
            user_id=callback_state.user_id,
            platform_id=platform_id,
            access_token=token_response.access_token,
            refresh_token=token_response.refresh_token,
            token_type=token_response.token_type or "Bearer",
            scope=token_response.scope,
            expires_at=expires_at_from(token_response.expires_in, now=self._clock()),
            raw_provider_payload=token_response.raw_payload,
        )
        try:
            await self.token_store.upsert(token)
        except StoreUnavailable:
            return self._fail(platform, "storage_failed", "Failed to store OAuth tokens")

        logger.info(
            "OAuth account connected | platform=%s | user_id=%s",
            platform_id.value,
            callback_state.user_id,
        )
        return self._succeed(platform_id)

    @staticmethod
    def _ensure_platform_matches(path_platform: str, state_platform: str) -> None:
        if path_platform != state_platform:
            raise PlatformMismatch("Platform mismatch in state")
