"""Authorization-code exchange, one strategy per provider wire format.

Providers disagree on how the grant is presented (form vs JSON body, Basic
auth vs credentials in the body, GET vs POST); each strategy hides that behind
`exchange(code, config) -> TokenResponse`. Callers dispatch through
`TokenExchangeRegistry`, which refuses to start unless every `PlatformId`
has a strategy.
"""

from __future__ import annotations

import base64
import logging
import urllib.parse
from typing import Any, Dict, Iterable, Optional, Tuple, Type

import httpx
from pydantic import ValidationError

from ..schemas.oauth import TokenResponse
from ..schemas.platform import PlatformConfig, PlatformId

logger = logging.getLogger(__name__)

# Twitter's verifier is a constant, so it can never match a per-request
# code_challenge; the authorize URL pairs it with a plain challenge of the same value.
# TODO: persist a random verifier per authorize request and read it back on callback.
PKCE_PLACEHOLDER_VERIFIER = "challenge"

_MAX_MESSAGE_LENGTH = 300


class ExchangeFailed(Exception):
    """The provider rejected the code or could not be reached."""

    def __init__(self, platform: str, provider_status: Optional[int], provider_message: str):
        super().__init__(provider_message)
        self.platform = platform
        self.provider_status = provider_status
        self.provider_message = provider_message


def _provider_message(payload: Any, fallback: str) -> str:
    """Pull the most descriptive error text out of a provider body."""
    if isinstance(payload, dict):
        for key in ("error_description", "message", "error"):
            value = payload.get(key)
            if isinstance(value, dict):
                nested = value.get("message") or value.get("description")
                if isinstance(nested, str) and nested:
                    return nested
            elif isinstance(value, str) and value and not (key == "message" and value in {"error", "success"}):
                return value
        nested_data = payload.get("data")
        if isinstance(nested_data, dict):
            description = nested_data.get("description")
            if isinstance(description, str) and description:
                return description
    return fallback


class TokenExchangeStrategy:
    """Shared request/response handling; subclasses define the wire shape."""

    platform_ids: Tuple[PlatformId, ...] = ()
    token_url: str = ""
    authorize_url: str = ""
    scope_separator: str = " "
    client_id_param: str = "client_id"

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    async def exchange(self, code: str, config: PlatformConfig) -> TokenResponse:
        platform = config.platform_id.value
        logger.info("Exchanging authorization code | platform=%s | endpoint=%s", platform, self.token_url)
        try:
            response = await self._send(code, config)
        except httpx.HTTPError as exc:
            logger.error("Token endpoint unreachable | platform=%s | error=%s", platform, exc.__class__.__name__)
            raise ExchangeFailed(platform, None, f"Failed to contact {platform} token endpoint") from exc

        return self._parse(platform, response)

    async def _send(self, code: str, config: PlatformConfig) -> httpx.Response:
        raise NotImplementedError

    def _parse(self, platform: str, response: httpx.Response) -> TokenResponse:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success:
            fallback = (response.text or "").strip()[:_MAX_MESSAGE_LENGTH] or f"HTTP {response.status_code}"
            message = _provider_message(payload, fallback)
            logger.error(
                "Authorization code exchange failed | platform=%s | status=%s | message=%s",
                platform,
                response.status_code,
                message,
            )
            raise ExchangeFailed(platform, response.status_code, message)

        if not isinstance(payload, dict):
            logger.error("Token endpoint returned non-JSON body | platform=%s | status=%s", platform, response.status_code)
            raise ExchangeFailed(platform, response.status_code, "Token endpoint returned an invalid response")

        try:
            token = TokenResponse.from_payload(payload)
        except ValidationError as exc:
            message = _provider_message(payload, "Token response missing access_token")
            logger.error(
                "Token response rejected | platform=%s | status=%s | message=%s",
                platform,
                response.status_code,
                message,
            )
            raise ExchangeFailed(platform, response.status_code, message) from exc

        logger.info(
            "Authorization code exchanged | platform=%s | has_refresh=%s | expires_in=%s",
            platform,
            bool(token.refresh_token),
            token.expires_in,
        )
        return token

    @staticmethod
    def _basic_auth(config: PlatformConfig) -> Dict[str, str]:
        credentials = f"{config.client_id}:{config.client_secret}".encode("utf-8")
        return {"Authorization": "Basic " + base64.b64encode(credentials).decode("ascii")}

    def authorize_params(self, config: PlatformConfig, state: str) -> Dict[str, Any]:
        return {
            self.client_id_param: config.client_id,
            "redirect_uri": config.redirect_uri,
            "response_type": "code",
            "scope": self.scope_separator.join(config.scopes),
            "state": state,
        }

    def build_authorize_url(self, config: PlatformConfig, state: str) -> str:
        return self.authorize_url + "?" + urllib.parse.urlencode(self.authorize_params(config, state))


class SpotifyTokenExchange(TokenExchangeStrategy):
    platform_ids = (PlatformId.SPOTIFY,)
    token_url = "https://accounts.spotify.com/api/token"
    authorize_url = "https://accounts.spotify.com/authorize"

    async def _send(self, code: str, config: PlatformConfig) -> httpx.Response:
        return await self.http_client.post(
            self.token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": config.redirect_uri,
            },
            headers=self._basic_auth(config),
        )


class GoogleTokenExchange(TokenExchangeStrategy):
    """YouTube and Google Analytics share Google's token endpoint."""

    platform_ids = (PlatformId.YOUTUBE, PlatformId.GOOGLE_ANALYTICS)
    token_url = "https://oauth2.googleapis.com/token"
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"

    async def _send(self, code: str, config: PlatformConfig) -> httpx.Response:
        return await self.http_client.post(
            self.token_url,
            json={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": config.redirect_uri,
                "client_id": config.client_id,
                "client_secret": config.client_secret,
            },
        )

    def authorize_params(self, config: PlatformConfig, state: str) -> Dict[str, Any]:
        params = super().authorize_params(config, state)
        # offline + consent so Google returns a refresh token every time
        params.update({"access_type": "offline", "include_granted_scopes": "true", "prompt": "consent"})
        return params


class FacebookTokenExchange(TokenExchangeStrategy):
    """Facebook and Instagram both log in through the Graph API dialog."""

    platform_ids = (PlatformId.FACEBOOK, PlatformId.INSTAGRAM)
    token_url = "https://graph.facebook.com/v18.0/oauth/access_token"
    authorize_url = "https://www.facebook.com/v18.0/dialog/oauth"
    scope_separator = ","

    async def _send(self, code: str, config: PlatformConfig) -> httpx.Response:
        return await self.http_client.get(
            self.token_url,
            params={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "redirect_uri": config.redirect_uri,
                "code": code,
            },
        )


class TwitterTokenExchange(TokenExchangeStrategy):
    platform_ids = (PlatformId.TWITTER,)
    token_url = "https://api.twitter.com/2/oauth2/token"
    authorize_url = "https://twitter.com/i/oauth2/authorize"

    async def _send(self, code: str, config: PlatformConfig) -> httpx.Response:
        return await self.http_client.post(
            self.token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": config.redirect_uri,
                "client_id": config.client_id,
                "code_verifier": PKCE_PLACEHOLDER_VERIFIER,
            },
            headers=self._basic_auth(config),
        )

    def authorize_params(self, config: PlatformConfig, state: str) -> Dict[str, Any]:
        params = super().authorize_params(config, state)
        params.update({"code_challenge": PKCE_PLACEHOLDER_VERIFIER, "code_challenge_method": "plain"})
        return params


class TikTokTokenExchange(TokenExchangeStrategy):
    platform_ids = (PlatformId.TIKTOK,)
    token_url = "https://open-api.tiktok.com/oauth/access_token/"
    authorize_url = "https://www.tiktok.com/auth/authorize/"
    scope_separator = ","
    client_id_param = "client_key"

    async def _send(self, code: str, config: PlatformConfig) -> httpx.Response:
        return await self.http_client.post(
            self.token_url,
            json={
                "client_key": config.client_id,
                "client_secret": config.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": config.redirect_uri,
            },
        )


DEFAULT_STRATEGIES: Tuple[Type[TokenExchangeStrategy], ...] = (
    SpotifyTokenExchange,
    GoogleTokenExchange,
    FacebookTokenExchange,
    TwitterTokenExchange,
    TikTokTokenExchange,
)


class TokenExchangeRegistry:
    """Exhaustive PlatformId -> strategy table."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        strategy_classes: Iterable[Type[TokenExchangeStrategy]] = DEFAULT_STRATEGIES,
    ):
        self._strategies: Dict[PlatformId, TokenExchangeStrategy] = {}
        for strategy_cls in strategy_classes:
            strategy = strategy_cls(http_client)
            for platform_id in strategy_cls.platform_ids:
                if platform_id in self._strategies:
                    raise RuntimeError(f"Duplicate token exchange strategy for platform: {platform_id.value}")
                self._strategies[platform_id] = strategy

        missing = sorted(p.value for p in PlatformId if p not in self._strategies)
        if missing:
            raise RuntimeError(f"No token exchange strategy for platforms: {', '.join(missing)}")

    def get(self, platform_id: PlatformId) -> TokenExchangeStrategy:
        return self._strategies[PlatformId(platform_id)]
