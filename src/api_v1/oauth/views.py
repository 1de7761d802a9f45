"""OAuth authorize / callback / status endpoints for all connected platforms."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from fastapi.responses import RedirectResponse

from oauth_broker.dependencies import (
    get_build_authorize_url_use_case,
    get_handle_oauth_callback_use_case,
    get_token_store,
)
from oauth_broker.schemas.platform import PlatformId
from oauth_broker.services.token_store import StoreUnavailable, TokenStore
from oauth_broker.use_cases.build_authorize_url import (
    BuildAuthorizeUrlUseCase,
    PlatformNotConfigured,
    UnsupportedPlatform,
)
from oauth_broker.use_cases.handle_oauth_callback import HandleOAuthCallbackUseCase
from .schemas import AccountStatusResponse, AuthUrlResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])


def _error(status_code: int, reason: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"reason": reason, "message": message})


def _parse_platform(platform: str) -> PlatformId:
    platform_id = PlatformId.parse(platform)
    if platform_id is None:
        raise _error(status.HTTP_400_BAD_REQUEST, "unsupported_platform", f"Unsupported platform: {platform}")
    return platform_id


@router.get("/callback/{platform}", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
async def oauth_callback(
    platform: str = Path(..., description="Platform the provider redirected for"),
    code: Optional[str] = Query(None, description="Authorization code returned by the provider"),
    state: Optional[str] = Query(None, description="Opaque state value set when the flow started"),
    error: Optional[str] = Query(None, description="Error reported by the provider, e.g. access_denied"),
    use_case: HandleOAuthCallbackUseCase = Depends(get_handle_oauth_callback_use_case),
) -> RedirectResponse:
    """
    Handle the provider's redirect back to the broker.

    The browser arrives here from the provider, so the response is always a
    redirect to the front end's `/auth/callback/{platform}` page carrying
    either `connected=<platform>&success=true` or `error=<message>`.
    """
    outcome = await use_case.execute(platform, code=code, state=state, error=error)
    return RedirectResponse(url=outcome.redirect_url, status_code=status.HTTP_302_FOUND)


@router.get("/authorize/{platform}", response_model=AuthUrlResponse)
async def oauth_authorize(
    platform: str = Path(...),
    user_id: str = Query(..., min_length=1, description="User the resulting tokens belong to"),
    use_case: BuildAuthorizeUrlUseCase = Depends(get_build_authorize_url_use_case),
) -> AuthUrlResponse:
    """Build the provider consent URL for the front end to redirect the user to."""
    try:
        result = await use_case.execute(platform, user_id)
    except UnsupportedPlatform as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "unsupported_platform", str(exc))
    except PlatformNotConfigured as exc:
        raise _error(status.HTTP_503_SERVICE_UNAVAILABLE, "not_configured", str(exc))

    return AuthUrlResponse(platform=result.platform.value, auth_url=result.auth_url, state=result.state)


@router.get("/status/{platform}", response_model=AccountStatusResponse)
async def oauth_account_status(
    platform: str = Path(...),
    user_id: str = Query(..., min_length=1),
    token_store: TokenStore = Depends(get_token_store),
) -> AccountStatusResponse:
    """Report whether the user holds a live token for the platform."""
    platform_id = _parse_platform(platform)
    try:
        token = await token_store.fetch_current(user_id, platform_id)
    except StoreUnavailable:
        raise _error(status.HTTP_503_SERVICE_UNAVAILABLE, "store_unavailable", "Token store unavailable, retry later")

    if token is None:
        return AccountStatusResponse(platform=platform_id.value, connected=False)

    return AccountStatusResponse(
        platform=platform_id.value,
        connected=True,
        token_type=token.token_type,
        scope=token.scope,
        expires_at=token.expires_at,
    )
