"""Pydantic schemas and value objects."""

from .platform import PlatformId, PlatformConfig, PlatformConfigListing, normalize_scopes
from .oauth import CallbackState, TokenResponse, OAuthTokenData, redact_payload

__all__ = [
    "PlatformId",
    "PlatformConfig",
    "PlatformConfigListing",
    "normalize_scopes",
    "CallbackState",
    "TokenResponse",
    "OAuthTokenData",
    "redact_payload",
]
