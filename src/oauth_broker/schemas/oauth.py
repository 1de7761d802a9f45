"""Value objects passed between the OAuth callback components."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .platform import PlatformId

# Stripped from provider payloads before they are persisted next to encrypted tokens
SECRET_PAYLOAD_KEYS = frozenset({"access_token", "refresh_token", "id_token"})


@dataclass(frozen=True)
class CallbackState:
    """Identity bound to an authorize redirect and recovered on callback."""

    user_id: str
    platform_id: str


class TokenResponse(BaseModel):
    """Normalised result of an authorization-code exchange."""

    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    raw_payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("expires_in", mode="before")
    @classmethod
    def _parse_expires_in(cls, value):
        if value in (None, ""):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("scope", mode="before")
    @classmethod
    def _parse_scope(cls, value):
        if isinstance(value, (list, tuple)):
            return " ".join(str(item) for item in value)
        return value

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenResponse":
        """Build from a provider JSON body, unwrapping a nested `data` object if present."""
        body = payload
        nested = payload.get("data")
        if not payload.get("access_token") and isinstance(nested, dict):
            body = nested
        return cls(
            access_token=body.get("access_token") or "",
            refresh_token=body.get("refresh_token"),
            token_type=body.get("token_type"),
            expires_in=body.get("expires_in"),
            scope=body.get("scope"),
            raw_payload=payload,
        )


def redact_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a provider payload with token values removed (one level of nesting)."""
    redacted: Dict[str, Any] = {}
    for key, value in payload.items():
        if key in SECRET_PAYLOAD_KEYS:
            continue
        if isinstance(value, dict):
            value = {k: v for k, v in value.items() if k not in SECRET_PAYLOAD_KEYS}
        redacted[key] = value
    return redacted


class OAuthTokenData(BaseModel):
    """Plaintext view of a stored token; what TokenStore reads and writes."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    platform_id: PlatformId
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    scope: Optional[str] = None
    expires_at: Optional[datetime] = None
    raw_provider_payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now
