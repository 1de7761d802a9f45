"""Platform identity and resolved OAuth client configuration."""

from __future__ import annotations

import enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlatformId(str, enum.Enum):
    """Every platform the broker can connect a user to."""

    SPOTIFY = "spotify"
    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    TIKTOK = "tiktok"
    GOOGLE_ANALYTICS = "google_analytics"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["PlatformId"]:
        """Return the member named by `raw`, or None for unknown platforms."""
        if raw is None:
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


def normalize_scopes(value: Any) -> List[str]:
    """Accept a list or a space/comma delimited string of scopes."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item for item in value.replace(",", " ").split() if item]
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if str(item).strip()]
    raise ValueError("scopes must be a list or a delimited string")


class PlatformConfig(BaseModel):
    """Canonical client configuration, whichever table it came from."""

    model_config = ConfigDict(frozen=True)

    platform_id: PlatformId
    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)
    scopes: List[str] = Field(default_factory=list)
    api_endpoint: Optional[str] = None
    enabled: bool = True

    @field_validator("scopes", mode="before")
    @classmethod
    def _parse_scopes(cls, value):
        return normalize_scopes(value)


class PlatformConfigListing(BaseModel):
    """Public view of an enabled platform; never includes client secrets."""

    model_config = ConfigDict(from_attributes=True)

    platform_id: str
    platform_name: Optional[str] = None
    enabled: bool
    scopes: List[str] = Field(default_factory=list)
    redirect_uri: Optional[str] = None

    @field_validator("scopes", mode="before")
    @classmethod
    def _parse_scopes(cls, value):
        return normalize_scopes(value)
