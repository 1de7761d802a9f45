"""Encoding of the `state` parameter carried through provider redirects.

The payload is plain JSON in URL-safe base64: it is neither signed nor
time-bound, so anyone can forge a state for any user id. Clients build the
same format, which is why it is kept as-is.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging

from ..schemas.oauth import CallbackState

logger = logging.getLogger(__name__)


class InvalidState(ValueError):
    """The callback `state` could not be decoded into a user and platform."""


class StateCodec:
    """Reversible, URL-safe codec for {userId, platform}."""

    def encode(self, user_id: str, platform_id: str) -> str:
        payload = json.dumps(
            {"userId": user_id, "platform": getattr(platform_id, "value", platform_id)},
            separators=(",", ":"),
        )
        return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")

    def decode(self, state: str) -> CallbackState:
        if not state or not isinstance(state, str):
            raise InvalidState("State is empty")

        # Accept both alphabets and missing padding
        try:
            normalized = state.strip().replace("+", "-").replace("/", "_").rstrip("=")
            normalized += "=" * (-len(normalized) % 4)
            raw = base64.urlsafe_b64decode(normalized.encode("ascii"))
            data = json.loads(raw.decode("utf-8"))
        except (binascii.Error, UnicodeError, ValueError, RecursionError) as exc:
            logger.warning("State decode failed | error=%s", exc.__class__.__name__)
            raise InvalidState("State is not valid base64 JSON") from exc

        if not isinstance(data, dict):
            raise InvalidState("State payload must be an object")

        user_id = data.get("userId")
        platform = data.get("platform")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidState("State is missing userId")
        if not isinstance(platform, str) or not platform:
            raise InvalidState("State is missing platform")

        return CallbackState(user_id=user_id, platform_id=platform)
