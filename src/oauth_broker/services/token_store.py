"""Secure storage and retrieval for OAuth tokens."""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime
from typing import Callable, List, Optional

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..interfaces.repositories import IOAuthTokenRepository
from ..models.oauth_token import OAuthToken
from ..schemas.oauth import OAuthTokenData, redact_payload
from ..schemas.platform import PlatformId
from ..utils.time import now_db_utc, to_db_utc

logger = logging.getLogger(__name__)


class StoreUnavailable(Exception):
    """The token table could not be read or written."""


class TokenStore:
    """
    Owns persistence of issued tokens.

    - fetch_current collapses duplicate rows to the newest and hides expired tokens.
    - upsert overwrites the current row in place; no history is kept.

    Expired tokens are reported as missing. Stored refresh tokens are not used
    yet, so the caller has to send the user through the authorize flow again.
    """

    def __init__(
        self,
        *,
        session: AsyncSession,
        repository_factory: Callable[..., IOAuthTokenRepository],
        encryption_key: str,
        clock: Callable[[], datetime] = now_db_utc,
    ):
        self.session = session
        self.repo = repository_factory(session=session)
        self._fernet = self._build_fernet(encryption_key)
        self._clock = clock

    @staticmethod
    def _build_fernet(key: str) -> Fernet:
        try:
            raw = key.encode("utf-8")
            # Fernet expects 32 urlsafe base64 bytes
            base64.urlsafe_b64decode(raw)
            return Fernet(raw)
        except (binascii.Error, ValueError, TypeError) as exc:
            raise ValueError("Invalid OAUTH_ENCRYPTION_KEY. Expected urlsafe base64 32 bytes.") from exc

    def _encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("utf-8")

    def _decrypt(self, value: str) -> str:
        try:
            return self._fernet.decrypt(value.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise StoreUnavailable("Stored OAuth token cannot be decrypted. Check encryption key.") from exc

    def _to_data(self, record: OAuthToken) -> OAuthTokenData:
        return OAuthTokenData(
            user_id=record.user_id,
            platform_id=PlatformId(record.platform_id),
            access_token=self._decrypt(record.access_token_encrypted),
            refresh_token=self._decrypt(record.refresh_token_encrypted) if record.refresh_token_encrypted else None,
            token_type=record.token_type or "Bearer",
            scope=record.scope,
            expires_at=record.expires_at,
            raw_provider_payload=record.token_data or {},
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    async def fetch_current(self, user_id: str, platform_id: PlatformId) -> Optional[OAuthTokenData]:
        platform = PlatformId(platform_id).value
        try:
            rows = await self.repo.list_for_user_platform(user_id, platform)
        except SQLAlchemyError as exc:
            logger.error("Token lookup failed | user_id=%s | platform=%s | error=%s", user_id, platform, exc)
            raise StoreUnavailable("Token store unavailable") from exc

        if not rows:
            logger.info("No OAuth token found | user_id=%s | platform=%s", user_id, platform)
            return None

        # Snapshot before cleanup: a failed delete rolls back and expires loaded rows
        current = self._to_data(rows[0])

        if len(rows) > 1:
            await self._delete_duplicates(user_id, platform, rows[1:])

        if current.is_expired(self._clock()):
            logger.info(
                "OAuth token expired | user_id=%s | platform=%s | expires_at=%s",
                user_id,
                platform,
                current.expires_at,
            )
            return None

        return current

    async def _delete_duplicates(self, user_id: str, platform: str, stale: List[OAuthToken]) -> None:
        logger.warning(
            "Duplicate OAuth tokens found | user_id=%s | platform=%s | duplicates=%s",
            user_id,
            platform,
            len(stale),
        )
        stale_ids = [row.id for row in stale]
        deleted = 0
        try:
            for row_id in stale_ids:
                deleted += await self.repo.delete_by_id(row_id)
            await self.session.commit()
        except SQLAlchemyError as exc:
            # The newest row is already in hand; leftovers are retried on the next read
            logger.error(
                "Duplicate token cleanup failed | user_id=%s | platform=%s | error=%s",
                user_id,
                platform,
                exc,
            )
            await self.session.rollback()
            return

        logger.info(
            "Duplicate OAuth tokens removed | user_id=%s | platform=%s | deleted=%s",
            user_id,
            platform,
            deleted,
        )

    async def get_access_token(self, user_id: str, platform_id: PlatformId) -> Optional[str]:
        token = await self.fetch_current(user_id, platform_id)
        return token.access_token if token else None

    async def upsert(self, token: OAuthTokenData) -> OAuthTokenData:
        platform = PlatformId(token.platform_id).value
        try:
            record = await self.repo.upsert(
                user_id=token.user_id,
                platform_id=platform,
                access_token_encrypted=self._encrypt(token.access_token),
                refresh_token_encrypted=self._encrypt(token.refresh_token) if token.refresh_token else None,
                token_type=token.token_type or "Bearer",
                scope=token.scope,
                expires_at=to_db_utc(token.expires_at) if token.expires_at else None,
                token_data=redact_payload(token.raw_provider_payload),
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            logger.error("Storing OAuth tokens failed | user_id=%s | platform=%s | error=%s", token.user_id, platform, exc)
            await self.session.rollback()
            raise StoreUnavailable("Token store unavailable") from exc

        logger.info(
            "OAuth tokens stored | user_id=%s | platform=%s | expires_at=%s | has_refresh=%s",
            token.user_id,
            platform,
            record.expires_at,
            bool(token.refresh_token),
        )
        return token.model_copy(
            update={
                "expires_at": record.expires_at,
                "created_at": record.created_at,
                "updated_at": record.updated_at,
            }
        )
