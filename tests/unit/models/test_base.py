"""
Unit tests for Base model.

Tests cover:
- Abstract base class behavior
- Auto-generated table names
- Explicit table names on the broker's models
"""

import pytest
from sqlalchemy.orm import Mapped, mapped_column

from oauth_broker.models.base import Base
from oauth_broker.models import LegacyPlatformSetting, OAuthToken, PlatformOAuthConfig


@pytest.mark.unit
@pytest.mark.model
class TestBaseModel:
    """Test Base model declarative base functionality."""

    def test_base_is_abstract(self):
        assert Base.__abstract__ is True

    def test_tablename_auto_generation(self):
        """Test automatic table name generation from class name."""
        class ScratchModel(Base):
            __abstract__ = False
            id: Mapped[int] = mapped_column(primary_key=True)

        assert ScratchModel.__tablename__ == "scratchmodels"

    def test_models_use_explicit_table_names(self):
        assert OAuthToken.__tablename__ == "oauth_tokens"
        assert PlatformOAuthConfig.__tablename__ == "platform_oauth_configs"
        assert LegacyPlatformSetting.__tablename__ == "platform_settings"

    def test_models_inherit_integer_primary_key(self):
        for model in (OAuthToken, PlatformOAuthConfig, LegacyPlatformSetting):
            pk = [column.name for column in model.__table__.primary_key.columns]
            assert pk == ["id"]


@pytest.mark.unit
@pytest.mark.model
class TestOAuthTokenModel:
    def test_user_platform_index_is_not_unique(self):
        """Duplicate rows per (user, platform) must be insertable."""
        index = next(ix for ix in OAuthToken.__table__.indexes if ix.name == "ix_oauth_tokens_user_platform")

        assert [column.name for column in index.columns] == ["user_id", "platform_id"]
        assert index.unique is False

    def test_no_unique_constraint_on_key(self):
        from sqlalchemy import UniqueConstraint

        uniques = [c for c in OAuthToken.__table__.constraints if isinstance(c, UniqueConstraint)]
        assert uniques == []

    async def test_duplicate_rows_can_be_stored(self, oauth_token_factory, db_session):
        await oauth_token_factory(user_id="user-1", platform_id="spotify")
        await oauth_token_factory(user_id="user-1", platform_id="spotify")

        from sqlalchemy import func, select

        count = await db_session.scalar(select(func.count()).select_from(OAuthToken))
        assert count == 2

    async def test_token_type_defaults_to_bearer(self, db_session):
        token = OAuthToken(user_id="u", platform_id="tiktok", access_token_encrypted="x")
        db_session.add(token)
        await db_session.flush()

        assert token.token_type == "Bearer"
        assert token.created_at is not None
        assert token.updated_at is not None
