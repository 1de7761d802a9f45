"""create oauth broker tables

Revision ID: create_oauth_broker_tables
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "create_oauth_broker_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "platform_oauth_configs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("platform_id", sa.String(length=50), nullable=False),
        sa.Column("platform_name", sa.String(length=100), nullable=True),
        sa.Column("client_id", sa.String(length=512), nullable=False),
        sa.Column("client_secret", sa.String(length=1024), nullable=False),
        sa.Column("redirect_uri", sa.Text(), nullable=False),
        sa.Column("scopes", postgresql.JSONB(), nullable=True, comment="List of scopes or delimited string"),
        sa.Column("api_endpoint", sa.Text(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_platform_oauth_configs_platform_id", "platform_oauth_configs", ["platform_id"])
    op.create_index("ix_platform_oauth_configs_enabled", "platform_oauth_configs", ["enabled"])

    op.create_table(
        "platform_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("platform_id", sa.String(length=50), nullable=False),
        sa.Column("client_id", sa.String(length=512), nullable=True),
        sa.Column("client_secret", sa.String(length=1024), nullable=True),
        sa.Column("redirect_uri", sa.Text(), nullable=True),
        sa.Column("scopes", postgresql.JSONB(), nullable=True),
        sa.Column("api_endpoint", sa.Text(), nullable=True),
        sa.Column("setting_value", postgresql.JSONB(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_platform_settings_platform_id", "platform_settings", ["platform_id"])
    op.create_index("ix_platform_settings_enabled", "platform_settings", ["enabled"])

    # No unique constraint on (user_id, platform_id): duplicates are reconciled on read
    op.create_table(
        "oauth_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("platform_id", sa.String(length=50), nullable=False),
        sa.Column("access_token_encrypted", sa.Text(), nullable=False),
        sa.Column("refresh_token_encrypted", sa.Text(), nullable=True),
        sa.Column("token_type", sa.String(length=50), nullable=False, server_default="Bearer"),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column(
            "token_data",
            postgresql.JSONB(),
            nullable=True,
            comment="Provider token response with secret fields redacted",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_oauth_tokens_user_id", "oauth_tokens", ["user_id"])
    op.create_index("ix_oauth_tokens_platform_id", "oauth_tokens", ["platform_id"])
    op.create_index("ix_oauth_tokens_user_platform", "oauth_tokens", ["user_id", "platform_id"])
    op.create_index("ix_oauth_tokens_expires_at", "oauth_tokens", ["expires_at"])
    op.create_index("ix_oauth_tokens_updated_at", "oauth_tokens", ["updated_at"])


def downgrade() -> None:
    op.drop_index("ix_oauth_tokens_updated_at", table_name="oauth_tokens")
    op.drop_index("ix_oauth_tokens_expires_at", table_name="oauth_tokens")
    op.drop_index("ix_oauth_tokens_user_platform", table_name="oauth_tokens")
    op.drop_index("ix_oauth_tokens_platform_id", table_name="oauth_tokens")
    op.drop_index("ix_oauth_tokens_user_id", table_name="oauth_tokens")
    op.drop_table("oauth_tokens")

    op.drop_index("ix_platform_settings_enabled", table_name="platform_settings")
    op.drop_index("ix_platform_settings_platform_id", table_name="platform_settings")
    op.drop_table("platform_settings")

    op.drop_index("ix_platform_oauth_configs_enabled", table_name="platform_oauth_configs")
    op.drop_index("ix_platform_oauth_configs_platform_id", table_name="platform_oauth_configs")
    op.drop_table("platform_oauth_configs")
