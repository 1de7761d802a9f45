"""
Pytest configuration and shared fixtures for all tests.

This file provides:
- Database fixtures (in-memory SQLite for fast tests)
- Test data factories for tokens and platform configuration
- Provider HTTP mocking via httpx.MockTransport
- FastAPI test client
"""

import os
import sys
from datetime import timedelta
from typing import AsyncGenerator, Callable, Dict, List

import pytest

# Prepopulate required env vars for settings before imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OAUTH_ENCRYPTION_KEY", "1p_UUU0j5OJ9SxWwtUWFI7Ak4luuL8EA3twJY86W0Z0=")
os.environ.setdefault("FRONTEND_URL", "https://app.example.test")

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import httpx
from cryptography.fernet import Fernet
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport
from faker import Faker

from oauth_broker.models.base import Base
from oauth_broker.models import OAuthToken, PlatformOAuthConfig, LegacyPlatformSetting
from oauth_broker.config import settings
from oauth_broker.container import Container, reset_container
from oauth_broker.repositories.oauth_token import OAuthTokenRepository
from oauth_broker.repositories.platform_config import (
    LegacyPlatformSettingRepository,
    PlatformOAuthConfigRepository,
)
from oauth_broker.schemas.platform import PlatformConfig, PlatformId
from oauth_broker.services.config_resolver import ConfigResolver
from oauth_broker.services.token_store import TokenStore
from oauth_broker.utils.time import now_db_utc
from main import app

fake = Faker()


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # JSON columns carry a JSONB variant that only applies on PostgreSQL
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# TEST DATA FACTORIES
# ============================================================================


@pytest.fixture
def fernet() -> Fernet:
    return Fernet(settings.oauth.encryption_key.encode("utf-8"))


@pytest.fixture
def oauth_token_factory(db_session, fernet):
    """Factory for raw token rows, bypassing TokenStore so duplicates can be seeded."""
    async def _create_token(
        user_id: str = None,
        platform_id: str = PlatformId.SPOTIFY.value,
        access_token: str = None,
        refresh_token: str = None,
        **kwargs
    ) -> OAuthToken:
        now = now_db_utc()
        token = OAuthToken(
            user_id=user_id or fake.uuid4(),
            platform_id=platform_id,
            access_token_encrypted=fernet.encrypt((access_token or fake.sha1()).encode()).decode(),
            refresh_token_encrypted=fernet.encrypt(refresh_token.encode()).decode() if refresh_token else None,
            token_type=kwargs.get("token_type", "Bearer"),
            scope=kwargs.get("scope"),
            expires_at=kwargs.get("expires_at", now + timedelta(hours=1)),
            token_data=kwargs.get("token_data", {}),
            created_at=kwargs.get("created_at", now),
            updated_at=kwargs.get("updated_at", now),
        )
        db_session.add(token)
        await db_session.commit()
        await db_session.refresh(token)
        return token

    return _create_token


@pytest.fixture
def platform_config_factory(db_session):
    """Factory for rows in the primary configuration table."""
    async def _create_config(
        platform_id: str = PlatformId.SPOTIFY.value,
        client_id: str = None,
        client_secret: str = None,
        redirect_uri: str = None,
        **kwargs
    ) -> PlatformOAuthConfig:
        row = PlatformOAuthConfig(
            platform_id=platform_id,
            platform_name=kwargs.get("platform_name", platform_id.replace("_", " ").title()),
            client_id=client_id or f"{platform_id}-client",
            client_secret=client_secret or fake.sha1(),
            redirect_uri=redirect_uri or f"https://broker.example.test/api/auth/callback/{platform_id}",
            scopes=kwargs.get("scopes", ["read", "write"]),
            api_endpoint=kwargs.get("api_endpoint"),
            enabled=kwargs.get("enabled", True),
        )
        db_session.add(row)
        await db_session.commit()
        await db_session.refresh(row)
        return row

    return _create_config


@pytest.fixture
def legacy_setting_factory(db_session):
    """Factory for rows in the legacy `platform_settings` table."""
    async def _create_setting(platform_id: str = PlatformId.SPOTIFY.value, **kwargs) -> LegacyPlatformSetting:
        row = LegacyPlatformSetting(
            platform_id=platform_id,
            client_id=kwargs.get("client_id"),
            client_secret=kwargs.get("client_secret"),
            redirect_uri=kwargs.get("redirect_uri"),
            scopes=kwargs.get("scopes"),
            api_endpoint=kwargs.get("api_endpoint"),
            setting_value=kwargs.get("setting_value"),
            enabled=kwargs.get("enabled", True),
        )
        db_session.add(row)
        await db_session.commit()
        await db_session.refresh(row)
        return row

    return _create_setting


@pytest.fixture
def platform_config() -> Callable[..., PlatformConfig]:
    """Builder for resolved (in-memory) platform configuration."""
    def _build(platform_id: PlatformId = PlatformId.SPOTIFY, **overrides) -> PlatformConfig:
        fields = {
            "platform_id": platform_id,
            "client_id": f"{platform_id.value}-client",
            "client_secret": f"{platform_id.value}-secret",
            "redirect_uri": f"https://broker.example.test/api/auth/callback/{platform_id.value}",
            "scopes": ["read", "write"],
        }
        fields.update(overrides)
        return PlatformConfig(**fields)

    return _build


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def token_store(db_session) -> TokenStore:
    return TokenStore(
        session=db_session,
        repository_factory=OAuthTokenRepository,
        encryption_key=settings.oauth.encryption_key,
    )


@pytest.fixture
def config_resolver(db_session) -> ConfigResolver:
    return ConfigResolver(
        session=db_session,
        config_repository_factory=PlatformOAuthConfigRepository,
        legacy_repository_factory=LegacyPlatformSettingRepository,
    )


class ProviderStub:
    """Records provider requests and replies with a canned response."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.json: Dict = {"access_token": "provider-access", "refresh_token": "provider-refresh", "expires_in": 3600}
        self.text: str | None = None
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json)


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
async def provider_http_client(provider_stub) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Provider-facing HTTP client whose requests never leave the process."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider_stub)) as client:
        yield client


# ============================================================================
# FASTAPI / DI FIXTURES
# ============================================================================


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async FastAPI test client for testing async endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def test_container():
    """Create a fresh DI container."""
    reset_container()
    container = Container()

    yield container

    reset_container()
