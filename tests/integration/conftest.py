import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient

from oauth_broker.container import get_container, reset_container
from oauth_broker.logging_config import configure_logging
from oauth_broker.models import db_helper
from oauth_broker.services.token_exchange import TokenExchangeRegistry
from main import app


@pytest.fixture
async def integration_environment(test_engine, session_factory, provider_http_client, provider_stub):
    """Point the app at the test database and route provider calls to the stub."""
    original_engine = db_helper.engine
    original_session_factory = db_helper.session_factory

    db_helper.engine = test_engine
    db_helper.session_factory = session_factory

    reset_container()
    container = get_container()
    registry = TokenExchangeRegistry(provider_http_client)
    container.token_exchange_registry.override(providers.Object(registry))

    try:
        configure_logging()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield {
                "client": client,
                "session_factory": session_factory,
                "provider": provider_stub,
            }
    finally:
        container.token_exchange_registry.reset_override()
        reset_container()
        db_helper.engine = original_engine
        db_helper.session_factory = original_session_factory


__all__ = ["integration_environment"]
