"""
Unit tests for the DI container and FastAPI dependency functions.

Tests cover:
- Session-bound factories receive the request session
- Singletons are shared and reset by reset_container
"""

import pytest
from unittest.mock import MagicMock

from oauth_broker.container import get_container, reset_container
from oauth_broker.dependencies import (
    get_build_authorize_url_use_case,
    get_config_resolver,
    get_handle_oauth_callback_use_case,
    get_token_store,
)
from oauth_broker.services.config_resolver import ConfigResolver
from oauth_broker.services.token_exchange import TokenExchangeRegistry
from oauth_broker.services.token_store import TokenStore
from oauth_broker.use_cases.build_authorize_url import BuildAuthorizeUrlUseCase
from oauth_broker.use_cases.handle_oauth_callback import HandleOAuthCallbackUseCase


@pytest.mark.unit
class TestDependencies:
    def test_get_token_store(self, test_container):
        session = MagicMock()

        store = get_token_store(session=session, container=test_container)

        assert isinstance(store, TokenStore)
        assert store.session is session

    def test_get_config_resolver(self, test_container):
        session = MagicMock()

        resolver = get_config_resolver(session=session, container=test_container)

        assert isinstance(resolver, ConfigResolver)
        assert resolver.session is session

    def test_get_handle_oauth_callback_use_case(self, test_container):
        session = MagicMock()

        use_case = get_handle_oauth_callback_use_case(session=session, container=test_container)

        assert isinstance(use_case, HandleOAuthCallbackUseCase)
        assert isinstance(use_case.config_resolver, ConfigResolver)
        assert isinstance(use_case.token_store, TokenStore)
        assert use_case.token_store.session is session
        assert use_case.frontend_url == "https://app.example.test"

    def test_get_build_authorize_url_use_case(self, test_container):
        use_case = get_build_authorize_url_use_case(session=MagicMock(), container=test_container)

        assert isinstance(use_case, BuildAuthorizeUrlUseCase)

    def test_factories_return_new_instances(self, test_container):
        session = MagicMock()

        assert test_container.token_store(session=session) is not test_container.token_store(session=session)


@pytest.mark.unit
class TestContainer:
    def test_registry_is_singleton(self, test_container):
        first = test_container.token_exchange_registry()

        assert isinstance(first, TokenExchangeRegistry)
        assert test_container.token_exchange_registry() is first

    def test_use_cases_share_registry_and_codec(self, test_container):
        callback = test_container.handle_oauth_callback_use_case(session=MagicMock())
        authorize = test_container.build_authorize_url_use_case(session=MagicMock())

        assert callback.exchange_registry is authorize.exchange_registry
        assert callback.state_codec is authorize.state_codec

    def test_reset_container_clears_singletons(self):
        container = get_container()
        first = container.state_codec()

        reset_container()

        assert container.state_codec() is not first
        reset_container()
