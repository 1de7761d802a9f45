"""
Dependency Injection Container.

Centralizes construction of the OAuth broker's collaborators: one shared
HTTP client for provider calls, stateless codecs and registries as
singletons, and per-request factories for anything bound to a DB session.
"""

import httpx
from dependency_injector import containers, providers

from .config import settings

# Repositories
from .repositories.oauth_token import OAuthTokenRepository
from .repositories.platform_config import LegacyPlatformSettingRepository, PlatformOAuthConfigRepository

# Services
from .services.config_resolver import ConfigResolver
from .services.state_codec import StateCodec
from .services.token_exchange import TokenExchangeRegistry
from .services.token_store import TokenStore

# Use cases
from .use_cases.build_authorize_url import BuildAuthorizeUrlUseCase
from .use_cases.handle_oauth_callback import HandleOAuthCallbackUseCase


class Container(containers.DeclarativeContainer):
    """
    Application DI container.

    Session-bound providers are factories; the session is passed at call
    time, e.g. `container.token_store(session=session)`.
    """

    # Infrastructure - Singleton
    http_client = providers.Singleton(
        httpx.AsyncClient,
        timeout=settings.oauth.http_timeout_seconds,
    )

    # Repository factories
    oauth_token_repository_factory = providers.Factory(OAuthTokenRepository)
    platform_config_repository_factory = providers.Factory(PlatformOAuthConfigRepository)
    legacy_platform_setting_repository_factory = providers.Factory(LegacyPlatformSettingRepository)

    # Services
    state_codec = providers.Singleton(StateCodec)

    token_exchange_registry = providers.Singleton(
        TokenExchangeRegistry,
        http_client=http_client,
    )

    config_resolver = providers.Factory(
        ConfigResolver,
        config_repository_factory=platform_config_repository_factory.provider,
        legacy_repository_factory=legacy_platform_setting_repository_factory.provider,
    )

    token_store = providers.Factory(
        TokenStore,
        repository_factory=oauth_token_repository_factory.provider,
        encryption_key=settings.oauth.encryption_key,
    )

    # Use Cases - Factory (new instance per request, session injected at runtime)
    handle_oauth_callback_use_case = providers.Factory(
        HandleOAuthCallbackUseCase,
        config_resolver_factory=config_resolver.provider,
        token_store_factory=token_store.provider,
        exchange_registry=token_exchange_registry,
        state_codec=state_codec,
        frontend_url=settings.frontend.base_url,
    )

    build_authorize_url_use_case = providers.Factory(
        BuildAuthorizeUrlUseCase,
        config_resolver_factory=config_resolver.provider,
        exchange_registry=token_exchange_registry,
        state_codec=state_codec,
    )


# Global container instance
container = Container()


def get_container() -> Container:
    """
    Get the global container instance.

    Used as a FastAPI dependency:
        container: Container = Depends(get_container)
    """
    return container


def reset_container():
    """
    Reset container for testing.

    Clears all singletons and allows fresh initialization.
    """
    container.reset_singletons()
