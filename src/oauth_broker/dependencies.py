"""
FastAPI dependencies for dependency injection.

Provides easy integration between FastAPI's dependency system
and the application's DI container.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .container import get_container, Container
from .models import db_helper
from .services.config_resolver import ConfigResolver
from .services.token_store import TokenStore
from .use_cases.build_authorize_url import BuildAuthorizeUrlUseCase
from .use_cases.handle_oauth_callback import HandleOAuthCallbackUseCase


# ============================================================================
# Service Dependencies
# ============================================================================


def get_token_store(
    session: AsyncSession = Depends(db_helper.scoped_session_dependency),
    container: Container = Depends(get_container),
) -> TokenStore:
    """Provide TokenStore bound to the request session."""
    return container.token_store(session=session)


def get_config_resolver(
    session: AsyncSession = Depends(db_helper.scoped_session_dependency),
    container: Container = Depends(get_container),
) -> ConfigResolver:
    """Provide ConfigResolver bound to the request session."""
    return container.config_resolver(session=session)


# ============================================================================
# Use Case Dependencies
# ============================================================================


def get_handle_oauth_callback_use_case(
    session: AsyncSession = Depends(db_helper.scoped_session_dependency),
    container: Container = Depends(get_container),
) -> HandleOAuthCallbackUseCase:
    """
    Provide HandleOAuthCallbackUseCase with all dependencies injected.

    Usage in endpoint:
        async def callback(
            use_case: HandleOAuthCallbackUseCase = Depends(get_handle_oauth_callback_use_case)
        ):
            outcome = await use_case.execute(platform, code, state, error)
    """
    return container.handle_oauth_callback_use_case(session=session)


def get_build_authorize_url_use_case(
    session: AsyncSession = Depends(db_helper.scoped_session_dependency),
    container: Container = Depends(get_container),
) -> BuildAuthorizeUrlUseCase:
    """Provide BuildAuthorizeUrlUseCase."""
    return container.build_authorize_url_use_case(session=session)
