"""Use case layer for business logic (Clean Architecture)."""

from .build_authorize_url import BuildAuthorizeUrlUseCase, PlatformNotConfigured, UnsupportedPlatform
from .handle_oauth_callback import CallbackOutcome, HandleOAuthCallbackUseCase, PlatformMismatch

__all__ = [
    "BuildAuthorizeUrlUseCase",
    "PlatformNotConfigured",
    "UnsupportedPlatform",
    "CallbackOutcome",
    "HandleOAuthCallbackUseCase",
    "PlatformMismatch",
]
