"""Backend access: configuration, token storage and HTTP client."""

from .client import ApiClient, AuthenticatedFetch
from .config import ClientConfig
from .errors import (
    AccessError,
    ApiStatusError,
    AuthExchangeError,
    BackendValidationError,
    NetworkError,
    ProfileFinalizedError,
    ValidationError,
)
from .token_store import (
    FileTokenStorage,
    MemoryTokenStorage,
    TokenStore,
    create_token_store,
    get_token_store,
    set_token_store,
)

__all__ = [
    "AccessError",
    "ApiClient",
    "ApiStatusError",
    "AuthExchangeError",
    "AuthenticatedFetch",
    "BackendValidationError",
    "ClientConfig",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "NetworkError",
    "ProfileFinalizedError",
    "TokenStore",
    "ValidationError",
    "create_token_store",
    "get_token_store",
    "set_token_store",
]
