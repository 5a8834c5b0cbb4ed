"""Emergence API Package

Typed, XApp-authenticated access to the Artsy shows catalog, with an MCP
server for browsing shows, artworks and installation images.
"""

from .auth import AuthManager, TokenState
from .catalog import CatalogService, get_catalog_service
from .client import CatalogClient, get_client
from .config import Config, get_config
from .consts import PACKAGE_VERSION
from .exceptions import (
    AuthenticationFailed,
    ConfigError,
    DecodingError,
    EmergenceError,
    NetworkError,
    StatusCodeError,
)
from .registry import EndpointRegistry, ResolvedRequest
from .token_store import AccessToken, TokenStore

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "get_config",
    "get_client",
    "get_catalog_service",
    "Config",
    "CatalogClient",
    "CatalogService",
    "AuthManager",
    "TokenState",
    "EndpointRegistry",
    "ResolvedRequest",
    "AccessToken",
    "TokenStore",
    "EmergenceError",
    "AuthenticationFailed",
    "ConfigError",
    "DecodingError",
    "NetworkError",
    "StatusCodeError",
]
