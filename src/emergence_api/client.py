"""Catalog client: dispatches endpoints as authenticated HTTP calls."""

import asyncio
import logging
from functools import cache
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from .auth import AuthManager
from .config import Config, get_config
from .consts import USER_AGENT, XAPP_TOKEN_HEADER
from .endpoints import Endpoint
from .exceptions import DecodingError, NetworkError, StatusCodeError
from .protocols import TokenProvider
from .registry import EndpointRegistry
from .token_store import TokenStore

logger = logging.getLogger("emergence-api.client")


class CatalogClient:
    """Catalog API client with XApp authentication.

    Responsibilities:
    - Ensure a valid token before every authenticated call
    - Resolve, execute and decode one endpoint per call
    - Translate transport and decoding failures into domain errors
    """

    def __init__(
        self,
        config: Config | None = None,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        registry: EndpointRegistry | None = None,
        store: TokenStore | None = None,
    ):
        """Initialize CatalogClient.

        Args:
            config: Config instance. If None, uses get_config().
            token_provider: XApp token provider. If None, creates AuthManager.
            http_client: HTTP client. If None, creates a new one.
            registry: Endpoint registry. If None, creates one from config.
            store: Token store handed to the default AuthManager.
        """
        self.config = config or get_config()

        self.http_client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
        )

        self.registry = registry or EndpointRegistry(self.config)

        self.token_provider = token_provider or AuthManager(
            self.config, self.http_client, registry=self.registry, store=store
        )

        logger.info(f"Catalog client created for {self.config.base_url}")

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.http_client.aclose()

    async def execute(self, endpoint: Endpoint) -> Any:
        """Execute an endpoint and decode its response.

        Args:
            endpoint: Endpoint to execute.

        Returns:
            Response body decoded into ``endpoint.result_type``.

        Raises:
            ConfigError: From auth if client credentials are missing.
            AuthenticationFailed: From auth if the token refresh fails.
            NetworkError: For timeouts, connection failures, DNS failures.
            StatusCodeError: For HTTP 4xx/5xx responses.
            DecodingError: If the body does not match the expected shape.
        """
        headers = {}
        if endpoint.requires_auth:
            token = await self.token_provider.ensure_valid()
            headers[XAPP_TOKEN_HEADER] = token.token

        request = self.registry.resolve(endpoint)

        logger.debug(f"{request.method} {request.url}")
        try:
            response = await self.http_client.request(
                request.method,
                request.url,
                params=request.parameters,
                headers=headers,
            )
        except httpx.RequestError as e:
            logger.warning(f"{request.method} {request.url} failed: {e}")
            raise NetworkError(
                f"Network error: {str(e)}",
                errors=[str(e)],
                suggestions=[
                    "Check your internet connection",
                    "Try again - this may be a temporary network issue",
                ],
                context={"url": request.url, "exception_type": type(e).__name__},
            ) from e

        if not response.is_success:
            logger.warning(
                f"{request.method} {request.url} returned {response.status_code}"
            )
            raise StatusCodeError(
                f"HTTP error ({response.status_code}) for {request.path}",
                errors=[response.text[:500]] if response.text else [],
                context={"url": request.url, "status_code": response.status_code},
            )

        result = self._decode(endpoint, response, request.url)
        logger.debug(f"{request.method} {request.url} successful")
        return result

    def request(self, endpoint: Endpoint) -> asyncio.Task:
        """Schedule an endpoint as an independently cancellable task.

        Args:
            endpoint: Endpoint to execute.

        Returns:
            Task yielding the decoded result, or raising one error.
        """
        return asyncio.create_task(
            self.execute(endpoint), name=f"emergence:{type(endpoint).__name__}"
        )

    @staticmethod
    def _decode(endpoint: Endpoint, response: httpx.Response, url: str) -> Any:
        try:
            payload = response.json()
            return TypeAdapter(endpoint.result_type).validate_python(payload)
        except (ValueError, ValidationError) as e:
            raise DecodingError(
                f"Unexpected response body for {type(endpoint).__name__}",
                errors=[str(e)],
                suggestions=["This may indicate an API change"],
                context={
                    "url": url,
                    "expected": str(endpoint.result_type),
                },
            ) from e


@cache
def get_client() -> CatalogClient:
    """Get a cached CatalogClient instance with default configuration.

    Raises:
        No exceptions raised directly.
        May propagate exceptions from Config() initialization via get_config().
    """
    return CatalogClient()
