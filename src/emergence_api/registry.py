"""Endpoint resolution: turns an Endpoint value into a concrete request shape."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from .config import Config
from .endpoints import Endpoint

logger = logging.getLogger("emergence-api.registry")


class ResolvedRequest(BaseModel):
    """Everything needed to issue the HTTP call for one endpoint."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    path: str
    method: str
    parameters: dict[str, Any]

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"


class EndpointRegistry:
    """Resolves endpoints against the configured host.

    Requires a config instance; the staging flag is read from it on every
    resolution.
    """

    def __init__(self, config: Config):
        """Initialize EndpointRegistry.

        Args:
            config: Config instance selecting the staging or production host.
        """
        self.config = config

    def resolve(self, endpoint: Endpoint) -> ResolvedRequest:
        """Compute base URL, path, method and parameters for an endpoint.

        Args:
            endpoint: Endpoint value to resolve.

        Returns:
            ResolvedRequest for the endpoint.
        """
        # Single read, so one request never mixes hosts
        base_url = self.config.base_url

        resolved = ResolvedRequest(
            base_url=base_url,
            path=endpoint.path,
            method=endpoint.method,
            parameters=endpoint.parameters,
        )
        logger.debug(f"Resolved {type(endpoint).__name__} to {resolved.url}")
        return resolved
