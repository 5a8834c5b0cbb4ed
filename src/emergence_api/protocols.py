"""Protocol definitions for dependency injection and interface contracts."""

from typing import Protocol

from .token_store import AccessToken


class TokenProvider(Protocol):
    """Protocol for XApp token providers."""

    async def ensure_valid(self) -> AccessToken:
        """Get a valid XApp token, refreshing it first if needed.

        Returns:
            A currently valid AccessToken.

        Raises:
            ConfigError: If client credentials are not configured.
            AuthenticationFailed: If the credential exchange fails.
        """
        ...
