"""XApp token lifecycle: validity checks and de-duplicated refresh."""

import asyncio
import logging
from enum import StrEnum

import httpx

from .config import Config
from .endpoints import XApp
from .exceptions import AuthenticationFailed, ConfigError
from .models import XAppTokenResponse
from .registry import EndpointRegistry
from .token_store import AccessToken, TokenStore

logger = logging.getLogger("emergence-api.auth")


class TokenState(StrEnum):
    VALID = "valid"
    INVALID = "invalid"
    REFRESHING = "refreshing"


class AuthManager:
    """XApp token manager.

    Responsibilities:
    - Own the single in-memory token (the store is only a mirror)
    - Decide whether the token is usable on every call
    - Run at most one credential exchange at a time, shared by all waiters
    """

    def __init__(
        self,
        config: Config,
        http_client: httpx.AsyncClient,
        registry: EndpointRegistry | None = None,
        store: TokenStore | None = None,
    ):
        """Initialize AuthManager.

        Args:
            config: Config instance with client credentials.
            http_client: HTTP client (for the credential exchange only).
            registry: Registry used to resolve the exchange endpoint. If None,
                one is built from config.
            store: Token persistence. If None, uses config.token_file.
        """
        self.config = config
        self.http_client = http_client
        self.registry = registry or EndpointRegistry(config)
        self.store = store or TokenStore(config.token_file)
        self._token = self.store.load()
        self._refresh_task: asyncio.Task[AccessToken] | None = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> AccessToken:
        return self._token

    @property
    def state(self) -> TokenState:
        if self._refresh_task is not None:
            return TokenState.REFRESHING
        if self._token.is_valid:
            return TokenState.VALID
        return TokenState.INVALID

    async def ensure_valid(self) -> AccessToken:
        """Get a valid token, performing a credential exchange if needed.

        Concurrent callers share one in-flight exchange. Cancelling a caller
        does not cancel the exchange the others are waiting on.

        Returns:
            A currently valid AccessToken.

        Raises:
            ConfigError: If client credentials are not configured.
            AuthenticationFailed: If the credential exchange fails.
        """
        token = self._token
        if token.is_valid:
            return token

        async with self._lock:
            if self._token.is_valid:
                return self._token
            if self._refresh_task is None:
                logger.debug("Token invalid, starting refresh")
                self._refresh_task = asyncio.create_task(self._refresh())
                self._refresh_task.add_done_callback(self._on_refresh_done)
            else:
                logger.debug("Joining in-flight token refresh")
            task = self._refresh_task

        return await asyncio.shield(task)

    async def get_valid_token(self) -> str:
        """Get a valid token string."""
        token = await self.ensure_valid()
        return token.token

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        # Mark the outcome retrieved even if every waiter was cancelled
        if not task.cancelled():
            task.exception()

    async def _refresh(self) -> AccessToken:
        """Exchange client credentials for a new token and persist it."""
        if not self.config.client_id or not self.config.client_secret:
            raise ConfigError(
                "Client credentials are not configured",
                suggestions=[
                    "Set EMERGENCE_CLIENT_ID and EMERGENCE_CLIENT_SECRET",
                ],
                context={"base_url": self.config.base_url},
            )

        request = self.registry.resolve(
            XApp(
                client_id=self.config.client_id,
                client_secret=self.config.client_secret,
            )
        )
        logger.info(f"Requesting XApp token from {request.url}")

        # The exchange URL carries the client secret in its query string, so
        # nothing below may include str(e) or e.request.url.
        try:
            response = await self.http_client.get(
                request.url, params=request.parameters
            )
            response.raise_for_status()
            token = XAppTokenResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            status = f"{e.response.status_code} {e.response.reason_phrase}".strip()
            logger.error(f"Credential exchange rejected: {status}")
            raise AuthenticationFailed(
                "Credential exchange rejected",
                errors=[f"{status} from {request.url}"],
                suggestions=["Verify the client ID and secret"],
                context={
                    "status_code": e.response.status_code,
                    "url": request.url,
                },
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Credential exchange unreachable: {type(e).__name__}")
            raise AuthenticationFailed(
                "Credential exchange unreachable",
                errors=[f"{type(e).__name__} while contacting {request.url}"],
                suggestions=[
                    "Check your internet connection",
                    "Try again - this may be a temporary network issue",
                ],
                context={"url": request.url, "exception_type": type(e).__name__},
            ) from e
        except ValueError as e:
            # Also covers pydantic.ValidationError
            logger.error("Credential exchange returned an unexpected body")
            raise AuthenticationFailed(
                "Credential exchange returned an unexpected body",
                errors=[str(e)],
                context={"url": request.url},
            ) from e

        access_token = token.to_access_token()
        if not access_token.is_valid:
            raise AuthenticationFailed(
                "Credential exchange returned an expired token",
                context={"expiration": access_token.expiration.isoformat()},
            )

        await asyncio.to_thread(self.store.save, access_token)
        self._token = access_token
        logger.info(f"Token refreshed, expires {access_token.expiration.isoformat()}")
        return access_token
