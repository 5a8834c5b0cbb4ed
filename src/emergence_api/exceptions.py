"""Emergence API custom exceptions.

Exception Design Principles:
1. Use these custom exceptions only when additional useful context can be provided
2. Handle exceptions as late as possible (preserve details until domain context is available)
3. Split on domain of actionable information:
   - Recoverable by user reconfiguration outside session (ConfigError)
   - Recoverable by re-issuing the request (AuthenticationFailed, NetworkError,
     StatusCodeError)
   - Unrecoverable without an API or code change (DecodingError)
"""


class EmergenceError(Exception):
    """Base exception for all Emergence API errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    All Emergence API custom exceptions inherit from this base class.
    """

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize EmergenceError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(EmergenceError):
    """Application configuration errors - recoverable by user reconfiguration.

    Covers setup issues that prevent a credential exchange from being
    attempted at all:
    - Missing client ID or client secret
    - Invalid base configuration

    A malformed persisted token is NOT a ConfigError at the caller's level:
    the token store recovers locally by treating it as absent.
    """

    pass


class AuthenticationFailed(EmergenceError):
    """Credential exchange rejected or unreachable.

    Raised to every caller waiting on the failed refresh. The shared token
    stays invalid, and no retry is attempted until a caller asks again.
    """

    pass


class NetworkError(EmergenceError):
    """Transport-level failure (timeout, connectivity, DNS).

    Surfaced per request; never affects token state.
    """

    pass


class StatusCodeError(EmergenceError):
    """The service answered with a non-successful HTTP status.

    Surfaced per request; never affects token state. The status code is
    available as ``context["status_code"]``.
    """

    pass


class DecodingError(EmergenceError):
    """Response body does not match the shape expected for the endpoint.

    The raw response is discarded; no partial object is returned.
    """

    pass
