from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field

from .exceptions import EmergenceError, StatusCodeError
from .token_store import AccessToken

# =============================================================================
# UNIFIED RESPONSE MODEL
# =============================================================================
# Single response type for all MCP tools


class Response(BaseModel):
    """Unified response type for all MCP tools."""

    status: Literal["success", "error"] = Field(
        ..., description="Response status indicating outcome"
    )
    message: str = Field(..., description="Human-readable summary of the response")
    data: Any | None = Field(
        None,
        description="Response payload - can be dict, pydantic model, or any serializable type",
    )
    errors: list[str] = Field(
        default_factory=list, description="List of error messages"
    )
    suggestions: list[str] = Field(
        default_factory=list, description="Actionable suggestions for the user"
    )
    metadata: dict[str, Any] | None = Field(
        None, description="Additional context and domain-specific information"
    )

    @classmethod
    def from_error(cls, error: Exception) -> "Response":
        """Create Response from any Exception, with potentially helpful info for recovery.

        Args:
            error: Any Exception instance

        Returns:
            Response object with error details
        """
        if isinstance(error, EmergenceError):
            suggestions = list(error.suggestions)
            if isinstance(error, StatusCodeError) and not suggestions:
                status_code = error.context.get("status_code", 0)
                if status_code == 404:
                    suggestions = ["Check the identifier and try again"]
                elif status_code >= 500:
                    suggestions = ["Try again - the service may be degraded"]
            return cls(
                status="error",
                message=error.message,
                errors=error.errors,
                suggestions=suggestions,
                metadata={**error.context, "exception_type": type(error).__name__},
            )

        return cls(
            status="error",
            message=f"Unexpected error: {str(error)}",
            errors=[str(error)],
            suggestions=[
                "Check server logs for detailed information",
                "Try again - this may be a temporary issue",
            ],
            metadata={"exception_type": type(error).__name__},
        )


# =============================================================================
# CREDENTIAL EXCHANGE
# =============================================================================


class XAppTokenResponse(BaseModel):
    """Body of a successful credential exchange."""

    model_config = ConfigDict(extra="ignore")

    token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("token", "xapp_token"),
        description="Bearer token for catalog requests",
    )
    expiration: datetime = Field(
        ...,
        validation_alias=AliasChoices("expiration", "expires_in"),
        description="Instant after which the token is rejected",
    )

    def to_access_token(self) -> AccessToken:
        return AccessToken(token=self.token, expiration=self.expiration)


# =============================================================================
# CATALOG MODELS
# =============================================================================
# Decoded shapes handed to view-layer consumers. Unknown keys are ignored so
# that additions on the service side never break decoding.


class Partner(BaseModel):
    """Gallery or institution presenting a show."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""


class Location(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None

    @computed_field
    @property
    def one_liner(self) -> str | None:
        """Address, city and state on one line, or None when all are blank."""
        parts = [p.strip() for p in (self.address, self.city, self.state) if p]
        parts = [p for p in parts if p]
        return ", ".join(parts) or None


class Show(BaseModel):
    """A partner show, as returned by show detail and show listings."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    description: str | None = None
    press_release: str | None = None
    status: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    partner: Partner | None = None
    location: Location | None = None

    @computed_field
    @property
    def location_one_liner(self) -> str | None:
        if self.location is None:
            return None
        return self.location.one_liner


class Image(BaseModel):
    """Installation shot or other image attached to a show.

    ``image_url`` is a template whose ``:version`` segment is replaced with
    one of ``image_versions``.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    image_url: str | None = None
    image_versions: list[str] = Field(default_factory=list)
    aspect_ratio: float | None = None
    original_width: int | None = None
    original_height: int | None = None

    def url_for(self, version: str) -> str | None:
        """Concrete URL for a version, or None if unavailable."""
        if not self.image_url or version not in self.image_versions:
            return None
        return self.image_url.replace(":version", version)


class Artist(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str = ""


class Artwork(BaseModel):
    """An artwork hung in a show."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    date: str | None = None
    artist: Artist | None = None
    images: list[Image] = Field(default_factory=list)

    @computed_field
    @property
    def default_image(self) -> Image | None:
        return self.images[0] if self.images else None
