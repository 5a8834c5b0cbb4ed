"""Logical API operations and the request shape each one implies.

Every endpoint is an immutable value. Nothing here touches the network or the
token; the host is supplied by the registry at resolution time.
"""

from typing import Any, ClassVar, Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from .consts import FEATURED_SET_ID, SHOWS_PATH, XAPP_TOKEN_PATH
from .models import Artwork, Image, Show, XAppTokenResponse
from .parameters import (
    ARTWORKS_DEFAULTS,
    PAST_NEAR_DEFAULTS,
    RUNNING_NEAR_DEFAULTS,
    UPCOMING_NEAR_DEFAULTS,
    ParameterSet,
    merge,
    sort_criteria_at,
)


def escape_segment(value: str) -> str:
    """Percent-escape an identifier for use as a single path segment."""
    return quote(value, safe="")


class Endpoint(BaseModel):
    """Base class for all endpoints."""

    model_config = ConfigDict(frozen=True)

    # Type the response body is decoded into
    result_type: ClassVar[Any] = Any
    requires_auth: ClassVar[bool] = True

    @property
    def method(self) -> Literal["GET"]:
        return "GET"

    @property
    def path(self) -> str:
        raise NotImplementedError

    @property
    def parameters(self) -> ParameterSet:
        return {}


class XApp(Endpoint):
    """Credential exchange: trades client credentials for an XApp token."""

    result_type: ClassVar[Any] = XAppTokenResponse
    requires_auth: ClassVar[bool] = False

    client_id: str = Field(..., repr=False)
    client_secret: str = Field(..., repr=False)

    @property
    def path(self) -> str:
        return XAPP_TOKEN_PATH

    @property
    def parameters(self) -> ParameterSet:
        return {
            "grant_type": "credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }


class ShowInfo(Endpoint):
    result_type: ClassVar[Any] = Show

    show_id: str

    @property
    def path(self) -> str:
        return f"/api/v1/show/{escape_segment(self.show_id)}"


class _ShowsNearLocation(Endpoint):
    """Paged listing of shows near a coordinate, one subclass per status."""

    result_type: ClassVar[Any] = list[Show]
    defaults: ClassVar[ParameterSet] = {}

    page: int = 1
    amount: int = 5
    lat: str | None = None
    long: str | None = None

    @property
    def path(self) -> str:
        return SHOWS_PATH

    @property
    def parameters(self) -> ParameterSet:
        return sort_criteria_at(
            self.defaults, self.page, self.amount, self.lat, self.long
        )


class RunningShowsNearLocation(_ShowsNearLocation):
    defaults: ClassVar[ParameterSet] = RUNNING_NEAR_DEFAULTS


class UpcomingShowsNearLocation(_ShowsNearLocation):
    defaults: ClassVar[ParameterSet] = UPCOMING_NEAR_DEFAULTS


class PastShowsNearLocation(_ShowsNearLocation):
    defaults: ClassVar[ParameterSet] = PAST_NEAR_DEFAULTS


class ArtworksForShow(Endpoint):
    result_type: ClassVar[Any] = list[Artwork]

    partner_id: str
    show_id: str
    page: int = 0

    @property
    def path(self) -> str:
        return (
            f"/api/v1/partner/{escape_segment(self.partner_id)}"
            f"/show/{escape_segment(self.show_id)}/artworks/"
        )

    @property
    def parameters(self) -> ParameterSet:
        return merge(ARTWORKS_DEFAULTS, {"page": self.page})


class ImagesForShow(Endpoint):
    result_type: ClassVar[Any] = list[Image]

    show_id: str

    @property
    def path(self) -> str:
        return f"/api/v1/partner_show/{escape_segment(self.show_id)}/images"


class FeaturedShows(Endpoint):
    """Items of the fixed, editorially curated set of shows."""

    result_type: ClassVar[Any] = list[Show]

    @property
    def path(self) -> str:
        return f"/api/v1/set/{FEATURED_SET_ID}/items"
