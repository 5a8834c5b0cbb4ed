"""Catalog service: show-level operations built on the catalog client."""

import logging
from functools import cache

from .client import CatalogClient, get_client
from .endpoints import (
    ArtworksForShow,
    FeaturedShows,
    ImagesForShow,
    PastShowsNearLocation,
    RunningShowsNearLocation,
    ShowInfo,
    UpcomingShowsNearLocation,
)
from .models import Artwork, Image, Show

logger = logging.getLogger("emergence-api.catalog")

NEAR_LOCATION_ENDPOINTS = {
    "running": RunningShowsNearLocation,
    "upcoming": UpcomingShowsNearLocation,
    "past": PastShowsNearLocation,
}


class CatalogService:
    """Show-level operations for view-layer consumers.

    Requires a client instance.
    """

    def __init__(self, client: CatalogClient):
        """Initialize CatalogService.

        Args:
            client: CatalogClient instance for API calls.
        """
        self.client = client

    async def get_show(self, show_id: str) -> Show:
        """Fetch a single show.

        Raises:
            AuthenticationFailed, NetworkError, StatusCodeError, DecodingError:
                From the client.
        """
        logger.info(f"Fetching show {show_id}")
        return await self.client.execute(ShowInfo(show_id=show_id))

    async def shows_near(
        self,
        status: str = "running",
        lat: str | None = None,
        long: str | None = None,
        page: int = 1,
        amount: int = 5,
    ) -> list[Show]:
        """List shows near a location.

        Args:
            status: One of "running", "upcoming" or "past".
            lat: Latitude, or None when the location is not yet known.
            long: Longitude, or None when the location is not yet known.
            page: Page number.
            amount: Page size.

        Returns:
            Shows for the requested page.

        Raises:
            ValueError: For an unknown status.
            AuthenticationFailed, NetworkError, StatusCodeError, DecodingError:
                From the client.
        """
        try:
            endpoint_class = NEAR_LOCATION_ENDPOINTS[status]
        except KeyError:
            raise ValueError(
                f"Unknown show status '{status}', expected one of "
                f"{', '.join(NEAR_LOCATION_ENDPOINTS)}"
            ) from None

        endpoint = endpoint_class(page=page, amount=amount, lat=lat, long=long)
        shows = await self.client.execute(endpoint)
        logger.info(f"Fetched {len(shows)} {status} shows (page {page})")
        return shows

    async def show_artworks(self, show: Show, page: int = 0) -> list[Artwork]:
        """List one page of artworks hung in a show."""
        if show.partner is None:
            raise ValueError(f"Show '{show.id}' has no partner")
        return await self.client.execute(
            ArtworksForShow(partner_id=show.partner.id, show_id=show.id, page=page)
        )

    async def show_images(self, show: Show | str) -> list[Image]:
        """List installation images for a show, given the show or its id."""
        show_id = show.id if isinstance(show, Show) else show
        return await self.client.execute(ImagesForShow(show_id=show_id))

    async def featured_shows(self) -> list[Show]:
        return await self.client.execute(FeaturedShows())


@cache
def get_catalog_service() -> CatalogService:
    """Get a cached CatalogService instance using the default client."""
    return CatalogService(get_client())
