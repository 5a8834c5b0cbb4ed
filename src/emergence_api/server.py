"""Emergence MCP server implementation."""

import logging

from mcp.server.fastmcp import FastMCP

from .catalog import get_catalog_service
from .config import get_config, setup_logging
from .consts import SERVER_NAME
from .models import Response

logger = logging.getLogger("emergence-api.server")

mcp = FastMCP(
    name=SERVER_NAME,
    instructions="""
    Emergence MCP server.

    This MCP server allows you to:
    1. Find art shows running, upcoming or closed near a location.
    2. Look up a show with its artworks and installation images.
    3. Browse the featured shows.
    """,
    log_level=get_config().log_level,
)


def _dump(items) -> list[dict]:
    return [item.model_dump(mode="json") for item in items]


@mcp.tool()
async def show_info(show_id: str) -> Response:
    """Get details for a single show.

    Args:
        show_id: Show identifier, e.g. from shows_near or featured_shows.

    Returns:
        Show name, description, press release, dates, partner and location.
    """
    logger.info(f"show_info called for {show_id}")

    try:
        show = await get_catalog_service().get_show(show_id)
        return Response(
            status="success",
            message=f"Show '{show.name}' retrieved",
            data=show.model_dump(mode="json"),
            suggestions=[
                "Use show_artworks to list the artworks in this show",
                "Use show_images to list installation shots",
            ],
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def shows_near(
    status: str = "running",
    lat: str | None = None,
    long: str | None = None,
    page: int = 1,
    amount: int = 5,
) -> Response:
    """List shows near a location.

    Args:
        status: "running", "upcoming" or "past".
        lat: Latitude. Leave empty if unknown.
        long: Longitude. Leave empty if unknown.
        page: Page number, starting at 1.
        amount: Number of shows per page.
    """
    logger.info(f"shows_near called for {status} shows, page {page}")

    try:
        shows = await get_catalog_service().shows_near(
            status=status, lat=lat, long=long, page=page, amount=amount
        )
        return Response(
            status="success",
            message=f"Found {len(shows)} {status} shows",
            data=_dump(shows),
            suggestions=["Use show_info with a show id for full details"],
            metadata={"status": status, "page": page, "count": len(shows)},
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def show_artworks(show_id: str, page: int = 0) -> Response:
    """List one page of artworks in a show.

    Args:
        show_id: Show identifier.
        page: Page number, starting at 0.
    """
    logger.info(f"show_artworks called for {show_id}, page {page}")

    try:
        service = get_catalog_service()
        show = await service.get_show(show_id)
        artworks = await service.show_artworks(show, page=page)
        return Response(
            status="success",
            message=f"Found {len(artworks)} artworks in '{show.name}'",
            data=_dump(artworks),
            metadata={"show_id": show_id, "page": page, "count": len(artworks)},
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def show_images(show_id: str) -> Response:
    """List installation images for a show.

    Args:
        show_id: Show identifier.
    """
    logger.info(f"show_images called for {show_id}")

    try:
        images = await get_catalog_service().show_images(show_id)
        return Response(
            status="success",
            message=f"Found {len(images)} images for show '{show_id}'",
            data=_dump(images),
            metadata={"show_id": show_id, "count": len(images)},
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.tool()
async def featured_shows() -> Response:
    """List the editorially featured shows."""
    logger.info("featured_shows called")

    try:
        shows = await get_catalog_service().featured_shows()
        return Response(
            status="success",
            message=f"Found {len(shows)} featured shows",
            data=_dump(shows),
            suggestions=["Use show_info with a show id for full details"],
        )
    except Exception as e:
        return Response.from_error(e)


@mcp.resource("emergence://endpoints")
def endpoints_resource() -> dict[str, str]:
    """Host the server is currently talking to."""
    config = get_config()
    return {
        "base_url": config.base_url,
        "environment": "staging" if config.use_staging else "production",
    }


def main() -> None:
    """Run the MCP server."""
    setup_logging(get_config().log_level)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
