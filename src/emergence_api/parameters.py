"""Query parameter defaults and the merge rules applied per endpoint."""

from collections.abc import Mapping
from typing import Any

from .consts import ARTWORKS_PAGE_SIZE, NEAR_LOCATION_PAGE_SIZE

ParameterSet = dict[str, Any]

# Defaults per query family; call sites only supply what varies per request.
RUNNING_NEAR_DEFAULTS: Mapping[str, Any] = {
    "status": "running",
    "sort": "end_at",
    "size": NEAR_LOCATION_PAGE_SIZE,
    "displayable": True,
    "at_a_fair": False,
}

UPCOMING_NEAR_DEFAULTS: Mapping[str, Any] = {
    "status": "upcoming",
    "sort": "start_at",
    "size": NEAR_LOCATION_PAGE_SIZE,
    "displayable": True,
    "at_a_fair": False,
}

PAST_NEAR_DEFAULTS: Mapping[str, Any] = {
    "status": "closed",
    "sort": "-end_at",
    "size": NEAR_LOCATION_PAGE_SIZE,
    "displayable": True,
    "at_a_fair": False,
}

ARTWORKS_DEFAULTS: Mapping[str, Any] = {
    "published": True,
    "size": ARTWORKS_PAGE_SIZE,
}


def merge(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> ParameterSet:
    """Merge per-call overrides over a family's defaults.

    Every default key survives unless overridden, and an override always wins
    on collision. Values pass through untouched. Neither input is mutated.

    Args:
        defaults: Fixed parameters for a query family.
        overrides: Parameters supplied by the call site.

    Returns:
        A new dict holding the union of both key sets.
    """
    merged = dict(defaults)
    merged.update(overrides)
    return merged


def near_location(lat: str | None, long: str | None) -> str:
    """Format coordinates for the ``near`` parameter.

    An unknown location becomes an explicit empty string: the service treats
    ``near=""`` differently from a missing ``near``.
    """
    if not lat or not long:
        return ""
    return f"{lat},{long}"


def sort_criteria_at(
    defaults: Mapping[str, Any],
    page: int,
    amount: int,
    lat: str | None,
    long: str | None,
) -> ParameterSet:
    """Build the parameters for a near-location shows query."""
    overrides = {
        "near": near_location(lat, long),
        "size": str(amount),
        "page": str(page),
    }
    return merge(defaults, overrides)
