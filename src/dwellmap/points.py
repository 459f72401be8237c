"""Color-graded yard markers."""

from __future__ import annotations

import logging
from typing import Sequence

from .models import ColorStop, DwellRecord
from .projection import Projector
from .surface import DrawingSurface


_LOGGER = logging.getLogger("dwellmap.points")

DEFAULT_POINT_RADIUS = 7.0


def pick_color(value: float, color_stops: Sequence[ColorStop]) -> str:
    """Return the color of the highest stop whose threshold does not exceed `value`.

    Values below the lowest threshold fall back to the lowest stop.
    """
    if not color_stops:
        raise ValueError("color_stops must not be empty")
    for stop in color_stops:
        if value >= stop.value:
            return stop.color
    fallback = color_stops[-1]
    _LOGGER.debug(
        "Value %.2f is below the lowest threshold %.2f; using %s",
        value,
        fallback.value,
        fallback.color,
    )
    return fallback.color


def draw_points(
    records: Sequence[DwellRecord],
    surface: DrawingSurface,
    projection: Projector,
    color_stops: Sequence[ColorStop],
    *,
    radius: float = DEFAULT_POINT_RADIUS,
) -> int:
    """Draw one filled circle per record, in input order."""
    for record in records:
        point = projection(record.coordinate)
        surface.begin_path()
        surface.arc(point.x, point.y, radius)
        surface.fill(pick_color(record.value, color_stops))
    return len(records)
