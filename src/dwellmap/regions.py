"""Region (state boundary) rendering."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .config import MapStyleConfig
from .models import (
    MultiPolygonGeometry,
    PolygonGeometry,
    RegionFeature,
    RegionGeometry,
    Ring,
)
from .projection import Projector
from .surface import DrawingSurface


_LOGGER = logging.getLogger("dwellmap.regions")


@dataclass(frozen=True, slots=True)
class RegionStyle:
    fill_color: str = "#ffffff"
    stroke_color: str = "#64748b"
    stroke_width: float = 0.5

    @classmethod
    def from_config(cls, style: MapStyleConfig) -> RegionStyle:
        return cls(
            fill_color=style.region_fill,
            stroke_color=style.region_stroke,
            stroke_width=style.region_stroke_width,
        )


def iter_rings(geometry: RegionGeometry) -> tuple[Ring, ...]:
    """Flatten a Polygon or MultiPolygon into its rings; other kinds yield none."""
    if isinstance(geometry, PolygonGeometry):
        return geometry.rings
    if isinstance(geometry, MultiPolygonGeometry):
        rings: list[Ring] = []
        for polygon in geometry.polygons:
            rings.extend(polygon.rings)
        return tuple(rings)
    return ()


def draw_regions(
    features: Sequence[RegionFeature],
    surface: DrawingSurface,
    projection: Projector,
    style: RegionStyle = RegionStyle(),
) -> int:
    """Fill and outline every supported feature in input order.

    All rings of one feature share a single path, so holes follow the
    surface's own fill rule. Returns the number of features drawn.
    """
    drawn = 0
    for feature in features:
        if not isinstance(feature.geometry, (PolygonGeometry, MultiPolygonGeometry)):
            _LOGGER.debug(
                "Skipping region %s with unsupported geometry kind %s",
                feature.id,
                feature.geometry.kind,
            )
            continue

        surface.begin_path()
        for ring in iter_rings(feature.geometry):
            _trace_ring(surface, ring, projection)

        surface.fill(style.fill_color)
        surface.stroke(style.stroke_color, style.stroke_width)
        drawn += 1
    return drawn


def _trace_ring(surface: DrawingSurface, ring: Ring, projection: Projector) -> None:
    for idx, coord in enumerate(ring):
        point = projection(coord)
        if idx == 0:
            surface.move_to(point.x, point.y)
        else:
            surface.line_to(point.x, point.y)
