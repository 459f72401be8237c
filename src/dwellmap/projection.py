"""Linear lon/lat to canvas pixel fit for a fixed bounding box."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from .models import CanvasDimensions, GeoCoordinate, GeographicBounds, PixelCoordinate


Projector = Callable[[GeoCoordinate], PixelCoordinate]


@dataclass(frozen=True, slots=True)
class _AxisFit:
    x_scale: float
    y_scale: float
    x_offset: float
    y_offset: float


def _axis_fit(dims: CanvasDimensions, bounds: GeographicBounds) -> _AxisFit:
    map_width = dims.width - bounds.padding * 2
    map_height = dims.height - bounds.padding * 2

    # Axes scale independently; the canvas aspect ratio is tuned to the box instead.
    x_scale = map_width / bounds.lon_range
    y_scale = map_height / bounds.lat_range

    # Reduces to `padding` whenever the box fills the drawable area exactly.
    x_offset = (map_width - bounds.lon_range * x_scale) / 2 + bounds.padding
    y_offset = (map_height - bounds.lat_range * y_scale) / 2 + bounds.padding
    return _AxisFit(x_scale=x_scale, y_scale=y_scale, x_offset=x_offset, y_offset=y_offset)


def project(
    coord: GeoCoordinate,
    dims: CanvasDimensions,
    bounds: GeographicBounds,
) -> PixelCoordinate:
    """Map a geographic coordinate to canvas pixels (origin top-left, no clamping)."""
    fit = _axis_fit(dims, bounds)
    x = (coord.lon - bounds.min_lon) * fit.x_scale + fit.x_offset
    y = (bounds.max_lat - coord.lat) * fit.y_scale + fit.y_offset
    return PixelCoordinate(x=x, y=y)


def unproject(
    pixel: PixelCoordinate,
    dims: CanvasDimensions,
    bounds: GeographicBounds,
) -> GeoCoordinate:
    """Inverse of `project` using the same scale and offset."""
    fit = _axis_fit(dims, bounds)
    lon = (pixel.x - fit.x_offset) / fit.x_scale + bounds.min_lon
    lat = bounds.max_lat - (pixel.y - fit.y_offset) / fit.y_scale
    return GeoCoordinate(lon=lon, lat=lat)


def make_projector(dims: CanvasDimensions, bounds: GeographicBounds) -> Projector:
    """Bind canvas dimensions and bounds for one draw pass."""

    def _project(coord: GeoCoordinate) -> PixelCoordinate:
        return project(coord, dims, bounds)

    return _project


def canvas_dimensions_for(
    container_width: float,
    bounds: GeographicBounds,
    *,
    container_inset_px: int = 32,
) -> CanvasDimensions:
    """Fit the canvas to its container width at the fixed aspect ratio."""
    width = max(int(math.floor(container_width - container_inset_px)), 0)
    height = int(math.floor(width / bounds.aspect_ratio))
    return CanvasDimensions(width=width, height=height)
