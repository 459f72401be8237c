"""Tests for the lon/lat to pixel fit."""

from __future__ import annotations

import math

import pytest

from dwellmap.models import CanvasDimensions, GeoCoordinate, GeographicBounds, PixelCoordinate
from dwellmap.projection import canvas_dimensions_for, make_projector, project, unproject


DIMS = CanvasDimensions(width=1120, height=605)


class TestProject:
    """Projection of geographic coordinates onto the canvas."""

    def test_corners_land_on_padding_edges(self, bounds):
        """Bounding-box corners map exactly to the padded drawable area."""
        top_left = project(GeoCoordinate(bounds.min_lon, bounds.max_lat), DIMS, bounds)
        bottom_right = project(GeoCoordinate(bounds.max_lon, bounds.min_lat), DIMS, bounds)
        assert top_left.x == pytest.approx(50.0)
        assert top_left.y == pytest.approx(50.0)
        assert bottom_right.x == pytest.approx(DIMS.width - 50.0)
        assert bottom_right.y == pytest.approx(DIMS.height - 50.0)

    def test_in_bounds_points_stay_inside_padding(self, bounds):
        """Every coordinate inside the box projects inside [padding, size - padding]."""
        for i in range(11):
            for j in range(11):
                lon = bounds.min_lon + bounds.lon_range * i / 10
                lat = bounds.min_lat + bounds.lat_range * j / 10
                point = project(GeoCoordinate(lon, lat), DIMS, bounds)
                assert 50.0 - 1e-9 <= point.x <= DIMS.width - 50.0 + 1e-9
                assert 50.0 - 1e-9 <= point.y <= DIMS.height - 50.0 + 1e-9

    def test_monotonic_axes(self, bounds):
        """Longitude grows x; latitude shrinks y."""
        base = project(GeoCoordinate(-100.0, 40.0), DIMS, bounds)
        east = project(GeoCoordinate(-99.0, 40.0), DIMS, bounds)
        north = project(GeoCoordinate(-100.0, 41.0), DIMS, bounds)
        assert east.x > base.x
        assert east.y == pytest.approx(base.y)
        assert north.y < base.y
        assert north.x == pytest.approx(base.x)

    def test_out_of_bounds_is_not_clamped(self, bounds):
        """Coordinates outside the box project off the drawable area without error."""
        point = project(GeoCoordinate(-150.0, 60.0), DIMS, bounds)
        assert point.x < 0
        assert point.y < 0

    def test_known_point(self, bounds):
        """A mid-continent coordinate lands where the linear fit predicts."""
        point = project(GeoCoordinate(-96.0, 37.0), DIMS, bounds)
        x_scale = (DIMS.width - 100) / 58.0
        y_scale = (DIMS.height - 100) / 24.0
        assert point.x == pytest.approx(29.0 * x_scale + 50.0)
        assert point.y == pytest.approx(12.0 * y_scale + 50.0)

    def test_make_projector_matches_project(self, bounds):
        """The bound projector is equivalent to calling project directly."""
        projector = make_projector(DIMS, bounds)
        coord = GeoCoordinate(-80.5, 35.25)
        assert projector(coord) == project(coord, DIMS, bounds)


class TestUnproject:
    """Inverse mapping from pixels back to coordinates."""

    def test_corner_round_trip(self, bounds):
        """Projecting the four corners and inverting recovers them."""
        corners = [
            GeoCoordinate(bounds.min_lon, bounds.min_lat),
            GeoCoordinate(bounds.min_lon, bounds.max_lat),
            GeoCoordinate(bounds.max_lon, bounds.min_lat),
            GeoCoordinate(bounds.max_lon, bounds.max_lat),
        ]
        for corner in corners:
            back = unproject(project(corner, DIMS, bounds), DIMS, bounds)
            assert back.lon == pytest.approx(corner.lon)
            assert back.lat == pytest.approx(corner.lat)

    def test_canvas_center_is_box_center(self, bounds):
        """The middle pixel maps to the middle of the bounding box."""
        center = unproject(PixelCoordinate(DIMS.width / 2, DIMS.height / 2), DIMS, bounds)
        assert center.lon == pytest.approx(-96.0)
        assert center.lat == pytest.approx(37.0)


class TestCanvasDimensions:
    """Canvas sizing from container width."""

    @pytest.mark.parametrize("container_width", [400, 833, 1152, 1920])
    def test_height_follows_aspect_ratio(self, bounds, container_width):
        """Height is floor((container - inset) / aspect)."""
        dims = canvas_dimensions_for(container_width, bounds)
        assert dims.width == container_width - 32
        assert dims.height == math.floor((container_width - 32) / 1.85)

    def test_custom_inset(self, bounds):
        """The container inset is configurable."""
        dims = canvas_dimensions_for(200, bounds, container_inset_px=0)
        assert dims == CanvasDimensions(width=200, height=math.floor(200 / 1.85))

    def test_narrow_container_never_negative(self, bounds):
        """A container narrower than the inset yields an empty canvas."""
        assert canvas_dimensions_for(10, bounds) == CanvasDimensions(width=0, height=0)


class TestBoundsInvariants:
    """GeographicBounds rejects degenerate boxes."""

    def test_rejects_inverted_longitude(self):
        with pytest.raises(ValueError):
            GeographicBounds(-60, -70, 25, 49, 50, 1.85)

    def test_rejects_zero_latitude_range(self):
        with pytest.raises(ValueError):
            GeographicBounds(-125, -67, 30, 30, 50, 1.85)

    def test_rejects_non_positive_aspect(self):
        with pytest.raises(ValueError):
            GeographicBounds(-125, -67, 25, 49, 50, 0)
