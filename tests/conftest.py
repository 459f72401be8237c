"""Shared fixtures for dwellmap tests."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from dwellmap.config import AppConfig
from dwellmap.models import CanvasDimensions, DwellRecord, GeographicBounds


class RecordingSurface:
    """DrawingSurface double that records every call as a tuple."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self._dims = CanvasDimensions(width=0, height=0)

    @property
    def dimensions(self) -> CanvasDimensions:
        return self._dims

    def resize(self, dims: CanvasDimensions) -> None:
        self._dims = dims
        self.calls.append(("resize", dims.width, dims.height))

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        self.calls.append(("fill_rect", x, y, width, height, color))

    def begin_path(self) -> None:
        self.calls.append(("begin_path",))

    def move_to(self, x: float, y: float) -> None:
        self.calls.append(("move_to", x, y))

    def line_to(self, x: float, y: float) -> None:
        self.calls.append(("line_to", x, y))

    def arc(self, x: float, y: float, radius: float) -> None:
        self.calls.append(("arc", x, y, radius))

    def fill(self, color: str) -> None:
        self.calls.append(("fill", color))

    def stroke(self, color: str, line_width: float) -> None:
        self.calls.append(("stroke", color, line_width))

    def fill_text(self, text: str, x: float, y: float, color: str, size_px: float) -> None:
        self.calls.append(("fill_text", text, x, y, color, size_px))

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


def make_record(
    *,
    week: int = 43,
    year: int = 2024,
    railroad: str = "UP",
    value: float = 10.0,
    yard: str = "North Platte",
    lon: float = -100.76,
    lat: float = 41.13,
    day: date = date(2024, 10, 21),
) -> DwellRecord:
    return DwellRecord(
        date=day,
        week=week,
        month=day.month,
        year=year,
        railroad=railroad,
        yard=yard,
        location="NE",
        latitude=lat,
        longitude=lon,
        value=value,
    )


SQUARE_RING = [[-110.0, 40.0], [-100.0, 40.0], [-100.0, 45.0], [-110.0, 45.0], [-110.0, 40.0]]


def region_payload() -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": "01",
                "properties": {"name": "Squareland", "density": 94.65},
                "geometry": {"type": "Polygon", "coordinates": [SQUARE_RING]},
            },
            {
                "type": "Feature",
                "id": "02",
                "properties": {"name": "Islands", "density": 1.26},
                "geometry": {
                    "type": "MultiPolygon",
                    "coordinates": [
                        [[[-90.0, 30.0], [-88.0, 30.0], [-88.0, 32.0], [-90.0, 30.0]]],
                        [[[-85.0, 30.0], [-84.0, 30.0], [-84.0, 31.0], [-85.0, 30.0]]],
                    ],
                },
            },
        ],
    }


def records_payload() -> list[dict[str, Any]]:
    return [
        {
            "Date": "2024-10-21",
            "Week": 43,
            "Month": 10,
            "Year": 2024,
            "Railroad": "UP",
            "Yard": "North Platte",
            "Location": "NE",
            "Latitude": 41.13,
            "Longitude": -100.76,
            "Value": 10,
        },
        {
            "Date": "2024-10-21",
            "Week": 43,
            "Month": 10,
            "Year": 2024,
            "Railroad": "CN",
            "Yard": "Kirk",
            "Location": "IN",
            "Latitude": 41.58,
            "Longitude": -87.4,
            "Value": 20.5,
        },
        {
            "Date": "2024-10-28",
            "Week": 44,
            "Month": 10,
            "Year": 2024,
            "Railroad": "UP",
            "Yard": "North Platte",
            "Location": "NE",
            "Latitude": 41.13,
            "Longitude": -100.76,
            "Value": 30,
        },
    ]


@pytest.fixture
def bounds() -> GeographicBounds:
    return GeographicBounds(
        min_lon=-125.0,
        max_lon=-67.0,
        min_lat=25.0,
        max_lat=49.0,
        padding=50.0,
        aspect_ratio=1.85,
    )


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def dataset_dir(tmp_path: Path) -> Path:
    (tmp_path / "us-states.json").write_text(json.dumps(region_payload()), encoding="utf-8")
    (tmp_path / "dwell_times.json").write_text(json.dumps(records_payload()), encoding="utf-8")
    return tmp_path


@pytest.fixture
def app_config(dataset_dir: Path) -> AppConfig:
    return AppConfig.from_mapping(
        {
            "paths": {
                "regions": "us-states.json",
                "records": "dwell_times.json",
                "output_dir": "out",
                "logs_dir": "out/logs",
            }
        },
        dataset_dir / "config.yaml",
    )
