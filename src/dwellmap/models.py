"""Domain models shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Sequence, Union


RAILROADS: tuple[str, ...] = ("CN", "NS", "UP", "CP", "BNSF", "KCS", "CSX")


class DatasetError(ValueError):
    """Raised when a regions or records dataset fails validation."""


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise DatasetError(f"Expected string for '{field_name}'")
    return value


def _require_number(value: Any, field_name: str) -> float:
    # bool is an int subclass; JSON true/false is not a number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DatasetError(f"Expected number for '{field_name}'")
    return float(value)


def _require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise DatasetError(f"Expected integer for '{field_name}'")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise DatasetError(f"Expected integer for '{field_name}'")
    return value


def normalize_railroad(value: Any, field_name: str = "railroad") -> str:
    if not isinstance(value, str) or value.strip().upper() not in RAILROADS:
        raise DatasetError(
            f"Invalid {field_name} '{value}'; expected one of: " + ", ".join(RAILROADS)
        )
    return value.strip().upper()


@dataclass(frozen=True, slots=True)
class GeoCoordinate:
    lon: float
    lat: float


@dataclass(frozen=True, slots=True)
class PixelCoordinate:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class CanvasDimensions:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class GeographicBounds:
    """Fixed lon/lat box fitted onto the canvas, plus padding and aspect."""

    min_lon: float
    max_lon: float
    min_lat: float
    max_lat: float
    padding: float
    aspect_ratio: float

    def __post_init__(self) -> None:
        if self.max_lon <= self.min_lon:
            raise ValueError("max_lon must be greater than min_lon")
        if self.max_lat <= self.min_lat:
            raise ValueError("max_lat must be greater than min_lat")
        if self.aspect_ratio <= 0:
            raise ValueError("aspect_ratio must be > 0")

    @property
    def lon_range(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def lat_range(self) -> float:
        return self.max_lat - self.min_lat

    def contains(self, coord: GeoCoordinate) -> bool:
        return (
            self.min_lon <= coord.lon <= self.max_lon
            and self.min_lat <= coord.lat <= self.max_lat
        )


@dataclass(frozen=True, slots=True)
class ColorStop:
    value: float
    color: str


Ring = tuple[GeoCoordinate, ...]


@dataclass(frozen=True, slots=True)
class PolygonGeometry:
    """Rings in source order; the first is the outer boundary."""

    rings: tuple[Ring, ...]
    kind: str = "Polygon"


@dataclass(frozen=True, slots=True)
class MultiPolygonGeometry:
    polygons: tuple[PolygonGeometry, ...]
    kind: str = "MultiPolygon"


@dataclass(frozen=True, slots=True)
class UnsupportedGeometry:
    """Any other GeoJSON geometry type; carried so renderers can skip it."""

    kind: str


RegionGeometry = Union[PolygonGeometry, MultiPolygonGeometry, UnsupportedGeometry]


def _parse_ring(raw: Any, field_name: str) -> Ring:
    if not isinstance(raw, list):
        raise DatasetError(f"Expected list of positions for '{field_name}'")
    points: list[GeoCoordinate] = []
    for idx, position in enumerate(raw):
        if not isinstance(position, list) or len(position) < 2:
            raise DatasetError(f"Expected [lon, lat] position at '{field_name}[{idx}]'")
        points.append(
            GeoCoordinate(
                lon=_require_number(position[0], f"{field_name}[{idx}][0]"),
                lat=_require_number(position[1], f"{field_name}[{idx}][1]"),
            )
        )
    return tuple(points)


def _parse_polygon(raw: Any, field_name: str) -> PolygonGeometry:
    if not isinstance(raw, list):
        raise DatasetError(f"Expected list of rings for '{field_name}'")
    return PolygonGeometry(
        rings=tuple(_parse_ring(ring, f"{field_name}[{idx}]") for idx, ring in enumerate(raw))
    )


def parse_geometry(raw: Any, field_name: str = "geometry") -> RegionGeometry:
    if not isinstance(raw, Mapping):
        raise DatasetError(f"Expected mapping for '{field_name}'")
    kind = _require_str(raw.get("type"), f"{field_name}.type")
    coordinates = raw.get("coordinates")
    if not isinstance(coordinates, list):
        raise DatasetError(f"Expected list for '{field_name}.coordinates'")
    if kind == "Polygon":
        return _parse_polygon(coordinates, f"{field_name}.coordinates")
    if kind == "MultiPolygon":
        return MultiPolygonGeometry(
            polygons=tuple(
                _parse_polygon(polygon, f"{field_name}.coordinates[{idx}]")
                for idx, polygon in enumerate(coordinates)
            )
        )
    return UnsupportedGeometry(kind=kind)


@dataclass(frozen=True, slots=True)
class RegionFeature:
    """One administrative region (a US state) from the regions GeoJSON."""

    id: str
    name: str
    density: float
    geometry: RegionGeometry

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RegionFeature:
        _require_str(data.get("type"), "feature.type")
        properties = data.get("properties")
        if not isinstance(properties, Mapping):
            raise DatasetError("Expected mapping for 'feature.properties'")
        return cls(
            id=_require_str(data.get("id"), "feature.id"),
            name=_require_str(properties.get("name"), "feature.properties.name"),
            density=_require_number(properties.get("density"), "feature.properties.density"),
            geometry=parse_geometry(data.get("geometry"), "feature.geometry"),
        )


@dataclass(frozen=True, slots=True)
class DwellRecord:
    """One weekly dwell-time observation at a terminal yard."""

    date: date
    week: int
    month: int
    year: int
    railroad: str
    yard: str
    location: str
    latitude: float
    longitude: float
    value: float

    @property
    def coordinate(self) -> GeoCoordinate:
        return GeoCoordinate(lon=self.longitude, lat=self.latitude)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DwellRecord:
        date_raw = _require_str(data.get("Date"), "Date")
        try:
            parsed_date = date.fromisoformat(date_raw.strip()[:10])
        except ValueError as exc:
            raise DatasetError(f"Invalid ISO date for 'Date': '{date_raw}'") from exc
        return cls(
            date=parsed_date,
            week=_require_int(data.get("Week"), "Week"),
            month=_require_int(data.get("Month"), "Month"),
            year=_require_int(data.get("Year"), "Year"),
            railroad=normalize_railroad(data.get("Railroad"), "Railroad"),
            yard=_require_str(data.get("Yard"), "Yard"),
            location=_require_str(data.get("Location"), "Location"),
            latitude=_require_number(data.get("Latitude"), "Latitude"),
            longitude=_require_number(data.get("Longitude"), "Longitude"),
            value=_require_number(data.get("Value"), "Value"),
        )


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Active selection; `railroad=None` matches every carrier."""

    week: int
    year: int
    railroad: str | None = None

    def matches(self, record: DwellRecord) -> bool:
        return (
            record.week == self.week
            and record.year == self.year
            and (self.railroad is None or record.railroad == self.railroad)
        )


def filter_records(records: Sequence[DwellRecord], criteria: FilterCriteria) -> list[DwellRecord]:
    """Linear scan keeping records that match week, year and (optional) railroad."""
    return [record for record in records if criteria.matches(record)]
