"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .models import (
    ColorStop,
    DatasetError,
    FilterCriteria,
    GeographicBounds,
    normalize_railroad,
)


_EMPTY: Mapping[str, Any] = {}


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return _EMPTY
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _source_from_cfg(value: Any, field_name: str, root_dir: Path) -> str:
    """Return a URL unchanged or a local path resolved against the config dir."""
    raw = _str(value, field_name)
    if raw.startswith(("http://", "https://")):
        return raw
    p = Path(raw)
    return str(p if p.is_absolute() else root_dir / p)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    regions: str
    records: str
    output_dir: Path
    logs_dir: Path

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (self.output_dir, self.logs_dir)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            regions=_source_from_cfg(
                raw.get("regions", "public/us-states.json"), "paths.regions", root_dir
            ),
            records=_source_from_cfg(
                raw.get("records", "public/dwell_times.json"), "paths.records", root_dir
            ),
            output_dir=_path_from_cfg(raw.get("output_dir", "build"), "paths.output_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir", "build/logs"), "paths.logs_dir", root_dir),
        )


def _bounds_from_mapping(raw: Mapping[str, Any]) -> GeographicBounds:
    return GeographicBounds(
        min_lon=_float(raw.get("min_lon", -125), "map.bounds.min_lon"),
        max_lon=_float(raw.get("max_lon", -67), "map.bounds.max_lon"),
        min_lat=_float(raw.get("min_lat", 25), "map.bounds.min_lat"),
        max_lat=_float(raw.get("max_lat", 49), "map.bounds.max_lat"),
        padding=_float(raw.get("padding", 50), "map.bounds.padding"),
        aspect_ratio=_float(raw.get("aspect_ratio", 1.85), "map.bounds.aspect_ratio"),
    )


# Tailwind 500 shades, highest threshold first.
DEFAULT_GRADIENT: tuple[ColorStop, ...] = (
    ColorStop(75.0, "#ef4444"),
    ColorStop(50.0, "#f97316"),
    ColorStop(35.0, "#f59e0b"),
    ColorStop(25.0, "#eab308"),
    ColorStop(15.0, "#84cc16"),
    ColorStop(0.0, "#22c55e"),
)


def _gradient_from_list(raw: Any) -> tuple[ColorStop, ...]:
    if raw is None:
        return DEFAULT_GRADIENT
    if not isinstance(raw, list) or not raw:
        raise ValueError("Expected non-empty list for 'map.gradient'")
    stops: list[ColorStop] = []
    for idx, item in enumerate(raw):
        item_map = _mapping(item, f"map.gradient[{idx}]")
        stops.append(
            ColorStop(
                value=_float(item_map.get("value"), f"map.gradient[{idx}].value"),
                color=_str(item_map.get("color"), f"map.gradient[{idx}].color"),
            )
        )
    for prev, cur in zip(stops, stops[1:]):
        if cur.value >= prev.value:
            raise ValueError("map.gradient must be sorted by strictly descending 'value'")
    return tuple(stops)


@dataclass(frozen=True, slots=True)
class MapStyleConfig:
    background: str
    region_fill: str
    region_stroke: str
    region_stroke_width: float
    point_radius: float
    container_inset_px: int
    dpi: int

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MapStyleConfig:
        point_radius = _float(raw.get("point_radius", 7), "map.style.point_radius")
        dpi = _int(raw.get("dpi", 100), "map.style.dpi")
        if point_radius <= 0:
            raise ValueError("map.style.point_radius must be > 0")
        if dpi <= 0:
            raise ValueError("map.style.dpi must be > 0")
        return cls(
            background=_str(raw.get("background", "#7dd3fc"), "map.style.background"),
            region_fill=_str(raw.get("region_fill", "#ffffff"), "map.style.region_fill"),
            region_stroke=_str(raw.get("region_stroke", "#64748b"), "map.style.region_stroke"),
            region_stroke_width=_float(
                raw.get("region_stroke_width", 0.5), "map.style.region_stroke_width"
            ),
            point_radius=point_radius,
            container_inset_px=_int(
                raw.get("container_inset_px", 32), "map.style.container_inset_px"
            ),
            dpi=dpi,
        )


@dataclass(frozen=True, slots=True)
class MapConfig:
    bounds: GeographicBounds
    gradient: tuple[ColorStop, ...]
    style: MapStyleConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MapConfig:
        return cls(
            bounds=_bounds_from_mapping(_mapping(raw.get("bounds"), "map.bounds")),
            gradient=_gradient_from_list(raw.get("gradient")),
            style=MapStyleConfig.from_mapping(_mapping(raw.get("style"), "map.style")),
        )


def _filters_from_mapping(raw: Mapping[str, Any]) -> FilterCriteria:
    railroad_raw = raw.get("railroad")
    railroad: str | None = None
    if railroad_raw is not None:
        try:
            railroad = normalize_railroad(railroad_raw, "filters.railroad")
        except DatasetError as exc:
            raise ValueError(str(exc)) from exc
    return FilterCriteria(
        week=_int(raw.get("week", 43), "filters.week"),
        year=_int(raw.get("year", 2024), "filters.year"),
        railroad=railroad,
    )


@dataclass(frozen=True, slots=True)
class FetchConfig:
    request_timeout_s: float
    user_agent: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> FetchConfig:
        timeout = _float(raw.get("request_timeout_s", 30), "fetch.request_timeout_s")
        if timeout <= 0:
            raise ValueError("fetch.request_timeout_s must be > 0")
        return cls(
            request_timeout_s=timeout,
            user_agent=_str(raw.get("user_agent", "dwellmap/0.1"), "fetch.user_agent"),
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    paths: PathsConfig
    map: MapConfig
    filters: FilterCriteria
    fetch: FetchConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path | None) -> AppConfig:
        root_dir = source_path.parent.resolve() if source_path is not None else Path.cwd()
        return cls(
            source_path=source_path.resolve() if source_path is not None else None,
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            map=MapConfig.from_mapping(_mapping(raw.get("map"), "map")),
            filters=_filters_from_mapping(_mapping(raw.get("filters"), "filters")),
            fetch=FetchConfig.from_mapping(_mapping(raw.get("fetch"), "fetch")),
        )

    @classmethod
    def default(cls) -> AppConfig:
        return cls.from_mapping({}, None)


def load_config(path: str | Path | None) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    if path is None:
        return AppConfig.default()
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
