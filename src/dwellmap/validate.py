"""Validation layer for config and input datasets."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Sequence

from .config import AppConfig
from .datasets import available_weeks, is_url, load_records, load_regions
from .models import (
    DwellRecord,
    MultiPolygonGeometry,
    PolygonGeometry,
    RegionFeature,
    RegionGeometry,
    UnsupportedGeometry,
)
from .util import format_code_list


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Top-level input and schema validator."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        self._validate_sources(report)
        regions = self._validate_regions(report)
        records = self._validate_records(report)
        if regions:
            self._validate_region_geometry(report, regions)
        if records:
            self._validate_record_values(report, records)
        return report

    def _validate_sources(self, report: ValidationReport) -> None:
        for label, source in (
            ("regions", self.cfg.paths.regions),
            ("records", self.cfg.paths.records),
        ):
            if is_url(source):
                report.add_info(f"{label} dataset is remote: {source}")
            elif not Path(source).exists():
                report.add_error(f"Missing {label} dataset file: {source}")

    def _validate_regions(self, report: ValidationReport) -> list[RegionFeature]:
        source = self.cfg.paths.regions
        if not is_url(source) and not Path(source).exists():
            return []
        try:
            regions = load_regions(source, self.cfg.fetch)
        except Exception as exc:
            report.add_error(f"Failed loading regions dataset '{source}': {exc}")
            return []
        if not regions:
            report.add_warning(f"Regions dataset has no features: {source}")
        report.add_info(f"Loaded {len(regions)} region features from {source}")
        return regions

    def _validate_records(self, report: ValidationReport) -> list[DwellRecord]:
        source = self.cfg.paths.records
        if not is_url(source) and not Path(source).exists():
            return []
        try:
            records = load_records(source, self.cfg.fetch)
        except Exception as exc:
            report.add_error(f"Failed loading dwell-time dataset '{source}': {exc}")
            return []
        if not records:
            report.add_warning(f"Dwell-time dataset is empty: {source}")
        report.add_info(f"Loaded {len(records)} dwell-time records from {source}")
        return records

    def _validate_region_geometry(
        self,
        report: ValidationReport,
        regions: Sequence[RegionFeature],
    ) -> None:
        kinds = Counter(feature.geometry.kind for feature in regions)
        report.add_info(
            "Region geometry kinds: "
            + ", ".join(f"{kind}={count}" for kind, count in sorted(kinds.items()))
        )

        unsupported = [
            f"{feature.id}({feature.geometry.kind})"
            for feature in regions
            if isinstance(feature.geometry, UnsupportedGeometry)
        ]
        if unsupported:
            report.add_warning(
                "Regions with unsupported geometry will not be drawn: "
                f"{format_code_list(sorted(unsupported))}"
            )

        shape = _require_shapely_shape()
        invalid: list[str] = []
        for feature in regions:
            mapping = _geometry_to_geojson(feature.geometry)
            if mapping is None:
                continue
            try:
                valid = bool(shape(mapping).is_valid)
            except Exception:
                valid = False
            if not valid:
                invalid.append(feature.id)
        if invalid:
            report.add_warning(
                "Regions with invalid rings (may fill unexpectedly): "
                f"{format_code_list(sorted(invalid))}"
            )

    def _validate_record_values(
        self,
        report: ValidationReport,
        records: Sequence[DwellRecord],
    ) -> None:
        bounds = self.cfg.map.bounds
        outside = sorted(
            {f"{r.yard}@{r.railroad}" for r in records if not bounds.contains(r.coordinate)}
        )
        if outside:
            report.add_warning(
                "Yards outside the map bounding box will draw off-canvas: "
                f"{format_code_list(outside)}"
            )

        floor = self.cfg.map.gradient[-1].value
        below = [r for r in records if r.value < floor]
        if below:
            report.add_warning(
                f"{len(below)} records have values below the lowest gradient threshold "
                f"({floor:g}); they use the lowest color."
            )

        weeks = available_weeks(records)
        report.add_info(
            "Available weeks: "
            + format_code_list([f"{year}-W{week:02d}" for year, week in weeks])
        )
        criteria = self.cfg.filters
        if (criteria.year, criteria.week) not in set(weeks):
            report.add_warning(
                f"Default filter week {criteria.year}-W{criteria.week:02d} has no records."
            )


def _geometry_to_geojson(geometry: RegionGeometry) -> dict[str, Any] | None:
    if isinstance(geometry, PolygonGeometry):
        return {"type": "Polygon", "coordinates": _polygon_coords(geometry)}
    if isinstance(geometry, MultiPolygonGeometry):
        return {
            "type": "MultiPolygon",
            "coordinates": [_polygon_coords(polygon) for polygon in geometry.polygons],
        }
    return None


def _polygon_coords(polygon: PolygonGeometry) -> list[list[list[float]]]:
    return [[[point.lon, point.lat] for point in ring] for ring in polygon.rings]


def _require_shapely_shape() -> Any:
    try:
        from shapely.geometry import shape
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for region geometry checks") from exc
    return shape


def format_report_lines(report: ValidationReport) -> Iterable[str]:
    for info in report.infos:
        yield f"[INFO] {info}"
    for warning in report.warnings:
        yield f"[WARN] {warning}"
    for error in report.errors:
        yield f"[ERROR] {error}"
    if report.ok:
        yield "[OK] Validation completed with no errors."
