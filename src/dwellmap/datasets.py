"""Regions and dwell-time dataset loading and validation."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

import requests

from .config import FetchConfig
from .models import DatasetError, DwellRecord, RegionFeature


_LOGGER = logging.getLogger("dwellmap.datasets")


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def read_json_source(source: str | Path, fetch: FetchConfig | None = None) -> Any:
    """Read JSON from a local file or an http(s) URL."""
    text = str(source)
    if is_url(text):
        fetch_cfg = fetch or FetchConfig(request_timeout_s=30.0, user_agent="dwellmap/0.1")
        _LOGGER.debug("Fetching %s", text)
        response = requests.get(
            text,
            timeout=fetch_cfg.request_timeout_s,
            headers={"User-Agent": fetch_cfg.user_agent},
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise DatasetError(f"Response from {text} is not valid JSON: {exc}") from exc

    path = Path(text)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except UnicodeDecodeError as exc:
        raise DatasetError(f"{path} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DatasetError(f"{path} is not valid JSON: {exc}") from exc


def parse_regions(payload: Any) -> list[RegionFeature]:
    """Validate a GeoJSON FeatureCollection into region features."""
    if not isinstance(payload, Mapping):
        raise DatasetError("Expected GeoJSON object at root of regions dataset")
    if not isinstance(payload.get("type"), str):
        raise DatasetError("Expected string for 'type' in regions dataset")
    features_raw = payload.get("features")
    if not isinstance(features_raw, list):
        raise DatasetError("Expected 'features' list in regions dataset")

    features: list[RegionFeature] = []
    for idx, item in enumerate(features_raw):
        if not isinstance(item, Mapping):
            raise DatasetError(f"Expected mapping at features[{idx}]")
        try:
            features.append(RegionFeature.from_mapping(item))
        except DatasetError as exc:
            raise DatasetError(f"features[{idx}]: {exc}") from exc
    return features


def parse_records(payload: Any) -> list[DwellRecord]:
    """Validate the dwell-time JSON array into records."""
    if not isinstance(payload, list):
        raise DatasetError("Expected JSON array at root of dwell-time dataset")
    records: list[DwellRecord] = []
    for idx, item in enumerate(payload):
        if not isinstance(item, Mapping):
            raise DatasetError(f"Expected mapping at index {idx} of dwell-time dataset")
        try:
            records.append(DwellRecord.from_mapping(item))
        except DatasetError as exc:
            raise DatasetError(f"record[{idx}]: {exc}") from exc
    return records


def load_regions(source: str | Path, fetch: FetchConfig | None = None) -> list[RegionFeature]:
    features = parse_regions(read_json_source(source, fetch))
    _LOGGER.info("Loaded %d region features from %s", len(features), source)
    return features


def load_records(source: str | Path, fetch: FetchConfig | None = None) -> list[DwellRecord]:
    records = parse_records(read_json_source(source, fetch))
    _LOGGER.info("Loaded %d dwell-time records from %s", len(records), source)
    return records


async def load_regions_async(
    source: str | Path, fetch: FetchConfig | None = None
) -> list[RegionFeature]:
    return await asyncio.to_thread(load_regions, source, fetch)


async def load_records_async(
    source: str | Path, fetch: FetchConfig | None = None
) -> list[DwellRecord]:
    return await asyncio.to_thread(load_records, source, fetch)


def available_weeks(records: Sequence[DwellRecord]) -> list[tuple[int, int]]:
    """Sorted distinct (year, week) pairs present in the records."""
    return sorted({(record.year, record.week) for record in records})
