"""Offline CSV to JSON conversion for the dwell-time dataset."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from .models import DatasetError, DwellRecord
from .util import write_json


_LOGGER = logging.getLogger("dwellmap.preprocess")

SUMMARY_YARD = "System Average"
DROPPED_COLUMNS = ("Yard Point",)
INT_COLUMNS = ("Week", "Month", "Year")
FLOAT_COLUMNS = ("Latitude", "Longitude", "Value")


@dataclass(frozen=True, slots=True)
class ConversionResult:
    output_path: Path
    rows_in: int
    rows_written: int
    summary_rows_dropped: int


def convert_frame(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """Drop summary rows, coerce numeric/date columns and return JSON-ready rows."""
    missing = [col for col in ("Date", "Yard", *INT_COLUMNS, *FLOAT_COLUMNS) if col not in frame.columns]
    if missing:
        raise DatasetError("Source CSV is missing columns: " + ", ".join(missing))

    df = frame[frame["Yard"].astype(str).str.strip() != SUMMARY_YARD].copy()
    df = df.drop(columns=[col for col in DROPPED_COLUMNS if col in df.columns])

    dates = pd.to_datetime(df["Date"], errors="coerce", format="mixed")
    _raise_on_bad_rows(df, dates.isna(), "Date")
    df["Date"] = dates.dt.strftime("%Y-%m-%d")

    for col in (*INT_COLUMNS, *FLOAT_COLUMNS):
        numeric = pd.to_numeric(df[col], errors="coerce")
        _raise_on_bad_rows(df, numeric.isna(), col)
        if col in INT_COLUMNS:
            _raise_on_bad_rows(df, numeric != numeric.round(), col)
        df[col] = numeric.astype(int) if col in INT_COLUMNS else numeric.astype(float)

    rows: list[dict[str, Any]] = []
    for raw in df.to_dict(orient="records"):
        row = {str(key): _plain(value) for key, value in raw.items()}
        # Round-trip through the record model so output always loads back.
        DwellRecord.from_mapping(row)
        rows.append(row)
    return rows


def convert_csv(source_csv: Path, output_json: Path) -> ConversionResult:
    if not source_csv.exists():
        raise FileNotFoundError(f"Source CSV not found: {source_csv}")
    frame = pd.read_csv(source_csv, dtype=str, keep_default_na=False)
    rows = convert_frame(frame)
    dropped = int((frame["Yard"].astype(str).str.strip() == SUMMARY_YARD).sum())
    write_json(output_json, rows, sort_keys=False)
    _LOGGER.info(
        "Converted %s -> %s (%d rows in, %d written, %d summary rows dropped)",
        source_csv,
        output_json,
        len(frame),
        len(rows),
        dropped,
    )
    return ConversionResult(
        output_path=output_json,
        rows_in=len(frame),
        rows_written=len(rows),
        summary_rows_dropped=dropped,
    )


def _raise_on_bad_rows(df: pd.DataFrame, bad_mask: Any, column: str) -> None:
    if not bool(bad_mask.any()):
        return
    first_index = bad_mask[bad_mask].index[0]
    raise DatasetError(
        f"Could not coerce column '{column}' at CSV row {int(first_index) + 2}: "
        f"'{df.loc[first_index, column]}'"
    )


def _plain(value: Any) -> Any:
    # numpy scalars are not JSON serializable
    if hasattr(value, "item"):
        return value.item()
    return value
