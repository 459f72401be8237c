"""Week caption and gradient legend."""

from __future__ import annotations

from typing import Sequence

from .models import ColorStop, DwellRecord
from .surface import DrawingSurface


LOADING_CAPTION = "Loading..."

_TEXT_COLOR = "#1e293b"
_LABEL_COLOR = "#64748b"
_DOT_RADIUS = 6.0
_ITEM_WIDTH = 72.0
_TEXT_SIZE = 13.0


def week_caption(records: Sequence[DwellRecord]) -> str:
    if not records:
        return LOADING_CAPTION
    first = records[0].date
    return f"Dwell times for week of {first.strftime('%B')} {first.day}, {first.year}"


def legend_labels(color_stops: Sequence[ColorStop]) -> list[str]:
    return [f"{_format_threshold(stop.value)}+ h" for stop in color_stops]


def draw_caption(surface: DrawingSurface, caption: str, *, margin: float) -> None:
    surface.fill_text(caption, margin, margin / 2, _TEXT_COLOR, _TEXT_SIZE)


def draw_legend(surface: DrawingSurface, color_stops: Sequence[ColorStop], *, margin: float) -> None:
    """Row of colored dots with threshold labels, right-aligned in the bottom padding."""
    dims = surface.dimensions
    y = dims.height - margin / 2
    x = dims.width - margin - _ITEM_WIDTH * len(color_stops)
    for stop, label in zip(color_stops, legend_labels(color_stops)):
        surface.begin_path()
        surface.arc(x + _DOT_RADIUS, y, _DOT_RADIUS)
        surface.fill(stop.color)
        surface.fill_text(label, x + _DOT_RADIUS * 2 + 6, y, _LABEL_COLOR, _TEXT_SIZE)
        x += _ITEM_WIDTH


def _format_threshold(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"
