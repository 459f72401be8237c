"""Dwell-time map view: dataset state, filtering and the redraw cycle."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Sequence

import requests

from .config import FetchConfig, MapConfig
from .datasets import load_records_async, load_regions_async
from .legend import draw_caption, draw_legend, week_caption
from .models import (
    CanvasDimensions,
    DatasetError,
    DwellRecord,
    FilterCriteria,
    RegionFeature,
    filter_records,
    normalize_railroad,
)
from .points import draw_points
from .projection import canvas_dimensions_for, make_projector
from .regions import RegionStyle, draw_regions
from .surface import DrawingSurface


_LOGGER = logging.getLogger("dwellmap.view")

_UNSET: Any = object()


class ViewState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class DwellMapView:
    """Holds loaded datasets and filter state and repaints a surface on change.

    Mutators mark the view dirty and redraw immediately unless called inside
    `batch()`, in which case a single redraw happens when the outermost batch
    exits. Nothing is drawn until both datasets have arrived.
    """

    def __init__(
        self,
        map_cfg: MapConfig,
        surface: DrawingSurface | None = None,
        *,
        criteria: FilterCriteria,
        container_width: float = 0.0,
        show_legend: bool = True,
    ) -> None:
        self.map_cfg = map_cfg
        self.surface = surface
        self.show_legend = show_legend
        self.redraw_count = 0
        self._state = ViewState.UNINITIALIZED
        self._criteria = criteria
        self._container_width = float(container_width)
        self._regions: list[RegionFeature] | None = None
        self._records: list[DwellRecord] | None = None
        self._filtered: list[DwellRecord] = []
        self._batch_depth = 0
        self._dirty = False
        self._failure: str | None = None

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def failure(self) -> str | None:
        return self._failure

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def regions(self) -> Sequence[RegionFeature]:
        return tuple(self._regions or ())

    @property
    def filtered_records(self) -> Sequence[DwellRecord]:
        return tuple(self._filtered)

    @property
    def caption(self) -> str:
        return week_caption(self._filtered)

    @property
    def canvas_dimensions(self) -> CanvasDimensions:
        return canvas_dimensions_for(
            self._container_width,
            self.map_cfg.bounds,
            container_inset_px=self.map_cfg.style.container_inset_px,
        )

    def begin_loading(self) -> None:
        self._state = ViewState.LOADING
        self._failure = None
        self._regions = None
        self._records = None
        self._filtered = []

    def set_regions(self, features: Sequence[RegionFeature]) -> None:
        self._regions = list(features)
        self._on_dataset_arrived()

    def set_records(self, records: Sequence[DwellRecord]) -> None:
        self._records = list(records)
        self._refilter()
        self._on_dataset_arrived()

    def fail(self, label: str, exc: BaseException) -> None:
        if self._state is ViewState.FAILED:
            _LOGGER.debug("Ignoring additional %s load failure: %s", label, exc)
            return
        self._state = ViewState.FAILED
        self._failure = f"Error loading {label} data: {exc}"
        _LOGGER.error(self._failure)

    async def load(
        self,
        regions_source: str | Path,
        records_source: str | Path,
        fetch: FetchConfig | None = None,
    ) -> ViewState:
        """Load both datasets concurrently; either may arrive first."""
        self.begin_loading()
        await asyncio.gather(
            self._load_one("regions", load_regions_async(regions_source, fetch), self.set_regions),
            self._load_one("dwell-time", load_records_async(records_source, fetch), self.set_records),
        )
        return self._state

    def resize(self, container_width: float) -> None:
        if float(container_width) == self._container_width:
            return
        self._container_width = float(container_width)
        self._invalidate()

    def set_filter(
        self,
        *,
        week: int | None = None,
        year: int | None = None,
        railroad: str | None = _UNSET,
    ) -> None:
        """Update any subset of the criteria; `railroad=None` selects every carrier."""
        new_railroad = self._criteria.railroad
        if railroad is not _UNSET:
            new_railroad = None if railroad is None else normalize_railroad(railroad)
        criteria = FilterCriteria(
            week=self._criteria.week if week is None else week,
            year=self._criteria.year if year is None else year,
            railroad=new_railroad,
        )
        if criteria == self._criteria:
            return
        self._criteria = criteria
        self._refilter()
        self._invalidate()

    @contextmanager
    def batch(self) -> Iterator[DwellMapView]:
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._dirty:
                self.render()

    def render(self) -> bool:
        """Run one full redraw; returns False when nothing could be drawn."""
        self._dirty = False
        if self.surface is None:
            _LOGGER.debug("Render skipped: no drawing surface attached.")
            return False
        if self._state is not ViewState.READY or self._regions is None:
            return False

        dims = self.canvas_dimensions
        surface = self.surface
        surface.resize(dims)
        surface.fill_rect(0, 0, dims.width, dims.height, self.map_cfg.style.background)

        projection = make_projector(dims, self.map_cfg.bounds)
        regions_drawn = draw_regions(
            self._regions,
            surface,
            projection,
            RegionStyle.from_config(self.map_cfg.style),
        )
        points_drawn = draw_points(
            self._filtered,
            surface,
            projection,
            self.map_cfg.gradient,
            radius=self.map_cfg.style.point_radius,
        )
        if self.show_legend:
            margin = self.map_cfg.bounds.padding
            draw_caption(surface, self.caption, margin=margin)
            draw_legend(surface, self.map_cfg.gradient, margin=margin)

        self.redraw_count += 1
        _LOGGER.debug(
            "Redraw #%d at %dx%d: regions=%d, points=%d",
            self.redraw_count,
            dims.width,
            dims.height,
            regions_drawn,
            points_drawn,
        )
        return True

    async def _load_one(self, label: str, coro: Any, on_loaded: Any) -> None:
        try:
            result = await coro
        except (DatasetError, OSError, requests.RequestException) as exc:
            self.fail(label, exc)
            return
        on_loaded(result)

    def _on_dataset_arrived(self) -> None:
        if self._state is ViewState.FAILED:
            return
        if self._regions is None or self._records is None:
            self._state = ViewState.LOADING
            return
        self._state = ViewState.READY
        self._invalidate()

    def _refilter(self) -> None:
        self._filtered = filter_records(self._records or (), self._criteria)

    def _invalidate(self) -> None:
        self._dirty = True
        if self._batch_depth == 0:
            self.render()
