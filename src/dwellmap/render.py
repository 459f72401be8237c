"""One-shot map rendering to an image file."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .config import AppConfig
from .legend import legend_labels
from .models import FilterCriteria
from .surface import MatplotlibSurface
from .view import DwellMapView, ViewState


_LOGGER = logging.getLogger("dwellmap.render")

DEFAULT_CONTAINER_WIDTH = 1152


@dataclass(slots=True)
class RenderMapReport:
    output_path: Path | None = None
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


def default_output_path(cfg: AppConfig, criteria: FilterCriteria) -> Path:
    carrier = criteria.railroad or "ALL"
    return cfg.paths.output_dir / f"dwell_{criteria.year}_w{criteria.week:02d}_{carrier}.png"


def run_render_map(
    cfg: AppConfig,
    *,
    criteria: FilterCriteria,
    container_width: float = DEFAULT_CONTAINER_WIDTH,
    output_path: Path | None = None,
) -> RenderMapReport:
    """Load both datasets, render one filtered map and save it."""
    target = output_path or default_output_path(cfg, criteria)
    report = RenderMapReport()
    started = time.perf_counter()

    surface = MatplotlibSurface(dpi=cfg.map.style.dpi)
    view = DwellMapView(
        cfg.map,
        surface,
        criteria=criteria,
        container_width=container_width,
    )
    try:
        with view.batch():
            state = asyncio.run(view.load(cfg.paths.regions, cfg.paths.records, cfg.fetch))
        if state is not ViewState.READY:
            report.add_error(view.failure or f"Datasets did not finish loading (state={state.value}).")
            return report

        if not view.filtered_records:
            report.add_warning(
                f"No dwell-time records match week={criteria.week}, year={criteria.year}, "
                f"railroad={criteria.railroad or 'all'}."
            )
        dims = view.canvas_dimensions
        surface.save(target)
    finally:
        surface.close()

    report.output_path = target
    report.add_info(view.caption)
    report.add_info("Legend: " + ", ".join(legend_labels(cfg.map.gradient)))
    report.add_info(
        "Render summary: "
        f"regions={len(view.regions)}, "
        f"points={len(view.filtered_records)}, "
        f"canvas={dims.width}x{dims.height}, "
        f"elapsed_s={time.perf_counter() - started:.2f}"
    )
    report.add_info(f"Map written to {target}")
    return report


def format_render_lines(report: RenderMapReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Map rendering completed with no errors.")
    return lines
