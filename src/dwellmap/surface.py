"""Canvas-style drawing surface backed by matplotlib."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from .models import CanvasDimensions


_LOGGER = logging.getLogger("dwellmap.surface")

_POINTS_PER_INCH = 72.0
_SIZE_EPSILON_PX = 1e-3


class DrawingSurface(Protocol):
    """Subset of the 2D canvas API the renderers rely on.

    Coordinates are canvas pixels with the origin in the top-left corner.
    Paths accumulate between `begin_path` and the next `fill`/`stroke`.
    """

    @property
    def dimensions(self) -> CanvasDimensions: ...

    def resize(self, dims: CanvasDimensions) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None: ...

    def begin_path(self) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def arc(self, x: float, y: float, radius: float) -> None: ...

    def fill(self, color: str) -> None: ...

    def stroke(self, color: str, line_width: float) -> None: ...

    def fill_text(self, text: str, x: float, y: float, color: str, size_px: float) -> None: ...


class MatplotlibSurface:
    """Pixel-addressed drawing surface on a single full-bleed matplotlib axes."""

    def __init__(self, dims: CanvasDimensions | None = None, *, dpi: int = 100) -> None:
        self.dpi = dpi
        self._dims = CanvasDimensions(width=0, height=0)
        self._fig: Any | None = None
        self._ax: Any | None = None
        self._vertices: list[tuple[float, float]] = []
        self._codes: list[int] = []
        self._zorder = 0
        if dims is not None:
            self.resize(dims)

    @property
    def dimensions(self) -> CanvasDimensions:
        return self._dims

    def resize(self, dims: CanvasDimensions) -> None:
        """Recreate the backing figure; like a canvas, resizing discards content."""
        plt, _ = _require_matplotlib()
        self.close()
        self._dims = dims
        # Agg truncates the pixel size, so nudge it past float error.
        fig = plt.figure(
            figsize=(
                (max(dims.width, 1) + _SIZE_EPSILON_PX) / self.dpi,
                (max(dims.height, 1) + _SIZE_EPSILON_PX) / self.dpi,
            ),
            dpi=self.dpi,
        )
        ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
        ax.set_xlim(0, dims.width)
        ax.set_ylim(dims.height, 0)
        ax.axis("off")
        self._fig = fig
        self._ax = ax
        self._zorder = 0
        self.begin_path()

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        _, patches = _require_matplotlib()
        ax = self._require_axes()
        ax.add_patch(
            patches.Rectangle(
                (x, y),
                width,
                height,
                facecolor=color,
                edgecolor="none",
                zorder=self._next_zorder(),
            )
        )

    def begin_path(self) -> None:
        self._vertices = []
        self._codes = []

    def move_to(self, x: float, y: float) -> None:
        mpath = _require_matplotlib_path()
        self._vertices.append((float(x), float(y)))
        self._codes.append(mpath.MOVETO)

    def line_to(self, x: float, y: float) -> None:
        mpath = _require_matplotlib_path()
        if not self._codes:
            # Canvas semantics: a lineTo on an empty path starts the sub-path.
            self.move_to(x, y)
            return
        self._vertices.append((float(x), float(y)))
        self._codes.append(mpath.LINETO)

    def arc(self, x: float, y: float, radius: float) -> None:
        mpath = _require_matplotlib_path()
        circle = mpath.circle(center=(float(x), float(y)), radius=float(radius))
        self._vertices.extend((float(vx), float(vy)) for vx, vy in circle.vertices)
        self._codes.extend(int(code) for code in circle.codes)

    def fill(self, color: str) -> None:
        patch = self._path_patch(facecolor=color, edgecolor="none", fill=True)
        if patch is not None:
            self._require_axes().add_patch(patch)

    def stroke(self, color: str, line_width: float) -> None:
        patch = self._path_patch(
            facecolor="none",
            edgecolor=color,
            fill=False,
            linewidth=self._px_to_points(line_width),
        )
        if patch is not None:
            self._require_axes().add_patch(patch)

    def fill_text(self, text: str, x: float, y: float, color: str, size_px: float) -> None:
        ax = self._require_axes()
        ax.text(
            x,
            y,
            text,
            color=color,
            fontsize=self._px_to_points(size_px),
            ha="left",
            va="center",
            zorder=self._next_zorder(),
        )

    def save(self, output_path: Path, *, image_format: str = "png") -> Path:
        fig = self._require_figure()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=self.dpi, format=image_format)
        _LOGGER.debug("Saved %dx%d canvas to %s", self._dims.width, self._dims.height, output_path)
        return output_path

    def close(self) -> None:
        if self._fig is None:
            return
        plt, _ = _require_matplotlib()
        plt.close(self._fig)
        self._fig = None
        self._ax = None

    def _path_patch(self, **kwargs: Any) -> Any | None:
        if not self._codes:
            return None
        mpath = _require_matplotlib_path()
        _, patches = _require_matplotlib()
        path = mpath(list(self._vertices), list(self._codes))
        return patches.PathPatch(path, zorder=self._next_zorder(), **kwargs)

    def _px_to_points(self, px: float) -> float:
        return float(px) * _POINTS_PER_INCH / self.dpi

    def _next_zorder(self) -> int:
        self._zorder += 1
        return self._zorder

    def _require_axes(self) -> Any:
        if self._ax is None:
            raise RuntimeError("Surface has no canvas yet; call resize() first.")
        return self._ax

    def _require_figure(self) -> Any:
        if self._fig is None:
            raise RuntimeError("Surface has no canvas yet; call resize() first.")
        return self._fig


def _require_matplotlib() -> tuple[Any, Any]:
    try:
        import matplotlib

        matplotlib.use("Agg", force=False)
        import matplotlib.patches as patches
        import matplotlib.pyplot as plt
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map rendering") from exc
    return (plt, patches)


def _require_matplotlib_path() -> Any:
    try:
        from matplotlib.path import Path as MplPath
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map rendering") from exc
    return MplPath
