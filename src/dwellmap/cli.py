"""CLI entrypoint for the dwell-time map renderer."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import AppConfig, load_config
from .models import RAILROADS, DatasetError, FilterCriteria
from .preprocess import convert_csv
from .render import DEFAULT_CONTAINER_WIDTH, format_render_lines, run_render_map
from .util import ensure_directories, setup_logging
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("dwellmap.cli")

_ALL_RAILROADS = "ALL"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dwellmap",
        description="Railroad terminal dwell-time map renderer.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default=None, help="Path to YAML config (defaults built in).")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    render_p = subparsers.add_parser("render", help="Render one filtered map to PNG.")
    add_common(render_p)
    render_p.add_argument("--year", type=int, default=None, help="Year filter.")
    render_p.add_argument("--week", type=int, default=None, help="Week-of-year filter.")
    render_p.add_argument(
        "--railroad",
        type=str.upper,
        choices=[*RAILROADS, _ALL_RAILROADS],
        default=None,
        help="Railroad filter; ALL matches every carrier.",
    )
    render_p.add_argument(
        "--width",
        type=float,
        default=DEFAULT_CONTAINER_WIDTH,
        help="Container width in pixels; canvas height follows the aspect ratio.",
    )
    render_p.add_argument("--output", default=None, help="Output PNG path.")

    convert_p = subparsers.add_parser(
        "convert",
        help="Convert the source dwell-time CSV into the JSON dataset.",
    )
    add_common(convert_p)
    convert_p.add_argument("source_csv", help="Source CSV path.")
    convert_p.add_argument("output_json", help="Output JSON path.")

    validate_p = subparsers.add_parser("validate", help="Validate config and input datasets.")
    add_common(validate_p)

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "dwellmap.log", verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _resolve_criteria(cfg: AppConfig, args: argparse.Namespace) -> FilterCriteria:
    railroad = cfg.filters.railroad
    if args.railroad is not None:
        railroad = None if args.railroad == _ALL_RAILROADS else args.railroad
    return FilterCriteria(
        week=cfg.filters.week if args.week is None else args.week,
        year=cfg.filters.year if args.year is None else args.year,
        railroad=railroad,
    )


def _run_render(cfg: AppConfig, args: argparse.Namespace) -> int:
    criteria = _resolve_criteria(cfg, args)
    LOGGER.info(
        "Rendering week=%d year=%d railroad=%s",
        criteria.week,
        criteria.year,
        criteria.railroad or "all",
    )
    report = run_render_map(
        cfg,
        criteria=criteria,
        container_width=float(args.width),
        output_path=Path(args.output) if args.output else None,
    )
    for line in format_render_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_convert(source_csv: str, output_json: str) -> int:
    try:
        result = convert_csv(Path(source_csv), Path(output_json))
    except (DatasetError, FileNotFoundError) as exc:
        LOGGER.error("Conversion failed: %s", exc)
        return 1
    LOGGER.info("Wrote %d records to %s", result.rows_written, result.output_path)
    return 0


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "render":
        return _run_render(cfg, args)
    if command == "convert":
        return _run_convert(args.source_csv, args.output_json)
    if command == "validate":
        return _run_validate(cfg)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
