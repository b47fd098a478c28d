"""Console entry point for the motion crop tool."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from loguru import logger

from .config import CODECS, CropConfig, load_config, merge_overrides
from .pipeline import process_batch
from .preview import NullPreview, WindowPreview

NOGUI_FLAG = "-nogui"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(sys.stderr, level=level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="motion-crop",
        description="Stabilize and crop videos of aircraft against reasonably cloud free skies.",
        epilog=(
            "Legacy form: motion-crop FILE [windowSize] [threshold] [iterations] [verbose] [-nogui]. "
            "Output: FILE_mcrop.{avi|mp4}"
        ),
    )
    parser.add_argument("files", nargs="+", help="Input video files")
    parser.add_argument("-w", "--window", type=int, help="Window size in pixels (default 400)")
    parser.add_argument(
        "-t", "--threshold", type=float, help="Threshold scalar (default 1.0, try 0.5 if jittery)"
    )
    parser.add_argument(
        "-i", "--iterations", type=int, help="Dilation iterations (default 2, try 3-4 if jittery)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="Enable debug output")
    parser.add_argument("-c", "--codec", help=f"Video codec: {', '.join(CODECS)} (default DIVX)")
    parser.add_argument("-f", "--format", dest="output_format", help="Output format: avi (default), mp4")
    parser.add_argument(
        "--no-gui", NOGUI_FLAG, dest="no_gui", action="store_true", help="Disable preview windows (batch mode)"
    )
    parser.add_argument("--config", help="Optional YAML file with default settings")
    parser.add_argument("--no-progress", dest="progress", action="store_false", default=None)
    return parser


def _is_legacy(argv: List[str]) -> bool:
    return bool(argv) and not any(arg.startswith("-") and arg != NOGUI_FLAG for arg in argv)


def parse_legacy(argv: List[str]) -> Tuple[List[str], Dict[str, Any], bool]:
    """Positional form: FILE [windowSize] [threshold] [iterations] [verbose] [-nogui]."""
    no_gui = NOGUI_FLAG in argv
    args = [arg for arg in argv if arg != NOGUI_FLAG]
    if not args:
        raise ValueError("no input file given")
    overrides: Dict[str, Any] = {}
    converters = (
        ("window_size", int),
        ("threshold_scalar", float),
        ("iterations", int),
        ("verbose", lambda v: min(max(int(v), 0), 1) == 1),
    )
    for (key, convert), raw in zip(converters, args[1:]):
        overrides[key] = convert(raw)
    return [args[0]], overrides, no_gui


def parse_flags(argv: List[str]) -> Tuple[List[str], Dict[str, Any], bool, str | None]:
    args = build_parser().parse_args(argv)
    overrides = {
        "window_size": args.window,
        "threshold_scalar": args.threshold,
        "iterations": args.iterations,
        "verbose": args.verbose,
        "codec": args.codec,
        "output_format": args.output_format,
        "progress": args.progress,
    }
    return list(args.files), overrides, bool(args.no_gui), args.config


def _resolve_config(config_path: str | None, overrides: Dict[str, Any]) -> CropConfig:
    base = load_config(Path(config_path)) if config_path else CropConfig()
    return merge_overrides(base, **overrides)


def main(argv: List[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_parser().print_help()
        return EXIT_USAGE

    config_path: str | None = None
    if _is_legacy(argv):
        try:
            files, overrides, no_gui = parse_legacy(argv)
        except ValueError as exc:
            _configure_logging(False)
            logger.error("Invalid arguments: {}", exc)
            build_parser().print_usage()
            return EXIT_USAGE
    else:
        files, overrides, no_gui, config_path = parse_flags(argv)

    _configure_logging(bool(overrides.get("verbose")))
    try:
        config = _resolve_config(config_path, overrides)
    except (ValueError, yaml.YAMLError) as exc:
        logger.error("Invalid configuration: {}", exc)
        return EXIT_USAGE
    _configure_logging(config.verbose)

    logger.info("Window Size: {}x{}", config.window_size, config.window_size)
    logger.debug(
        "threshold={} iterations={} codec={} format={}",
        config.threshold_scalar,
        config.iterations,
        config.codec,
        config.output_format,
    )
    preview = NullPreview() if no_gui else WindowPreview()
    summary = process_batch(files, config, preview)
    return EXIT_OK if summary.ok else EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
