"""Command-line host for the Spatial UI Converter."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from ui_converter.converter_config import ConverterSettings, load_converter_settings
from ui_converter.orchestrator import Converter
from ui_converter.source_tree import SourceTreeError, load_source_tree
from ui_converter.templates import TemplateLibraryError, load_template_library
from version import describe, is_dev_build

LOGGER_NAME = "SpatialUIConverter"
LOG_TAG = "SpatialUIConverter"

_LEVEL_NAME_MAP = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

LOGGER = logging.getLogger(LOGGER_NAME)


def resolve_log_level(name: Optional[str]) -> int:
    if is_dev_build():
        return logging.DEBUG
    token = (name or "INFO").strip().upper()
    return _LEVEL_NAME_MAP.get(token, logging.INFO)


def configure_logging(level: int) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if not any(getattr(handler, "_converter_handler", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler._converter_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(f"[%(asctime)s] [{LOG_TAG}] %(message)s", "%H:%M:%S"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert a resolved 2D UI tree into a 3D scene tree")
    parser.add_argument("source", help="Path to the resolved UI tree (JSON)")
    parser.add_argument("--settings", help="Path to converter settings (JSON)")
    parser.add_argument("--templates", help="Path to a template library (JSON); defaults to the bundled one")
    parser.add_argument("--output", help="Where to write the scene tree; prints to stdout when omitted")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {describe()}")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging(resolve_log_level(args.log_level))
    logger.debug("Spatial UI Converter %s", describe())

    settings = load_converter_settings(Path(args.settings)) if args.settings else ConverterSettings()
    try:
        library = load_template_library(Path(args.templates) if args.templates else None)
        root = load_source_tree(Path(args.source))
    except (OSError, SourceTreeError, TemplateLibraryError) as exc:
        logger.error("Unable to load conversion inputs: %s", exc)
        return 1
    logger.debug("Loaded %d templates; settings=%s", len(library.keys()), settings.to_payload())

    result = Converter(settings, library, logger=logger.getChild("Converter")).convert(root)
    for line in result.report.lines():
        print(line, file=sys.stderr)
    if not result.succeeded or result.scene is None:
        return 1

    payload = json.dumps(result.scene.to_payload(), indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.write_text(payload + "\n", encoding="utf-8")
        logger.info("Wrote scene tree to %s", output_path)
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
