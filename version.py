"""Release number of the Spatial UI Converter.

``pyproject.toml`` reads ``__version__`` from this module, so the number is
written down only here.
"""
from __future__ import annotations

import os
import re
from typing import Optional

from ui_converter.source_tree import coerce_bool

__all__ = ["__version__", "DEV_MODE_ENV_VAR", "describe", "is_dev_build"]

__version__ = "0.3.0"
DEV_MODE_ENV_VAR = "SPATIAL_UI_CONVERTER_DEV_MODE"

# "0.3.0-dev", "0.3.0.dev2", "dev-0.3"
_DEV_MARKER = re.compile(r"(?:^|[.-])dev\d*(?:$|[.-])")


def is_dev_build(version: Optional[str] = None) -> bool:
    """True when the converter logs at DEBUG whatever ``--log-level`` asks for.

    A recognised value of ``SPATIAL_UI_CONVERTER_DEV_MODE`` wins over the
    version identifier.
    """

    identifier = (version or __version__ or "").strip().lower()
    marked = bool(_DEV_MARKER.search(identifier))
    return coerce_bool(os.getenv(DEV_MODE_ENV_VAR), marked)


def describe(version: Optional[str] = None) -> str:
    identifier = (version or __version__).strip()
    if is_dev_build(identifier):
        return f"{identifier} (dev build)"
    return identifier
