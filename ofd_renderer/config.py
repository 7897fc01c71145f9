"""Conversion options shared by the API and the command line."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

FONT_DIR_ENV = "OFD_RENDERER_FONT_DIR"
DEFAULT_DPI = 150


@dataclass(slots=True)
class ConvertOptions:
    """Knobs for one conversion.

    ``dpi`` bounds the resolution of embedded raster images; ``font_dir`` is
    searched for CJK fallback fonts before the system font directories.
    """

    watermark: bool = False
    dpi: Optional[float] = DEFAULT_DPI
    font_dir: Optional[Path] = None
    silent: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ConvertOptions":
        """Build options, taking ``font_dir`` from the environment when unset."""
        environ = os.environ if environ is None else environ
        options = cls(**overrides)
        if options.font_dir is None and environ.get(FONT_DIR_ENV):
            options.font_dir = Path(environ[FONT_DIR_ENV])
        return options
