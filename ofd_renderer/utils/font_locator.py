"""Locate CJK-capable font files on the local filesystem."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from ofd_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)

OUTLINE_EXTENSIONS = (".ttf", ".ttc", ".otf")

# Ranked: TrueType-outline families first since CFF outlines cannot be embedded.
KNOWN_CJK_FONT_FILES = (
    "simsun.ttc",
    "simsun.ttf",
    "simhei.ttf",
    "simkai.ttf",
    "simfang.ttf",
    "msyh.ttc",
    "msyh.ttf",
    "wqy-microhei.ttc",
    "wqy-zenhei.ttc",
    "droidsansfallbackfull.ttf",
    "droidsansfallback.ttf",
    "uming.ttc",
    "ukai.ttc",
    "arial unicode.ttf",
    "songti.ttc",
    "stheiti light.ttc",
    "notosanscjk-regular.ttc",
    "notoserifcjk-regular.ttc",
    "sourcehansanssc-regular.otf",
)

DEFAULT_MAX_DEPTH = 3


def candidate_directories(platform: Optional[str] = None, home: Optional[Path] = None) -> List[Path]:
    """Return the ranked system font directories for ``platform``."""
    platform = platform or sys.platform
    home = home or Path.home()
    if platform.startswith("win"):
        windir = Path(os.environ.get("WINDIR", r"C:\Windows"))
        local = os.environ.get("LOCALAPPDATA")
        dirs = [windir / "Fonts"]
        if local:
            dirs.append(Path(local) / "Microsoft" / "Windows" / "Fonts")
        return dirs
    if platform == "darwin":
        return [
            Path("/System/Library/Fonts"),
            Path("/System/Library/Fonts/Supplemental"),
            Path("/Library/Fonts"),
            home / "Library" / "Fonts",
        ]
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        home / ".local" / "share" / "fonts",
        home / ".fonts",
    ]


def find_font_files(
    directories: Iterable[Path],
    filenames: Optional[Sequence[str]] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Iterator[Path]:
    """Yield font files below ``directories`` in a stable order.

    With ``filenames`` only those names match (case-insensitive); without,
    any outline font file does. Recursion stops ``max_depth`` levels down.
    """
    wanted = {name.lower() for name in filenames} if filenames is not None else None
    for directory in directories:
        root = Path(directory)
        if not root.is_dir():
            continue
        base_depth = len(root.parts)
        for current, dirnames, files in os.walk(root):
            depth = len(Path(current).parts) - base_depth
            if depth >= max_depth:
                dirnames[:] = []
            else:
                dirnames.sort()
            for filename in sorted(files):
                lowered = filename.lower()
                if wanted is not None:
                    if lowered in wanted:
                        yield Path(current) / filename
                elif lowered.endswith(OUTLINE_EXTENSIONS):
                    yield Path(current) / filename


def best_ranked(paths: Iterable[Path], ranking: Sequence[str] = KNOWN_CJK_FONT_FILES) -> Optional[Path]:
    """Pick the path whose filename ranks highest in ``ranking``."""
    order = {name.lower(): rank for rank, name in enumerate(ranking)}
    candidates = [path for path in paths if path.name.lower() in order]
    if not candidates:
        return None
    return min(candidates, key=lambda path: order[path.name.lower()])


def find_in_directory(directory: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[Path]:
    """Known CJK font in a user directory, else its first outline font."""
    known = best_ranked(find_font_files([directory], KNOWN_CJK_FONT_FILES, max_depth))
    if known is not None:
        return known
    return next(find_font_files([directory], None, max_depth), None)


class SystemFontCache:
    """Memoized system CJK font lookup.

    The scan result is kept for the lifetime of the instance. Concurrent
    callers may both scan; they reach the same answer.
    """

    _UNSET = object()

    def __init__(
        self,
        directories: Optional[Sequence[Path]] = None,
        filenames: Sequence[str] = KNOWN_CJK_FONT_FILES,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._directories = directories
        self._filenames = tuple(filenames)
        self._max_depth = max_depth
        self._result: object = self._UNSET
        self.scan_count = 0

    def find_cjk_font(self) -> Optional[Path]:
        if self._result is self._UNSET:
            self._result = self._scan()
        return self._result  # type: ignore[return-value]

    def reset(self) -> None:
        self._result = self._UNSET

    def _scan(self) -> Optional[Path]:
        self.scan_count += 1
        directories = self._directories if self._directories is not None else candidate_directories()
        for directory in directories:
            found = best_ranked(find_font_files([directory], self._filenames, self._max_depth), self._filenames)
            if found is not None:
                LOGGER.debug("System CJK font located: %s", found)
                return found
        LOGGER.debug("No system CJK font found in %d directories", len(directories))
        return None


DEFAULT_SYSTEM_FONTS = SystemFontCache()
