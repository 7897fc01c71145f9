"""OFD package loader responsible for unpacking the ZIP container."""
from __future__ import annotations

import io
import posixpath
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Union
from xml.etree import ElementTree as ET

from ofd_renderer.utils.errors import FatalFormatError
from ofd_renderer.utils.logger import get_logger
from ofd_renderer.utils.xml_utils import parse_xml

LOGGER = get_logger(__name__)

ArchiveSource = Union[str, Path, bytes, bytearray, memoryview]


def normalize_part_name(name: str) -> str:
    """Use forward slashes and drop a leading ``/`` or ``./``."""
    normalized = name.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


def resolve_path(base_file: str, relative: str) -> str:
    """Resolve ``relative`` against the directory holding ``base_file``.

    A leading slash means the path is already archive-absolute.
    """
    relative = relative.strip().replace("\\", "/")
    if relative.startswith("/"):
        return normalize_part_name(posixpath.normpath(relative))
    base_dir = posixpath.dirname(normalize_part_name(base_file))
    joined = posixpath.join(base_dir, relative) if base_dir else relative
    normalized = posixpath.normpath(joined)
    # normpath keeps leading ".." segments that climb above the root
    parts = [part for part in normalized.split("/") if part not in ("", ".", "..")]
    return "/".join(parts)


@dataclass(slots=True)
class OfdPackage:
    """Container for the raw parts extracted from an OFD archive."""

    raw_parts: Mapping[str, bytes]
    xml_cache: Dict[str, Optional[ET.ElementTree]] = field(default_factory=dict)
    _lower_index: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._lower_index = {name.lower(): name for name in self.raw_parts}

    @classmethod
    def load(cls, source: ArchiveSource) -> "OfdPackage":
        """Open an OFD archive from a filesystem path or raw bytes."""
        if isinstance(source, (str, Path)):
            path = Path(source)
            data = path.read_bytes()
            label = path.name
        else:
            data = bytes(source)
            label = "<bytes>"

        try:
            with zipfile.ZipFile(io.BytesIO(data)) as ofd_zip:
                parts = {
                    normalize_part_name(info.filename): ofd_zip.read(info)
                    for info in ofd_zip.infolist()
                    if not info.is_dir()
                }
        except zipfile.BadZipFile as exc:
            raise FatalFormatError(f"Input is not an OFD (ZIP) archive: {label}") from exc

        LOGGER.debug("Loaded %d parts from %s", len(parts), label)
        return cls(raw_parts=parts)

    # ------------------------------------------------------------------
    # Public helpers
    def read_bytes(self, name: str) -> Optional[bytes]:
        """Return part bytes, retrying case-insensitively on a miss."""
        normalized = normalize_part_name(name)
        data = self.raw_parts.get(normalized)
        if data is not None:
            return data
        actual = self._lower_index.get(normalized.lower())
        if actual is None:
            return None
        return self.raw_parts[actual]

    def read_text(self, name: str) -> Optional[str]:
        data = self.read_bytes(name)
        if data is None:
            return None
        return data.decode("utf-8", errors="replace")

    def get_xml_part(self, name: str) -> Optional[ET.ElementTree]:
        """Parse and cache an XML part; unreadable XML counts as absent."""
        key = normalize_part_name(name).lower()
        if key in self.xml_cache:
            return self.xml_cache[key]
        data = self.read_bytes(name)
        tree: Optional[ET.ElementTree] = None
        if data is not None:
            try:
                tree = parse_xml(data)
            except ET.ParseError as exc:
                LOGGER.warning("Malformed XML in %s: %s", name, exc)
        self.xml_cache[key] = tree
        return tree

    def names(self) -> list[str]:
        return list(self.raw_parts)
