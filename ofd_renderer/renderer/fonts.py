"""Map OFD font descriptors onto fonts the PDF writer can draw with.

Resolution runs through three tiers, first success wins:

1. the embedded font file referenced by the descriptor;
2. for CJK font names, a CJK font from the caller's font directory or the
   system font directories;
3. a keyword/style mapping onto the standard PDF fonts.
"""
from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, Optional, Protocol, Tuple

from ofd_renderer.model.document_model import FontDescriptor
from ofd_renderer.parser.ofd_loader import OfdPackage
from ofd_renderer.utils.font_locator import DEFAULT_SYSTEM_FONTS, OUTLINE_EXTENSIONS, SystemFontCache, find_in_directory
from ofd_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)

TIER_EMBEDDED = "embedded"
TIER_CJK = "cjk"
TIER_BUILTIN = "builtin"

DEFAULT_FONT = "Helvetica"

CJK_KEYWORDS = ("song", "hei", "kai", "fang", "ming", "simsun", "simhei", "yahei", "宋", "黑", "楷", "仿", "明")

# Code point blocks treated as CJK in font names
CJK_RANGES = (
    (0x2E80, 0x2FDF),
    (0x3000, 0x30FF),
    (0x3100, 0x31BF),
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xAC00, 0xD7AF),
    (0xF900, 0xFAFF),
    (0xFF00, 0xFFEF),
    (0x20000, 0x2FA1F),
)


class FontEmbedder(Protocol):
    def register_font(self, data: bytes, *, subfont_index: int = 0) -> Tuple[str, FrozenSet[int]]: ...

    def builtin_font(self, name: str) -> str: ...


@dataclass(frozen=True, slots=True)
class ResolvedFont:
    """A drawable font: PDF font name, the tier that produced it and its coverage."""

    name: str
    tier: str
    codepoints: Optional[FrozenSet[int]] = None

    def can_render(self, char: str) -> bool:
        if self.codepoints is not None:
            return ord(char) in self.codepoints
        # standard fonts draw through WinAnsiEncoding
        try:
            char.encode("cp1252")
        except UnicodeEncodeError:
            return False
        return True


def is_cjk_name(name: Optional[str]) -> bool:
    """True when a font name contains CJK characters or a CJK family keyword."""
    if not name:
        return False
    lowered = name.lower()
    if any(keyword in lowered for keyword in CJK_KEYWORDS):
        return True
    return any(low <= ord(char) <= high for char in name for low, high in CJK_RANGES)


def builtin_font_for(descriptor: Optional[FontDescriptor]) -> str:
    """Deterministic standard-font choice from name keywords and style flags."""
    if descriptor is None:
        return DEFAULT_FONT

    name = (descriptor.name or "").lower()
    bold = descriptor.bold
    italic = descriptor.italic

    if "song" in name or "宋" in name or "simsun" in name:
        return "Times-Bold" if bold else "Times-Roman"
    if "hei" in name or "黑" in name or "simhei" in name:
        return "Helvetica-Bold" if bold else "Helvetica"
    if "kai" in name or "楷" in name or "kaiti" in name:
        return "Times-Italic" if italic else "Times-Roman"
    if "fang" in name or "仿" in name or "fangsong" in name:
        return "Times-Roman"
    if "courier" in name or "mono" in name or descriptor.fixed_width:
        return "Courier-Bold" if bold else "Courier"
    if "times" in name or "serif" in name or descriptor.serif:
        if bold and italic:
            return "Times-BoldItalic"
        if bold:
            return "Times-Bold"
        if italic:
            return "Times-Italic"
        return "Times-Roman"

    if bold and italic:
        return "Helvetica-BoldOblique"
    if bold:
        return "Helvetica-Bold"
    if italic:
        return "Helvetica-Oblique"
    return DEFAULT_FONT


class FontResolver:
    """Resolves font ids for one render; never shared between renders."""

    def __init__(
        self,
        embedder: FontEmbedder,
        package: OfdPackage,
        fonts: Dict[str, FontDescriptor],
        *,
        font_dir: Optional[Path] = None,
        system_fonts: Optional[SystemFontCache] = None,
        builtin_only: bool = False,
    ) -> None:
        self._embedder = embedder
        self._package = package
        self._fonts = fonts
        self._font_dir = Path(font_dir) if font_dir else None
        self._system_fonts = system_fonts if system_fonts is not None else DEFAULT_SYSTEM_FONTS
        self._builtin_only = builtin_only
        self._by_id: Dict[str, ResolvedFont] = {}
        self._by_file: Dict[str, Optional[ResolvedFont]] = {}

    def resolve(self, font_id: str) -> ResolvedFont:
        """Return the font for ``font_id``; unknown ids get the default font."""
        cached = self._by_id.get(font_id)
        if cached is not None:
            return cached

        descriptor = self._fonts.get(font_id)
        if descriptor is None:
            resolved = self.default()
        else:
            resolved = self._resolve_descriptor(descriptor)
            LOGGER.debug("Font %s (%s) resolved to %s via %s", font_id, descriptor.name, resolved.name, resolved.tier)
        self._by_id[font_id] = resolved
        return resolved

    def default(self) -> ResolvedFont:
        return ResolvedFont(self._embedder.builtin_font(DEFAULT_FONT), TIER_BUILTIN)

    def builtin(self, name: str) -> str:
        return self._embedder.builtin_font(name)

    def resolved_tiers(self) -> Dict[str, str]:
        return {font_id: font.tier for font_id, font in self._by_id.items()}

    # ------------------------------------------------------------------
    # Tiers
    def _resolve_descriptor(self, descriptor: FontDescriptor) -> ResolvedFont:
        if not self._builtin_only:
            embedded = self._resolve_embedded(descriptor)
            if embedded is not None:
                return embedded
            if is_cjk_name(descriptor.name) or is_cjk_name(descriptor.family_name):
                cjk = self._resolve_cjk()
                if cjk is not None:
                    return cjk
        return ResolvedFont(self._embedder.builtin_font(builtin_font_for(descriptor)), TIER_BUILTIN)

    def _resolve_embedded(self, descriptor: FontDescriptor) -> Optional[ResolvedFont]:
        path = descriptor.font_file
        if not path or not path.lower().endswith(OUTLINE_EXTENSIONS):
            return None
        key = f"archive:{path}"
        if key not in self._by_file:
            data = self._package.read_bytes(path)
            if data is None:
                LOGGER.warning("Embedded font file missing from archive: %s", path)
                self._by_file[key] = None
            else:
                self._by_file[key] = self._embed(data, TIER_EMBEDDED, posixpath.basename(path))
        return self._by_file[key]

    def _resolve_cjk(self) -> Optional[ResolvedFont]:
        for path in self._cjk_candidates():
            key = f"file:{path}"
            if key not in self._by_file:
                try:
                    data = path.read_bytes()
                except OSError as exc:
                    LOGGER.warning("Cannot read CJK font %s: %s", path, exc)
                    self._by_file[key] = None
                    continue
                self._by_file[key] = self._embed(data, TIER_CJK, path.name)
            if self._by_file[key] is not None:
                return self._by_file[key]
        return None

    def _cjk_candidates(self) -> Iterator[Path]:
        """User directory first; the system scan only runs when that fails."""
        if self._font_dir is not None:
            found = find_in_directory(self._font_dir)
            if found is not None:
                yield found
        system = self._system_fonts.find_cjk_font()
        if system is not None:
            yield system

    def _embed(self, data: bytes, tier: str, label: str) -> Optional[ResolvedFont]:
        try:
            name, codepoints = self._embedder.register_font(data)
        except Exception as exc:
            LOGGER.warning("Could not embed font %s: %s", label, exc)
            return None
        return ResolvedFont(name, tier, codepoints)
