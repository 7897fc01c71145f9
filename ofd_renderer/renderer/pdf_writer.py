"""Serialize page display lists into a PDF using ReportLab."""
from __future__ import annotations

import hashlib
import io
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from ofd_renderer.model.path_commands import ClosePath, CubicTo, LineTo, MoveTo
from ofd_renderer.renderer.operations import (
    DrawImage,
    DrawOp,
    DrawPath,
    DrawText,
    PageDrawing,
    RestoreState,
    SaveState,
    SetAlpha,
    SetFillColor,
    SetLineStyle,
    SetStrokeColor,
)
from ofd_renderer.utils.errors import SerializationError
from ofd_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)

STANDARD_FONTS = frozenset(
    {
        "Helvetica",
        "Helvetica-Bold",
        "Helvetica-Oblique",
        "Helvetica-BoldOblique",
        "Times-Roman",
        "Times-Bold",
        "Times-Italic",
        "Times-BoldItalic",
        "Courier",
        "Courier-Bold",
        "Courier-Oblique",
        "Courier-BoldOblique",
        "Symbol",
        "ZapfDingbats",
    }
)

PRODUCER = "ofd-renderer"


class PdfWriter:
    """Font embedding and final PDF assembly on top of a ReportLab canvas."""

    def __init__(self, *, metadata: Optional[Dict[str, str]] = None) -> None:
        self._metadata = dict(metadata or {})

    # ------------------------------------------------------------------
    # Fonts
    def register_font(self, data: bytes, *, subfont_index: int = 0) -> Tuple[str, FrozenSet[int]]:
        """Embed a TrueType font; returns its PDF name and covered code points.

        Fonts are registered under a content hash, so identical bytes share
        one registration across conversions.
        """
        digest = hashlib.sha1(data).hexdigest()[:16]
        name = f"OFD-{digest}-{subfont_index}"
        if name not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(name, io.BytesIO(data), subfontIndex=subfont_index))
            LOGGER.debug("Registered embedded font %s", name)
        font = pdfmetrics.getFont(name)
        return name, frozenset(font.face.charToGlyph)

    def builtin_font(self, name: str) -> str:
        if name not in STANDARD_FONTS:
            raise ValueError(f"Not a standard PDF font: {name}")
        return name

    # ------------------------------------------------------------------
    # Output
    def serialize(self, pages: Sequence[PageDrawing]) -> bytes:
        """Replay every page onto a fresh canvas and return the PDF bytes."""
        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(buffer, pageCompression=1)
            pdf.setTitle(self._metadata.get("Title", "Converted from OFD"))
            if "Author" in self._metadata:
                pdf.setAuthor(self._metadata["Author"])
            if "Subject" in self._metadata:
                pdf.setSubject(self._metadata["Subject"])
            pdf.setCreator(PRODUCER)

            for page in pages:
                pdf.setPageSize((page.width, page.height))
                for operation in page.operations:
                    self._apply(pdf, operation)
                pdf.showPage()
            pdf.save()
        except Exception as exc:
            raise SerializationError(f"PDF serialization failed: {exc}") from exc
        return buffer.getvalue()

    def _apply(self, pdf: canvas.Canvas, operation: DrawOp) -> None:
        if isinstance(operation, SaveState):
            pdf.saveState()
        elif isinstance(operation, RestoreState):
            pdf.restoreState()
        elif isinstance(operation, SetLineStyle):
            pdf.setLineWidth(operation.width)
            if operation.dash:
                pdf.setDash(list(operation.dash), operation.dash_phase)
            if operation.join is not None:
                pdf.setLineJoin(operation.join)
            if operation.cap is not None:
                pdf.setLineCap(operation.cap)
            if operation.miter_limit is not None:
                pdf.setMiterLimit(operation.miter_limit)
        elif isinstance(operation, SetFillColor):
            pdf.setFillColorRGB(*operation.rgb)
        elif isinstance(operation, SetStrokeColor):
            pdf.setStrokeColorRGB(*operation.rgb)
        elif isinstance(operation, SetAlpha):
            if operation.fill is not None:
                pdf.setFillAlpha(operation.fill)
            if operation.stroke is not None:
                pdf.setStrokeAlpha(operation.stroke)
        elif isinstance(operation, DrawPath):
            self._draw_path(pdf, operation)
        elif isinstance(operation, DrawText):
            pdf.setFont(operation.font_name, operation.size)
            pdf.drawString(operation.x, operation.y, operation.text)
        elif isinstance(operation, DrawImage):
            pdf.drawImage(operation.image, operation.x, operation.y, operation.width, operation.height, mask="auto")
        else:
            raise TypeError(f"Unknown drawing operation: {operation!r}")

    @staticmethod
    def _draw_path(pdf: canvas.Canvas, operation: DrawPath) -> None:
        path = pdf.beginPath()
        for segment in operation.segments:
            if isinstance(segment, MoveTo):
                path.moveTo(segment.x, segment.y)
            elif isinstance(segment, LineTo):
                path.lineTo(segment.x, segment.y)
            elif isinstance(segment, CubicTo):
                path.curveTo(segment.x1, segment.y1, segment.x2, segment.y2, segment.x, segment.y)
            elif isinstance(segment, ClosePath):
                path.close()
            else:
                raise TypeError(f"Unexpected path segment: {segment!r}")
        pdf.drawPath(path, stroke=int(operation.stroke), fill=int(operation.fill))
