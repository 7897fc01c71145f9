"""Render a parsed OFD document into a PDF using ReportLab."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from reportlab.pdfbase import pdfmetrics

from ofd_renderer.config import ConvertOptions
from ofd_renderer.model.document_model import Document, Page
from ofd_renderer.model.elements import ImageObject, PageObject, PathObject, TextObject
from ofd_renderer.parser.ofd_loader import OfdPackage
from ofd_renderer.renderer.fonts import FontResolver
from ofd_renderer.renderer.geometry import PageSpace
from ofd_renderer.renderer.image_renderer import render_image_object
from ofd_renderer.renderer.operations import (
    DrawOp,
    DrawText,
    PageDrawing,
    RestoreState,
    SaveState,
    SetAlpha,
    SetFillColor,
)
from ofd_renderer.renderer.path_renderer import render_path_object
from ofd_renderer.renderer.pdf_writer import PdfWriter
from ofd_renderer.renderer.text_renderer import render_text_object
from ofd_renderer.utils.errors import ObjectRenderError, ResourceMissError, SerializationError
from ofd_renderer.utils.font_locator import SystemFontCache
from ofd_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)

WATERMARK_TEXT = "Converted by ofd-renderer"
WATERMARK_FONT = "Helvetica-Oblique"
WATERMARK_SIZE = 8
WATERMARK_GRAY = 0.75
WATERMARK_OPACITY = 0.5
WATERMARK_MARGIN = 10


@dataclass(slots=True)
class RenderDiagnostics:
    """What a render skipped or substituted along the way."""

    pages: int = 0
    skipped_objects: List[ObjectRenderError] = field(default_factory=list)
    missing_resources: List[str] = field(default_factory=list)
    font_tiers: Dict[str, str] = field(default_factory=dict)
    fallback_used: bool = False


class PdfRenderer:
    """Drives page rendering, font resolution and PDF serialization.

    A failed serialization is retried once with built-in fonts only.
    """

    def __init__(
        self,
        options: Optional[ConvertOptions] = None,
        *,
        writer_factory: Callable[..., PdfWriter] = PdfWriter,
        system_fonts: Optional[SystemFontCache] = None,
    ) -> None:
        self._options = options or ConvertOptions()
        self._writer_factory = writer_factory
        self._system_fonts = system_fonts

    def render(self, document: Document, package: OfdPackage) -> bytes:
        data, _ = self.render_with_diagnostics(document, package)
        return data

    def render_with_diagnostics(self, document: Document, package: OfdPackage) -> Tuple[bytes, RenderDiagnostics]:
        diagnostics = RenderDiagnostics()
        try:
            data = self._render_once(document, package, diagnostics, builtin_only=False)
        except SerializationError as exc:
            LOGGER.warning("%s; retrying with built-in fonts only", exc)
            diagnostics = RenderDiagnostics(fallback_used=True)
            data = self._render_once(document, package, diagnostics, builtin_only=True)

        if diagnostics.skipped_objects or diagnostics.missing_resources:
            LOGGER.warning(
                "Rendered %d page(s); skipped %d object(s), %d missing resource(s)",
                diagnostics.pages,
                len(diagnostics.skipped_objects),
                len(diagnostics.missing_resources),
            )
        else:
            LOGGER.debug("Rendered %d page(s)", diagnostics.pages)
        return data, diagnostics

    # ------------------------------------------------------------------
    # Passes
    def _render_once(
        self, document: Document, package: OfdPackage, diagnostics: RenderDiagnostics, *, builtin_only: bool
    ) -> bytes:
        writer = self._writer_factory(metadata=document.metadata)
        fonts = FontResolver(
            writer,
            package,
            document.fonts,
            font_dir=self._options.font_dir,
            system_fonts=self._system_fonts,
            builtin_only=builtin_only,
        )
        for font_id in document.fonts:
            fonts.resolve(font_id)

        drawings = [self._render_page(page, document, package, fonts, diagnostics) for page in document.pages]
        diagnostics.pages = len(drawings)
        diagnostics.font_tiers = fonts.resolved_tiers()
        return writer.serialize(drawings)

    def _render_page(
        self,
        page: Page,
        document: Document,
        package: OfdPackage,
        fonts: FontResolver,
        diagnostics: RenderDiagnostics,
    ) -> PageDrawing:
        space = PageSpace(page.area.height)
        drawing = PageDrawing(space.length(page.area.width), space.length(page.area.height), page_id=page.id)

        for layer in page.layers:
            for obj in layer.objects:
                error = self._render_object(obj, page, document, package, fonts, space, drawing, diagnostics)
                if error is not None:
                    LOGGER.warning("Skipping object %s on page %d: %s", error.object_id, page.index, error)
                    diagnostics.skipped_objects.append(error)

        if self._options.watermark:
            drawing.operations.extend(self._watermark(drawing.width, fonts))
        return drawing

    def _render_object(
        self,
        obj: PageObject,
        page: Page,
        document: Document,
        package: OfdPackage,
        fonts: FontResolver,
        space: PageSpace,
        drawing: PageDrawing,
        diagnostics: RenderDiagnostics,
    ) -> Optional[ObjectRenderError]:
        """Append the object's operations; failures come back as values."""
        try:
            if isinstance(obj, TextObject):
                if obj.font and obj.font not in document.fonts:
                    diagnostics.missing_resources.append(f"font:{obj.font}")
                    LOGGER.debug("Unknown font %s on object %s; using the default font", obj.font, obj.id)
                operations: List[DrawOp] = render_text_object(obj, fonts.resolve(obj.font), space)
            elif isinstance(obj, PathObject):
                operations = render_path_object(obj, space)
            elif isinstance(obj, ImageObject):
                resource = document.images.get(obj.resource_id)
                operations = render_image_object(obj, resource, package, space, self._options.dpi)
            else:
                raise TypeError(f"Unknown page object: {obj!r}")
        except ResourceMissError as exc:
            LOGGER.warning("Object %s on page %d: %s", obj.id, page.index, exc)
            diagnostics.missing_resources.append(f"{exc.kind}:{exc.resource_id}")
            return None
        except ObjectRenderError as exc:
            exc.page_index = page.index
            exc.object_id = obj.id
            return exc
        except Exception as exc:
            return ObjectRenderError(str(exc), page_index=page.index, object_id=obj.id)

        drawing.operations.extend(operations)
        return None

    @staticmethod
    def _watermark(page_width: float, fonts: FontResolver) -> List[DrawOp]:
        font_name = fonts.builtin(WATERMARK_FONT)
        text_width = pdfmetrics.stringWidth(WATERMARK_TEXT, font_name, WATERMARK_SIZE)
        return [
            SaveState(),
            SetAlpha(fill=WATERMARK_OPACITY),
            SetFillColor((WATERMARK_GRAY, WATERMARK_GRAY, WATERMARK_GRAY)),
            DrawText(
                WATERMARK_TEXT,
                page_width - text_width - WATERMARK_MARGIN,
                WATERMARK_MARGIN,
                font_name,
                WATERMARK_SIZE,
            ),
            RestoreState(),
        ]
