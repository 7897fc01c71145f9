"""
OFD resource manifest parser

Reads ``PublicRes.xml`` / ``DocumentRes.xml`` manifests and registers the
fonts and images they declare into the document's resource tables.
"""

import posixpath
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from ..model.document_model import FontDescriptor, ImageResource
from ..utils.logger import get_logger
from ..utils.xml_utils import element_text, find_child, find_children, get_attr, get_bool_attr, local_name
from .ofd_loader import resolve_path

LOGGER = get_logger(__name__)


class ResourceParser:
    """Fills font and image tables from one resource manifest."""

    def __init__(self, fonts: Dict[str, FontDescriptor], images: Dict[str, ImageResource]):
        self.fonts = fonts
        self.images = images

    def parse(self, tree: ET.ElementTree, manifest_path: str) -> None:
        """Register every font and image declared by the manifest."""
        root = tree.getroot()
        res = root if local_name(root.tag) == "Res" else find_child(root, "Res")
        if res is None:
            LOGGER.warning("Resource manifest %s has no Res root", manifest_path)
            return

        base_file = self._base_file(manifest_path, get_attr(res, "BaseLoc"))

        for fonts_el in find_children(res, "Fonts"):
            for font_el in find_children(fonts_el, "Font"):
                font = self._parse_font(font_el, base_file)
                if font is not None:
                    self.fonts[font.id] = font

        for media_group in find_children(res, "MultiMedias"):
            for media_el in find_children(media_group, "MultiMedia"):
                image = self._parse_image(media_el, base_file)
                if image is not None:
                    self.images[image.id] = image

    def _parse_font(self, font_el: ET.Element, base_file: str) -> Optional[FontDescriptor]:
        font_id = get_attr(font_el, "ID")
        if not font_id:
            return None

        font_file = element_text(find_child(font_el, "FontFile"))
        return FontDescriptor(
            id=font_id,
            name=get_attr(font_el, "FontName") or get_attr(font_el, "FamilyName") or "unknown",
            family_name=get_attr(font_el, "FamilyName"),
            charset=get_attr(font_el, "Charset"),
            italic=get_bool_attr(font_el, "Italic"),
            bold=get_bool_attr(font_el, "Bold"),
            serif=get_bool_attr(font_el, "Serif"),
            fixed_width=get_bool_attr(font_el, "FixedWidth"),
            font_file=resolve_path(base_file, font_file) if font_file else None,
        )

    def _parse_image(self, media_el: ET.Element, base_file: str) -> Optional[ImageResource]:
        media_id = get_attr(media_el, "ID")
        media_type = get_attr(media_el, "Type")
        if not media_id:
            return None
        if media_type is not None and media_type != "Image":
            LOGGER.debug("Skipping %s multimedia resource %s", media_type, media_id)
            return None

        media_file = element_text(find_child(media_el, "MediaFile"))
        if not media_file:
            return None

        extension = posixpath.splitext(media_file)[1].lstrip(".")
        declared = get_attr(media_el, "Format")
        return ImageResource(
            id=media_id,
            format=(declared or extension or "PNG").upper(),
            path=resolve_path(base_file, media_file),
        )

    @staticmethod
    def _base_file(manifest_path: str, base_loc: Optional[str]) -> str:
        """Return a pseudo file path whose directory is the resource base."""
        if not base_loc:
            return manifest_path
        return resolve_path(manifest_path, posixpath.join(base_loc.strip(), "_"))
