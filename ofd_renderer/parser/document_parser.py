"""Build a typed :class:`Document` from an OFD package."""
from __future__ import annotations

import posixpath
from typing import Dict, List, Optional
from xml.etree import ElementTree as ET

from ofd_renderer.model.document_model import Document, FontDescriptor, ImageResource, Page
from ofd_renderer.model.elements import Box
from ofd_renderer.parser.ofd_loader import OfdPackage, resolve_path
from ofd_renderer.parser.page_parser import PageParser
from ofd_renderer.parser.resource_parser import ResourceParser
from ofd_renderer.utils.errors import FatalFormatError
from ofd_renderer.utils.logger import get_logger
from ofd_renderer.utils.xml_utils import element_text, find_child, find_children, find_text, get_attr

LOGGER = get_logger(__name__)

ENTRY_CANDIDATES = ("OFD.xml", "ofd.xml", "OFD/OFD.xml")
DOC_INFO_FIELDS = ("DocID", "Title", "Author", "Subject", "Creator", "CreationDate", "ModDate")


class DocumentParser:
    """Walks OFD.xml → Document.xml → resources → pages."""

    def __init__(self, package: OfdPackage) -> None:
        self._package = package
        self._pages = PageParser()

    def parse(self) -> Document:
        """Parse the first document of the archive."""
        entry_path = self.find_entry()
        if entry_path is None:
            raise FatalFormatError("Invalid OFD file: OFD.xml not found in archive")
        entry_tree = self._package.get_xml_part(entry_path)
        if entry_tree is None:
            raise FatalFormatError(f"Invalid OFD file: {entry_path} is not readable XML")

        body = find_child(entry_tree.getroot(), "DocBody")
        if body is None:
            raise FatalFormatError("Invalid OFD file: DocBody not found")

        doc_root_text = find_text(body, "DocRoot")
        if not doc_root_text:
            raise FatalFormatError("Invalid OFD file: DocRoot path not found")
        doc_root = resolve_path(entry_path, doc_root_text)

        document_tree = self._package.get_xml_part(doc_root)
        if document_tree is None:
            raise FatalFormatError(f"Document XML not found at: {doc_root}")
        document_el = document_tree.getroot()

        common = find_child(document_el, "CommonData")
        physical_box = Box.parse(find_text(common, "PageArea", "PhysicalBox"))

        fonts: Dict[str, FontDescriptor] = {}
        images: Dict[str, ImageResource] = {}
        self._parse_resources(common, doc_root, fonts, images)

        pages = self._parse_pages(document_el, doc_root, physical_box)
        LOGGER.debug("Parsed %d pages, %d fonts, %d images", len(pages), len(fonts), len(images))

        return Document(
            physical_box=physical_box,
            fonts=fonts,
            images=images,
            pages=pages,
            base_path=posixpath.dirname(doc_root),
            doc_root=doc_root,
            metadata=self._parse_doc_info(body),
        )

    def find_entry(self) -> Optional[str]:
        """Locate OFD.xml at a conventional path, else by filename scan."""
        for candidate in ENTRY_CANDIDATES:
            if self._package.read_bytes(candidate) is not None:
                return candidate
        for name in self._package.names():
            lowered = name.lower()
            if lowered.endswith("ofd.xml") and "document" not in lowered:
                return name
        return None

    # ------------------------------------------------------------------
    # Sections
    def _parse_resources(
        self,
        common: Optional[ET.Element],
        doc_root: str,
        fonts: Dict[str, FontDescriptor],
        images: Dict[str, ImageResource],
    ) -> None:
        parser = ResourceParser(fonts, images)
        references = find_children(common, "PublicRes") + find_children(common, "DocumentRes")
        for reference in references:
            location = element_text(reference)
            if not location:
                continue
            manifest_path = resolve_path(doc_root, location)
            tree = self._package.get_xml_part(manifest_path)
            if tree is None:
                LOGGER.warning("Resource manifest missing: %s", manifest_path)
                continue
            parser.parse(tree, manifest_path)

    def _parse_pages(self, document_el: ET.Element, doc_root: str, physical_box: Box) -> List[Page]:
        pages: List[Page] = []
        for index, page_ref in enumerate(find_children(find_child(document_el, "Pages"), "Page")):
            page_id = get_attr(page_ref, "ID") or str(index)
            base_loc = get_attr(page_ref, "BaseLoc")
            if not base_loc:
                LOGGER.debug("Page %s has no BaseLoc; skipping", page_id)
                continue

            page_path = resolve_path(doc_root, base_loc)
            page_tree = self._package.get_xml_part(page_path)
            if page_tree is None:
                LOGGER.warning("Page content missing or unreadable: %s", page_path)
                pages.append(self._pages.parse(None, page_id, index, physical_box))
                continue

            try:
                page = self._pages.parse(self._page_root(page_tree), page_id, index, physical_box)
            except Exception as exc:
                LOGGER.warning("Page %s content could not be parsed (%s); rendering it empty", page_path, exc)
                page = self._pages.parse(None, page_id, index, physical_box)
            pages.append(page)
        return pages

    @staticmethod
    def _page_root(tree: ET.ElementTree) -> ET.Element:
        root = tree.getroot()
        nested = find_child(root, "Page")
        return nested if nested is not None and find_child(root, "Content") is None else root

    @staticmethod
    def _parse_doc_info(body: ET.Element) -> Dict[str, str]:
        info = find_child(body, "DocInfo")
        metadata: Dict[str, str] = {}
        for field_name in DOC_INFO_FIELDS:
            value = find_text(info, field_name)
            if value:
                metadata[field_name] = value
        return metadata
