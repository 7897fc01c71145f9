"""Aggregate model: document, pages, layers and resource tables."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ofd_renderer.model.elements import Box, PageObject


@dataclass(slots=True)
class FontDescriptor:
    """Font declared in a resource manifest."""

    id: str
    name: str
    family_name: Optional[str] = None
    charset: Optional[str] = None
    italic: bool = False
    bold: bool = False
    serif: bool = False
    fixed_width: bool = False
    font_file: Optional[str] = None


@dataclass(slots=True)
class ImageResource:
    id: str
    format: str
    path: str


@dataclass(slots=True)
class Layer:
    """Ordered objects of one content layer; ``type`` is advisory."""

    objects: List[PageObject] = field(default_factory=list)
    id: Optional[str] = None
    type: Optional[str] = None
    draw_param: Optional[str] = None


@dataclass(slots=True)
class Page:
    id: str
    index: int
    area: Box
    layers: List[Layer] = field(default_factory=list)
    template_id: Optional[str] = None


@dataclass(slots=True)
class Document:
    """Parsed OFD document that renderers consume."""

    physical_box: Box
    fonts: Dict[str, FontDescriptor] = field(default_factory=dict)
    images: Dict[str, ImageResource] = field(default_factory=dict)
    pages: List[Page] = field(default_factory=list)
    base_path: str = ""
    doc_root: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)
