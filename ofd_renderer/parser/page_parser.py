"""Parse page content XML into layers of typed page objects."""
from __future__ import annotations

import math
from typing import Callable, Dict, Iterator, List, Optional
from xml.etree import ElementTree as ET

from ofd_renderer.model.document_model import Layer, Page
from ofd_renderer.model.elements import (
    Box,
    Color,
    ImageObject,
    Matrix,
    PageObject,
    PathObject,
    TextObject,
    TextRun,
)
from ofd_renderer.parser.path_parser import parse_abbreviated_data
from ofd_renderer.utils.logger import get_logger
from ofd_renderer.utils.text_normalizer import normalize_text_code
from ofd_renderer.utils.xml_utils import (
    element_text,
    find_child,
    find_children,
    find_path,
    get_attr,
    get_bool_attr,
    get_float_attr,
    local_name,
)

LOGGER = get_logger(__name__)

JOIN_STYLES = {"Miter": "miter", "Round": "round", "Bevel": "bevel"}
CAP_STYLES = {"Butt": "butt", "Round": "round", "Square": "square"}
# A text code never carries more glyphs than this.
MAX_DELTA_REPEAT = 65536


def parse_delta_values(value: Optional[str]) -> List[float]:
    """Expand a DeltaX/DeltaY attribute.

    ``g <count> <value>`` stands for ``count`` repetitions of ``value``;
    every other token is a literal advance.
    """
    if not value:
        return []

    tokens = value.split()
    result: List[float] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token == "g":
            count = _repeat_count(tokens[index + 1]) if index + 1 < len(tokens) else 0
            delta = _to_float(tokens[index + 2]) if index + 2 < len(tokens) else 0.0
            result.extend([delta] * count)
            index += 3
        else:
            result.append(_to_float(token))
            index += 1
    return result


def _to_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return 0.0


def _repeat_count(token: str) -> int:
    """Repetition count of a ``g`` group; unusable counts repeat nothing."""
    count = _to_float(token)
    if not math.isfinite(count) or count <= 0:
        return 0
    return min(int(count), MAX_DELTA_REPEAT)


def parse_color(element: Optional[ET.Element]) -> Optional[Color]:
    """Read a ``FillColor``/``StrokeColor`` element."""
    if element is None:
        return None
    value = get_attr(element, "Value")
    if value is None:
        value = element_text(element)
    return Color(
        value=value,
        alpha=get_float_attr(element, "Alpha"),
        color_space=get_attr(element, "ColorSpace"),
    )


class PageParser:
    """Transforms one page content file into a :class:`Page`."""

    def __init__(self) -> None:
        self._object_parsers: Dict[str, Callable[[ET.Element], PageObject]] = {
            "TextObject": self._parse_text_object,
            "PathObject": self._parse_path_object,
            "ImageObject": self._parse_image_object,
        }

    def parse(self, root: Optional[ET.Element], page_id: str, index: int, default_area: Box) -> Page:
        """Parse the page root element; a missing root yields an empty page."""
        if root is None:
            return Page(id=page_id, index=index, area=default_area)

        area = default_area
        physical_box = find_path(root, "Area", "PhysicalBox")
        if physical_box is not None and element_text(physical_box):
            area = Box.parse(element_text(physical_box))

        template = find_child(root, "Template")
        template_id = get_attr(template, "TemplateID")

        layer_elements = find_children(find_child(root, "Content"), "Layer")
        if not layer_elements:
            layer_elements = find_children(root, "Layer")

        layers = [self._parse_layer(layer_el) for layer_el in layer_elements]
        return Page(id=page_id, index=index, area=area, layers=layers, template_id=template_id)

    # ------------------------------------------------------------------
    # Layers
    def _parse_layer(self, layer_el: ET.Element) -> Layer:
        return Layer(
            objects=self._flatten_objects(layer_el),
            id=get_attr(layer_el, "ID"),
            type=get_attr(layer_el, "Type"),
            draw_param=get_attr(layer_el, "DrawParam"),
        )

    def _flatten_objects(self, layer_el: ET.Element) -> List[PageObject]:
        """Collect objects in document order, descending into PageBlocks."""
        objects: List[PageObject] = []
        stack: List[Iterator[ET.Element]] = [iter(layer_el)]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue
            if not isinstance(child.tag, str):
                continue
            tag = local_name(child.tag)
            if tag == "PageBlock":
                stack.append(iter(child))
                continue
            parser = self._object_parsers.get(tag)
            if parser is None:
                LOGGER.debug("Skipping unsupported layer element: %s", tag)
                continue
            objects.append(parser(child))
        return objects

    # ------------------------------------------------------------------
    # Objects
    def _parse_text_object(self, obj: ET.Element) -> TextObject:
        size = get_float_attr(obj, "Size")
        return TextObject(
            id=get_attr(obj, "ID") or "",
            boundary=Box.parse(get_attr(obj, "Boundary")),
            font=get_attr(obj, "Font") or "",
            size=10.0 if size is None else size,
            fill_color=parse_color(find_child(obj, "FillColor")),
            stroke_color=parse_color(find_child(obj, "StrokeColor")),
            weight=get_float_attr(obj, "Weight"),
            italic=get_bool_attr(obj, "Italic"),
            ctm=Matrix.parse(get_attr(obj, "CTM")),
            alpha=get_float_attr(obj, "Alpha"),
            text_runs=self._parse_text_runs(obj),
        )

    def _parse_text_runs(self, obj: ET.Element) -> List[TextRun]:
        runs: List[TextRun] = []
        for code in find_children(obj, "TextCode"):
            text = normalize_text_code("".join(code.itertext()))
            if not text:
                continue
            runs.append(
                TextRun(
                    text=text,
                    x=get_float_attr(code, "X"),
                    y=get_float_attr(code, "Y"),
                    delta_x=parse_delta_values(get_attr(code, "DeltaX")),
                    delta_y=parse_delta_values(get_attr(code, "DeltaY")),
                )
            )
        return runs

    def _parse_path_object(self, obj: ET.Element) -> PathObject:
        data_el = find_child(obj, "AbbreviatedData")
        abbreviated = "".join(data_el.itertext()).strip() if data_el is not None else ""
        fill_color = parse_color(find_child(obj, "FillColor"))
        stroke_color = parse_color(find_child(obj, "StrokeColor"))

        dash_pattern = None
        dash_attr = get_attr(obj, "DashPattern")
        if dash_attr:
            dash_pattern = [_to_float(token) for token in dash_attr.split()]

        return PathObject(
            id=get_attr(obj, "ID") or "",
            boundary=Box.parse(get_attr(obj, "Boundary")),
            abbreviated_data=abbreviated,
            commands=parse_abbreviated_data(abbreviated),
            fill_color=fill_color,
            stroke_color=stroke_color,
            line_width=get_float_attr(obj, "LineWidth"),
            ctm=Matrix.parse(get_attr(obj, "CTM")),
            fill=get_attr(obj, "Fill") != "false" and fill_color is not None,
            stroke=get_attr(obj, "Stroke") != "false",
            dash_pattern=dash_pattern,
            dash_offset=get_float_attr(obj, "DashOffset"),
            join=JOIN_STYLES.get(get_attr(obj, "Join") or ""),
            cap=CAP_STYLES.get(get_attr(obj, "Cap") or ""),
            miter_limit=get_float_attr(obj, "MiterLimit"),
            alpha=get_float_attr(obj, "Alpha"),
        )

    def _parse_image_object(self, obj: ET.Element) -> ImageObject:
        return ImageObject(
            id=get_attr(obj, "ID") or "",
            boundary=Box.parse(get_attr(obj, "Boundary")),
            resource_id=get_attr(obj, "ResourceID") or "",
            ctm=Matrix.parse(get_attr(obj, "CTM")),
            alpha=get_float_attr(obj, "Alpha"),
        )
