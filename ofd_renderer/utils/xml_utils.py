"""Helper functions to work with XML namespaces and parsing."""
from __future__ import annotations

from typing import List, Optional
from xml.etree import ElementTree as ET


def parse_xml(data: bytes) -> ET.ElementTree:
    """Parse XML from raw bytes with sane defaults."""
    return ET.ElementTree(ET.fromstring(data))


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` or ``prefix:`` qualifier from a tag."""
    tag = tag.split("}", 1)[-1]
    return tag.split(":", 1)[-1]


def find_children(element: Optional[ET.Element], name: str) -> List[ET.Element]:
    """Return direct children whose local tag name is ``name``."""
    if element is None:
        return []
    return [child for child in element if isinstance(child.tag, str) and local_name(child.tag) == name]


def find_child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    """Return the first direct child with the given local tag name."""
    if element is None:
        return None
    for child in element:
        if isinstance(child.tag, str) and local_name(child.tag) == name:
            return child
    return None


def find_path(element: Optional[ET.Element], *names: str) -> Optional[ET.Element]:
    """Walk down a chain of local names, returning ``None`` on the first miss."""
    current = element
    for name in names:
        current = find_child(current, name)
        if current is None:
            return None
    return current


def element_text(element: Optional[ET.Element]) -> Optional[str]:
    """Return the trimmed text of an element, or ``None`` when empty."""
    if element is None or element.text is None:
        return None
    text = element.text.strip()
    return text or None


def find_text(element: Optional[ET.Element], *names: str) -> Optional[str]:
    """Return trimmed text from the element reached by ``names``."""
    return element_text(find_path(element, *names))


def get_attr(element: Optional[ET.Element], name: str) -> Optional[str]:
    """Look up an attribute by local name, qualified or not."""
    if element is None:
        return None
    value = element.attrib.get(name)
    if value is not None:
        return value
    for key, candidate in element.attrib.items():
        if local_name(key) == name:
            return candidate
    return None


def get_bool_attr(element: Optional[ET.Element], name: str, default: bool = False) -> bool:
    value = get_attr(element, name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def get_float_attr(element: Optional[ET.Element], name: str) -> Optional[float]:
    value = get_attr(element, name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
