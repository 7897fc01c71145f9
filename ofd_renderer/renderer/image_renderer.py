"""Decode archive images with Pillow and place them on the page."""
from __future__ import annotations

import io
from typing import List, Optional

from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader

from ofd_renderer.model.document_model import ImageResource
from ofd_renderer.model.elements import ImageObject
from ofd_renderer.parser.ofd_loader import OfdPackage
from ofd_renderer.renderer.geometry import PageSpace
from ofd_renderer.renderer.operations import DrawImage, DrawOp, RestoreState, SaveState, SetAlpha
from ofd_renderer.utils.errors import ObjectRenderError, ResourceMissError
from ofd_renderer.utils.logger import get_logger
from ofd_renderer.utils.units import points_to_pixels

LOGGER = get_logger(__name__)

# Modes ReportLab embeds directly; everything else is converted first.
DIRECT_MODES = {"RGB", "RGBA", "L", "LA", "CMYK", "1"}


def decode_image(
    data: bytes,
    fmt: str = "",
    dpi: Optional[float] = None,
    width_pt: Optional[float] = None,
    height_pt: Optional[float] = None,
) -> ImageReader:
    """Decode ``data`` and return a ReportLab image handle.

    With ``dpi`` and a placed size, images holding more pixels than needed
    are downsampled. Raises ``ObjectRenderError`` for undecodable data.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ObjectRenderError(f"Cannot decode {fmt or 'image'} data: {exc}") from exc

    if image.mode not in DIRECT_MODES:
        image = image.convert("RGBA" if "A" in image.getbands() or "transparency" in image.info else "RGB")

    if dpi and width_pt and height_pt:
        target = (
            max(1, round(points_to_pixels(width_pt, dpi))),
            max(1, round(points_to_pixels(height_pt, dpi))),
        )
        if image.width > target[0] and image.height > target[1]:
            LOGGER.debug("Downsampling image %sx%s to fit %sx%s", image.width, image.height, *target)
            image.thumbnail(target, Image.Resampling.LANCZOS)

    return ImageReader(image)


def render_image_object(
    obj: ImageObject,
    resource: Optional[ImageResource],
    package: OfdPackage,
    space: PageSpace,
    dpi: Optional[float] = None,
) -> List[DrawOp]:
    """Place the referenced image so it fills the object's boundary."""
    if resource is None:
        raise ResourceMissError("image", obj.resource_id)

    data = package.read_bytes(resource.path)
    if data is None:
        raise ResourceMissError("image file", resource.path)

    boundary = obj.boundary
    width = space.length(boundary.width)
    height = space.length(boundary.height)
    image = decode_image(data, resource.format, dpi, width, height)

    x = space.length(boundary.x)
    y = space.length(space.height_mm - boundary.y - boundary.height)

    operations: List[DrawOp] = [SaveState()]
    if obj.alpha is not None and obj.alpha < 255:
        operations.append(SetAlpha(fill=max(obj.alpha, 0.0) / 255))
    operations.append(DrawImage(image, x, y, width, height))
    operations.append(RestoreState())
    return operations
