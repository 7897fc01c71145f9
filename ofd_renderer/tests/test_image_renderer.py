"""Test cases for image decoding and placement."""

import unittest

from ofd_renderer.model.document_model import ImageResource
from ofd_renderer.model.elements import Box, ImageObject
from ofd_renderer.parser.ofd_loader import OfdPackage
from ofd_renderer.renderer.geometry import PageSpace
from ofd_renderer.renderer.image_renderer import decode_image, render_image_object
from ofd_renderer.renderer.operations import DrawImage, SetAlpha
from ofd_renderer.tests.ofd_fixtures import png_bytes
from ofd_renderer.utils.errors import ObjectRenderError, ResourceMissError
from ofd_renderer.utils.units import MM_TO_PT


class DecodeImageTest(unittest.TestCase):
    """Pillow decoding."""

    def test_decodes_png(self):
        image = decode_image(png_bytes((8, 6)), "PNG")
        self.assertEqual(image.getSize(), (8, 6))

    def test_downsamples_to_dpi(self):
        """Images denser than the requested dpi are shrunk."""
        image = decode_image(png_bytes((400, 400)), "PNG", dpi=72, width_pt=100, height_pt=100)
        self.assertEqual(image.getSize(), (100, 100))

    def test_small_images_are_untouched(self):
        image = decode_image(png_bytes((50, 50)), "PNG", dpi=72, width_pt=100, height_pt=100)
        self.assertEqual(image.getSize(), (50, 50))

    def test_undecodable_data(self):
        with self.assertRaises(ObjectRenderError):
            decode_image(b"not an image", "PNG")


class RenderImageObjectTest(unittest.TestCase):
    """Placement of image objects."""

    def setUp(self):
        self.space = PageSpace(297)
        self.package = OfdPackage({"Doc_0/Res/a.png": png_bytes()})
        self.resource = ImageResource("5", "PNG", "Doc_0/Res/a.png")

    def test_image_fills_boundary(self):
        """The image covers its boundary rectangle, flipped to PDF space."""
        obj = ImageObject(id="i", boundary=Box(10, 20, 30, 40), resource_id="5", alpha=128)
        operations = render_image_object(obj, self.resource, self.package, self.space)

        draw = next(op for op in operations if isinstance(op, DrawImage))
        self.assertAlmostEqual(draw.x, 10 * MM_TO_PT)
        self.assertAlmostEqual(draw.y, (297 - 20 - 40) * MM_TO_PT)
        self.assertAlmostEqual(draw.width, 30 * MM_TO_PT)
        self.assertAlmostEqual(draw.height, 40 * MM_TO_PT)
        self.assertIn(SetAlpha(fill=128 / 255), operations)

    def test_missing_resource(self):
        obj = ImageObject(id="i", boundary=Box(0, 0, 10, 10), resource_id="404")
        with self.assertRaises(ResourceMissError) as ctx:
            render_image_object(obj, None, self.package, self.space)
        self.assertEqual(ctx.exception.resource_id, "404")

    def test_missing_image_bytes(self):
        obj = ImageObject(id="i", boundary=Box(0, 0, 10, 10), resource_id="5")
        resource = ImageResource("5", "PNG", "Doc_0/Res/gone.png")
        with self.assertRaises(ResourceMissError):
            render_image_object(obj, resource, self.package, self.space)


if __name__ == "__main__":
    unittest.main()
