"""Test cases for archive access and path resolution."""

import unittest

from ofd_renderer.parser.ofd_loader import OfdPackage, normalize_part_name, resolve_path
from ofd_renderer.tests.ofd_fixtures import build_ofd


class ResolvePathTest(unittest.TestCase):
    """Archive-relative path handling."""

    def test_relative_to_descriptor_directory(self):
        self.assertEqual(resolve_path("Doc_0/Document.xml", "Pages/Page_0/Content.xml"), "Doc_0/Pages/Page_0/Content.xml")

    def test_leading_slash_is_absolute(self):
        self.assertEqual(resolve_path("Doc_0/Document.xml", "/Doc_0/Res/a.png"), "Doc_0/Res/a.png")

    def test_dot_segments_collapse(self):
        self.assertEqual(resolve_path("Doc_0/Pages/Page_0/Content.xml", "../../Res/./a.png"), "Doc_0/Res/a.png")
        self.assertEqual(resolve_path("OFD.xml", "../../Doc_0/Document.xml"), "Doc_0/Document.xml")

    def test_normalize_part_name(self):
        self.assertEqual(normalize_part_name("./Doc_0\\Res\\a.png"), "Doc_0/Res/a.png")
        self.assertEqual(normalize_part_name("/OFD.xml"), "OFD.xml")


class OfdPackageTest(unittest.TestCase):
    """ZIP container access."""

    def setUp(self):
        self.package = OfdPackage.load(
            build_ofd({"OFD.xml": "<OFD/>", "Doc_0/Res/Image.PNG": b"\x89PNG", "Doc_0/bad.xml": "<open>"})
        )

    def test_case_insensitive_fallback(self):
        """Parts are found even when the reference differs in case."""
        self.assertEqual(self.package.read_bytes("doc_0/res/image.png"), b"\x89PNG")
        self.assertIsNone(self.package.read_bytes("missing.png"))

    def test_xml_parts_are_cached(self):
        first = self.package.get_xml_part("OFD.xml")
        self.assertIs(first, self.package.get_xml_part("OFD.xml"))

    def test_malformed_xml_yields_none(self):
        self.assertIsNone(self.package.get_xml_part("Doc_0/bad.xml"))

    def test_read_text(self):
        self.assertEqual(self.package.read_text("OFD.xml"), "<OFD/>")


if __name__ == "__main__":
    unittest.main()
