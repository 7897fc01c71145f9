"""Test cases for building the document model from OFD archives."""

import unittest
from unittest import mock

from ofd_renderer.model.elements import ImageObject, PathObject, TextObject
from ofd_renderer.parser.document_parser import DocumentParser
from ofd_renderer.parser.ofd_loader import OfdPackage
from ofd_renderer.parser.page_parser import PageParser
from ofd_renderer.tests.ofd_fixtures import (
    DOCUMENT_XML,
    ENTRY_XML,
    NS,
    build_ofd,
    default_parts,
    page_xml,
)
from ofd_renderer.utils.errors import FatalFormatError


def parse_parts(parts):
    return DocumentParser(OfdPackage.load(build_ofd(parts))).parse()


class DocumentParserTest(unittest.TestCase):
    """Entry, document, resource and page descriptors."""

    def test_parses_minimal_document(self):
        """A complete archive yields pages, resources and metadata."""
        document = parse_parts(default_parts())

        self.assertEqual(document.doc_root, "Doc_0/Document.xml")
        self.assertEqual(document.base_path, "Doc_0")
        self.assertEqual((document.physical_box.width, document.physical_box.height), (210.0, 297.0))
        self.assertEqual(document.metadata["Title"], "Invoice")
        self.assertEqual(document.metadata["Author"], "Finance")
        self.assertEqual(len(document.pages), 1)

        page = document.pages[0]
        self.assertEqual(page.id, "1")
        self.assertEqual(len(page.layers), 1)
        text = page.layers[0].objects[0]
        self.assertIsInstance(text, TextObject)
        self.assertEqual(text.font, "3")
        self.assertEqual(text.size, 5.0)
        self.assertEqual(text.text_runs[0].text, "Hello")

    def test_resources_honor_base_location(self):
        """Font and image paths resolve under the manifest's BaseLoc."""
        document = parse_parts(default_parts())

        self.assertEqual(document.fonts["3"].name, "SimSun")
        self.assertTrue(document.fonts["4"].bold)
        self.assertEqual(document.images["5"].path, "Doc_0/Res/image_5.png")
        self.assertEqual(document.images["5"].format, "PNG")
        self.assertNotIn("6", document.images)

    def test_missing_entry_is_fatal(self):
        """An archive without OFD.xml cannot be parsed."""
        parts = default_parts()
        del parts["OFD.xml"]
        with self.assertRaises(FatalFormatError):
            parse_parts(parts)

    def test_missing_document_descriptor_is_fatal(self):
        """DocRoot must point at an existing document descriptor."""
        parts = default_parts()
        del parts["Doc_0/Document.xml"]
        with self.assertRaises(FatalFormatError):
            parse_parts(parts)

    def test_missing_doc_root_is_fatal(self):
        """DocBody without DocRoot is rejected."""
        parts = default_parts()
        parts["OFD.xml"] = ENTRY_XML.replace("<ofd:DocRoot>Doc_0/Document.xml</ofd:DocRoot>", "")
        with self.assertRaises(FatalFormatError):
            parse_parts(parts)

    def test_entry_found_by_scan(self):
        """A nested entry descriptor is discovered by filename."""
        parts = default_parts()
        entry = parts.pop("OFD.xml")
        parts["bundle/OFD.xml"] = entry.replace("Doc_0/Document.xml", "../Doc_0/Document.xml")
        document = parse_parts(parts)
        self.assertEqual(document.doc_root, "Doc_0/Document.xml")

    def test_missing_resource_manifest_is_tolerated(self):
        """A dangling resource reference only loses its resources."""
        parts = default_parts()
        del parts["Doc_0/PublicRes.xml"]
        document = parse_parts(parts)
        self.assertEqual(document.fonts, {})
        self.assertIn("5", document.images)

    def test_missing_page_content_gives_empty_page(self):
        """Pages whose content is absent are kept but empty."""
        parts = default_parts()
        del parts["Doc_0/Pages/Page_0/Content.xml"]
        document = parse_parts(parts)
        self.assertEqual(len(document.pages), 1)
        self.assertEqual(document.pages[0].layers, [])

    def test_unparseable_page_content_gives_empty_page(self):
        """A page whose content cannot be parsed is kept but empty."""
        original = PageParser.parse

        def broken_content(parser, root, *args):
            if root is not None:
                raise ValueError("broken content")
            return original(parser, root, *args)

        with mock.patch.object(PageParser, "parse", autospec=True, side_effect=broken_content):
            document = parse_parts(default_parts())
        self.assertEqual(len(document.pages), 1)
        self.assertEqual(document.pages[0].layers, [])

    def test_page_without_base_location_is_skipped(self):
        """Page references without BaseLoc are ignored."""
        parts = default_parts()
        parts["Doc_0/Document.xml"] = DOCUMENT_XML.replace(
            '<ofd:Page ID="1" BaseLoc="Pages/Page_0/Content.xml"/>',
            '<ofd:Page ID="0"/><ofd:Page ID="1" BaseLoc="Pages/Page_0/Content.xml"/>',
        )
        document = parse_parts(parts)
        self.assertEqual([page.id for page in document.pages], ["1"])

    def test_not_a_zip_is_fatal(self):
        """Arbitrary bytes are not an OFD archive."""
        with self.assertRaises(FatalFormatError):
            OfdPackage.load(b"definitely not a zip")


class PageParserTest(unittest.TestCase):
    """Page content descriptors."""

    def test_page_blocks_flatten_in_document_order(self):
        """Objects nested in PageBlocks keep their encounter order."""
        body = """
          <ofd:PathObject ID="11" Boundary="0 0 10 10"><ofd:AbbreviatedData>M 0 0 L 1 1</ofd:AbbreviatedData></ofd:PathObject>
          <ofd:PageBlock ID="12">
            <ofd:TextObject ID="13" Boundary="0 0 10 10" Font="3"><ofd:TextCode X="0" Y="0">A</ofd:TextCode></ofd:TextObject>
            <ofd:PageBlock ID="14">
              <ofd:ImageObject ID="15" Boundary="0 0 10 10" ResourceID="5"/>
            </ofd:PageBlock>
          </ofd:PageBlock>
          <ofd:CompositeObject ID="16" Boundary="0 0 10 10"/>
          <ofd:PathObject ID="17" Boundary="0 0 10 10"><ofd:AbbreviatedData>M 0 0 L 2 2</ofd:AbbreviatedData></ofd:PathObject>
        """
        document = parse_parts(default_parts(page_xml(body)))
        objects = document.pages[0].layers[0].objects

        self.assertEqual([obj.id for obj in objects], ["11", "13", "15", "17"])
        self.assertIsInstance(objects[0], PathObject)
        self.assertIsInstance(objects[1], TextObject)
        self.assertIsInstance(objects[2], ImageObject)

    def test_path_object_attributes(self):
        """Fill needs a fill color; stroke is on unless disabled."""
        body = """
          <ofd:PathObject ID="20" Boundary="5 5 50 50" LineWidth="0.5" Join="Round" Cap="Square"
                          DashPattern="2 1" CTM="1 0 0 1 0 0" Fill="true" Stroke="false">
            <ofd:FillColor Value="0 128 255"/>
            <ofd:AbbreviatedData>M 0 0 L 10 0 L 10 10 C</ofd:AbbreviatedData>
          </ofd:PathObject>
          <ofd:PathObject ID="21" Boundary="5 5 50 50" Fill="true">
            <ofd:AbbreviatedData>M 0 0 L 1 0</ofd:AbbreviatedData>
          </ofd:PathObject>
        """
        first, second = parse_parts(default_parts(page_xml(body))).pages[0].layers[0].objects

        self.assertTrue(first.fill)
        self.assertFalse(first.stroke)
        self.assertEqual(first.line_width, 0.5)
        self.assertEqual(first.join, "round")
        self.assertEqual(first.cap, "square")
        self.assertEqual(first.dash_pattern, [2.0, 1.0])
        self.assertEqual(len(first.commands), 4)
        self.assertIsNotNone(first.ctm)

        self.assertFalse(second.fill)
        self.assertTrue(second.stroke)

    def test_page_area_overrides_physical_box(self):
        """A page-level PhysicalBox replaces the document default."""
        content = f"""<ofd:Page {NS}>
          <ofd:Area><ofd:PhysicalBox>0 0 100 150</ofd:PhysicalBox></ofd:Area>
          <ofd:Content><ofd:Layer ID="2"/></ofd:Content>
        </ofd:Page>"""
        page = parse_parts(default_parts(content)).pages[0]
        self.assertEqual((page.area.width, page.area.height), (100.0, 150.0))

    def test_text_codes_decode_entities_and_drop_empty_runs(self):
        """Leftover entity names are decoded and empty codes are dropped."""
        body = """
          <ofd:TextObject ID="30" Boundary="0 0 10 10" Font="3">
            <ofd:TextCode X="1" Y="2" DeltaX="g 2 3">a&amp;lt;b</ofd:TextCode>
            <ofd:TextCode X="1" Y="4"></ofd:TextCode>
          </ofd:TextObject>
        """
        text = parse_parts(default_parts(page_xml(body))).pages[0].layers[0].objects[0]
        self.assertEqual(len(text.text_runs), 1)
        run = text.text_runs[0]
        self.assertEqual(run.text, "a<b")
        self.assertEqual(run.delta_x, [3.0, 3.0])
        self.assertEqual((run.x, run.y), (1.0, 2.0))

    def test_non_finite_delta_counts_are_ignored(self):
        """Overflowing or NaN repeat counts do not stop the document from parsing."""
        body = """
          <ofd:TextObject ID="31" Boundary="0 0 10 10" Font="3">
            <ofd:TextCode X="0" Y="0" DeltaX="g nan 2" DeltaY="g 1e400 2">ab</ofd:TextCode>
          </ofd:TextObject>
        """
        document = parse_parts(default_parts(page_xml(body)))
        self.assertEqual(len(document.pages), 1)
        run = document.pages[0].layers[0].objects[0].text_runs[0]
        self.assertEqual(run.delta_x, [])
        self.assertEqual(run.delta_y, [])

    def test_deeply_nested_page_blocks(self):
        """Nesting deeper than the interpreter recursion limit still flattens."""
        depth = 3000
        body = (
            '<ofd:PageBlock ID="40">' * depth
            + '<ofd:PathObject ID="41" Boundary="0 0 10 10"><ofd:AbbreviatedData>M 0 0 L 1 1</ofd:AbbreviatedData></ofd:PathObject>'
            + "</ofd:PageBlock>" * depth
        )
        objects = parse_parts(default_parts(page_xml(body))).pages[0].layers[0].objects
        self.assertEqual([obj.id for obj in objects], ["41"])


if __name__ == "__main__":
    unittest.main()
