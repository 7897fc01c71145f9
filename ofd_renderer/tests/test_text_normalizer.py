"""Test cases for text code normalization."""

import unittest

from ofd_renderer.utils.text_normalizer import TextNormalizer, normalize_text_code


class TextNormalizerTest(unittest.TestCase):
    """Entity decoding and line break removal."""

    def setUp(self):
        self.normalizer = TextNormalizer()

    def test_entity_decoding(self):
        test_cases = [
            ('&lt;tag&gt;', '<tag>'),
            ('a&amp;b', 'a&b'),
            ('x&nbsp;y', 'x y'),
            ('&quot;q&quot; &apos;s&apos;', '"q" \'s\''),
            ('&copy; 2024', '© 2024'),
        ]
        for input_text, expected in test_cases:
            self.assertEqual(self.normalizer.normalize_text(input_text), expected, f"Failed for input: {input_text!r}")

    def test_entities_decode_once(self):
        """A decoded ampersand does not start a new entity."""
        self.assertEqual(self.normalizer.normalize_text('&amp;lt;'), '&lt;')

    def test_newlines_are_removed(self):
        self.assertEqual(self.normalizer.normalize_text('line\r\none\nmore'), 'lineonemore')

    def test_none_and_empty(self):
        self.assertEqual(normalize_text_code(None), '')
        self.assertEqual(normalize_text_code(''), '')


if __name__ == "__main__":
    unittest.main()
