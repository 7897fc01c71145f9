"""
Text normalization utilities for OFD text codes.

The XML parser already decodes character references once; producers that
double-escape their content leave entity names behind, which are decoded
here. Line breaks inside a text code are layout noise and are removed.
"""

import re
from typing import Optional


class TextNormalizer:
    """Normalizes the literal content of ``TextCode`` elements."""

    # Entity names left over from double-escaped producers
    ENTITIES = {
        '&lt;': '<',
        '&gt;': '>',
        '&amp;': '&',
        '&nbsp;': ' ',
        '&quot;': '"',
        '&apos;': "'",
        '&copy;': '©',
    }

    ENTITY_PATTERN = re.compile('|'.join(re.escape(name) for name in ENTITIES))

    NEWLINE_PATTERN = re.compile(r'\r?\n')

    def normalize_text(self, text: str) -> str:
        """Decode leftover entities and strip line breaks."""
        if not text:
            return text
        decoded = self.ENTITY_PATTERN.sub(lambda match: self.ENTITIES[match.group(0)], text)
        return self.NEWLINE_PATTERN.sub('', decoded)


def normalize_text_code(text: Optional[str]) -> str:
    """Convenience wrapper used by the page parser."""
    if text is None:
        return ""
    return TextNormalizer().normalize_text(text)
