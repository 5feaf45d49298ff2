"""
Coordinate transformation utilities for the Coral language server.

Pattern matches are found as string offsets; the protocol addresses text by
line and character, where characters are counted in UTF-16 code units.
"""

import re
from bisect import bisect_right
from typing import List

from lsprotocol import types


_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def utf16_length(text: str) -> int:
    """Number of UTF-16 code units needed to encode ``text``."""
    return len(text) + sum(1 for char in text if ord(char) > 0xFFFF)


class CoordinateTransformer:
    """Converts string offsets of one document text into protocol positions."""

    def __init__(self, text: str):
        self.text = text
        self._line_starts: List[int] = [0]
        for match in _LINE_BREAK.finditer(text):
            self._line_starts.append(match.end())

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def position_at(self, offset: int) -> types.Position:
        """
        Convert a 0-based string offset to a Position.

        Offsets outside the text are clamped to its bounds.

        Example:
            For text "AB\\nCD", offset 3 points to 'C' and returns
            Position(line=1, character=0)
        """
        offset = max(0, min(offset, len(self.text)))

        # Binary search for the line containing the offset
        line = bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[line]
        character = utf16_length(self.text[line_start:offset])

        return types.Position(line=line, character=character)

    def range_at(self, start: int, end: int) -> types.Range:
        """Convert a ``[start, end)`` offset span to a Range."""
        return types.Range(start=self.position_at(start), end=self.position_at(end))
