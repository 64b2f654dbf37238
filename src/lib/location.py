"""
Source location tracking

The XML tokenizer reports positions as byte offsets into the UTF-8 encoded
document. LocationTracker converts them to 1-based line/column pairs with a
forward-only scan, so each lookup costs only the distance travelled since the
previous one.
"""

from typing import Optional

from .errors import Position, SourceRange


class LocationTracker:
    """
    Convert byte offsets to line/column positions.

    Args:
        source: The document text

    Example:
        >>> tracker = LocationTracker('<Page>\\n  <Label/>\\n</Page>')
        >>> tracker.position_get(9)
        Position(line=2, column=3)
    """

    def __init__(self, source: str) -> None:
        self.data: bytes = source.encode('utf-8')
        self.line: int = 1
        self.column: int = 1
        self.index: int = 0
        self.current_start: Optional[int] = None

    def position_get(self, index: int) -> Position:
        """
        Position of a byte offset.

        Raises:
            ValueError: If index moves backwards
        """
        if index < self.index:
            raise ValueError('Source indices must be monotonic')

        while self.index < index and self.index < len(self.data):
            byte = self.data[self.index]
            if byte == 0x0A:
                self.line += 1
                self.column = 1
            elif byte & 0xC0 != 0x80:
                # count characters, not UTF-8 continuation bytes
                self.column += 1
            self.index += 1

        return Position(self.line, self.column)

    def tagEnd_find(self, start: int) -> int:
        """Offset of the '>' that ends the tag starting at start, quotes respected"""
        quote = None
        for offset in range(start, len(self.data)):
            byte = self.data[offset]
            if quote is not None:
                if byte == quote:
                    quote = None
            elif byte in (0x22, 0x27):
                quote = byte
            elif byte == 0x3E:
                return offset
        return max(len(self.data) - 1, start)

    def cursor_set(self, index: int) -> None:
        """Record the byte offset of the tag currently being processed"""
        self.current_start = index

    def range_current(self) -> Optional[SourceRange]:
        """Range of the tag at the cursor, or None before the first tag"""
        if self.current_start is None:
            return None
        start_index = self.current_start
        end_index = self.tagEnd_find(start_index)
        if start_index < self.index:
            # a report for an earlier tag; rescan from the beginning
            self.line, self.column, self.index = 1, 1, 0
        start = self.position_get(start_index)
        end = self.position_get(end_index)
        return SourceRange(start, end)
