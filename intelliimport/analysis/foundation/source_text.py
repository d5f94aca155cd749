"""
Line/character bookkeeping for a source file.

``ast`` reports columns as UTF-8 byte offsets while edits are expressed in
characters; ``SourceText`` converts between the two.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import List

from .models import Position

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class SourceText:
    def __init__(self, text: str):
        self.text = text
        self.lines: List[str] = _LINE_BREAK_RE.split(text)
        self._line_starts: List[int] = [0]
        for match in _LINE_BREAK_RE.finditer(text):
            self._line_starts.append(match.end())
        breaks = Counter(_LINE_BREAK_RE.findall(text))
        self.eol: str = breaks.most_common(1)[0][0] if breaks else "\n"

    def position_from_ast(self, lineno: int, col_offset: int) -> Position:
        """Convert a 1-based ``lineno`` and byte ``col_offset`` to a Position."""
        line_index = lineno - 1
        if line_index < 0 or line_index >= len(self.lines):
            return Position(max(line_index, 0), col_offset)
        line_bytes = self.lines[line_index].encode("utf-8")
        character = len(line_bytes[:col_offset].decode("utf-8", errors="ignore"))
        return Position(line_index, character)

    def offset_at(self, position: Position) -> int:
        if position.line >= len(self._line_starts):
            return len(self.text)
        start = self._line_starts[position.line]
        return min(start + position.character, len(self.text))

    def line_end(self, line: int) -> Position:
        return Position(line, len(self.lines[line]) if line < len(self.lines) else 0)
