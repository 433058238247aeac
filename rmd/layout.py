"""
Word-wrapping and scrolling over a rendered document.

Two coordinate spaces meet here: *source* indices address ``Line`` values,
*wrapped* offsets address display rows. ``fragment_count`` and ``wrap_line``
share ``_wrap_words``, so the row counts used for scrolling always agree
with what gets painted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from rich.cells import cell_len

from .markup import Line, Plain, Segment

logger = logging.getLogger(__name__)

WHEEL_STEP = 3


class WrapWidth(str, Enum):
    CHARS_80 = "Chars80"
    CHARS_120 = "Chars120"
    NO_WRAP = "NoWrap"

    @property
    def width(self) -> Optional[int]:
        return {WrapWidth.CHARS_80: 80, WrapWidth.CHARS_120: 120}.get(self)

    @property
    def display_name(self) -> str:
        return {
            WrapWidth.CHARS_80: "80 characters",
            WrapWidth.CHARS_120: "120 characters",
            WrapWidth.NO_WRAP: "No wrap",
        }[self]

    def next(self) -> "WrapWidth":
        order = list(WrapWidth)
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class Fragment:
    """One display row.

    ``text`` is ``None`` when the row is the whole source line with its own
    segment styling; otherwise it is a piece of the wrapped plain text, drawn
    in the line's base style.
    """

    line: Line
    source_index: int
    is_first: bool
    text: Optional[str] = None

    @property
    def segments(self) -> tuple[Segment, ...]:
        if self.text is None:
            return self.line.segments
        return (Plain(self.text),)

    def plain_text(self) -> str:
        return self.line.plain_text() if self.text is None else self.text


# ============================================================================
# Wrapping
# ============================================================================

def _needs_wrap(line: Line, width: Optional[int]) -> Optional[str]:
    """Flattened text of ``line`` if it must be word-wrapped, else ``None``."""
    if width is None or line.is_blank or line.is_table:
        return None
    text = line.plain_text()
    if cell_len(text) <= width:
        return None
    return text


def _wrap_words(text: str, width: int) -> list[str]:
    """Greedy word wrap; a word wider than ``width`` gets a row of its own."""
    rows: list[str] = []
    current = ""
    current_len = 0
    for word in text.split():
        word_len = cell_len(word)
        if not current:
            current, current_len = word, word_len
        elif current_len + 1 + word_len <= width:
            current += " " + word
            current_len += 1 + word_len
        else:
            rows.append(current)
            current, current_len = word, word_len
    if current:
        rows.append(current)
    return rows or [""]


def wrap_line(line: Line, width: Optional[int], source_index: int = 0) -> list[Fragment]:
    text = _needs_wrap(line, width)
    if text is None:
        return [Fragment(line, source_index, True)]
    return [
        Fragment(line, source_index, i == 0, row)
        for i, row in enumerate(_wrap_words(text, width))
    ]


def fragment_count(line: Line, width: Optional[int]) -> int:
    text = _needs_wrap(line, width)
    if text is None:
        return 1
    return len(_wrap_words(text, width))


def wrapped_count(lines: Sequence[Line], width: Optional[int]) -> int:
    """Total number of display rows for ``lines``."""
    if width is None:
        return len(lines)
    return sum(fragment_count(line, width) for line in lines)


def source_to_wrapped_offset(lines: Sequence[Line], width: Optional[int], source_index: int) -> int:
    """Display row where source line ``source_index`` starts.

    An index past the end maps to the total row count.
    """
    offset = 0
    for index, line in enumerate(lines):
        if index == source_index:
            return offset
        offset += fragment_count(line, width)
    return offset


def wrap_window(lines: Sequence[Line], width: Optional[int], scroll_offset: int, height: int) -> list[Fragment]:
    """Rows ``[scroll_offset, scroll_offset + height)`` of the wrapped document."""
    if height <= 0:
        return []
    end = scroll_offset + height
    window: list[Fragment] = []
    row = 0
    for index, line in enumerate(lines):
        count = fragment_count(line, width)
        if row + count > scroll_offset:
            for fragment in wrap_line(line, width, index):
                if scroll_offset <= row < end:
                    window.append(fragment)
                row += 1
        else:
            row += count
        if row >= end:
            break
    return window


def max_scroll(lines: Sequence[Line], width: Optional[int], height: int) -> int:
    return max(0, wrapped_count(lines, width) - max(0, height))


# ============================================================================
# Viewport
# ============================================================================

class Viewport:
    """Scroll state of one document.

    ``offset`` is kept within ``[0, max(0, total_rows - height)]`` after
    every change.
    """

    def __init__(self, lines: Sequence[Line] = (), width: Optional[int] = None, height: int = 20):
        self.lines: Sequence[Line] = lines
        self.width = width
        self.height = max(0, height)
        self.offset = 0

    @property
    def total_rows(self) -> int:
        return wrapped_count(self.lines, self.width)

    @property
    def max_offset(self) -> int:
        return max_scroll(self.lines, self.width, self.height)

    def clamp(self) -> None:
        self.offset = min(max(0, self.offset), self.max_offset)

    def set_lines(self, lines: Sequence[Line]) -> None:
        self.lines = lines
        self.offset = 0

    def set_width(self, width: Optional[int]) -> None:
        self.width = width
        self.clamp()

    def set_height(self, height: int) -> None:
        self.height = max(0, height)
        self.clamp()

    def scroll_to(self, offset: int) -> None:
        self.offset = offset
        self.clamp()

    def scroll_by(self, delta: int) -> None:
        self.scroll_to(self.offset + delta)

    def scroll_to_top(self) -> None:
        self.offset = 0

    def scroll_to_bottom(self) -> None:
        self.offset = self.max_offset

    def page_down(self) -> None:
        self.scroll_by(self.height)

    def page_up(self) -> None:
        self.scroll_by(-self.height)

    def half_page_down(self) -> None:
        self.scroll_by(self.height // 2)

    def half_page_up(self) -> None:
        self.scroll_by(-(self.height // 2))

    def center_on(self, source_index: int) -> None:
        """Scroll so that source line ``source_index`` sits mid-viewport."""
        target = source_to_wrapped_offset(self.lines, self.width, source_index)
        self.scroll_to(max(0, target - self.height // 2))
        logger.debug("centered on source line %d (row %d, offset %d)", source_index, target, self.offset)

    def window(self) -> list[Fragment]:
        return wrap_window(self.lines, self.width, self.offset, self.height)
