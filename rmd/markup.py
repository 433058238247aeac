"""
Markdown to styled lines.

The document model is a flat list of ``Line`` values, each holding inline
``Segment`` runs plus the kind of block it came from. ``render_markdown``
walks the markdown-it token stream once and builds that list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from markdown_it import MarkdownIt
from markdown_it.token import Token
from rich.cells import cell_len

logger = logging.getLogger(__name__)

EMPTY_FILE_TEXT = "(Empty file)"
RULE_WIDTH = 40
QUOTE_PREFIX = "│ "
BULLET = "• "
TASK_MARKERS = {"[ ] ": "☐ ", "[x] ": "✓ ", "[X] ": "✓ "}


# ============================================================================
# Segments and lines
# ============================================================================

@dataclass(frozen=True)
class Plain:
    text: str


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Emphasis:
    text: str


@dataclass(frozen=True)
class Strong:
    text: str


@dataclass(frozen=True)
class Link:
    text: str
    url: str


Segment = Union[Plain, Code, Emphasis, Strong, Link]


@dataclass(frozen=True)
class Line:
    """One rendered line of a document.

    A line with no segments is a blank separator. At most one of the block
    flags is set; a heading (``heading_level > 0``) sets none of them.
    """

    segments: tuple[Segment, ...] = ()
    heading_level: int = 0
    is_code_block: bool = False
    is_blockquote: bool = False
    is_list_item: bool = False
    is_horizontal_rule: bool = False
    is_table_row: bool = False
    is_table_separator: bool = False

    @classmethod
    def plain(cls, text: str) -> "Line":
        return cls(segments=(Plain(text),))

    @classmethod
    def heading(cls, text: str, level: int) -> "Line":
        return cls(segments=(Plain(text),), heading_level=level)

    @property
    def is_blank(self) -> bool:
        return not self.segments

    @property
    def is_table(self) -> bool:
        return self.is_table_row or self.is_table_separator

    def plain_text(self) -> str:
        """Flattened text as displayed: inline code keeps its backticks."""
        return "".join(
            f"`{seg.text}`" if isinstance(seg, Code) else seg.text
            for seg in self.segments
        )

    def search_text(self) -> str:
        """Flattened text without any markup decoration."""
        return "".join(seg.text for seg in self.segments)


BLANK = Line()


# ============================================================================
# Transducer state
# ============================================================================

@dataclass
class _LineDraft:
    """The line under construction."""

    segments: list[Segment] = field(default_factory=list)
    flags: dict = field(default_factory=dict)

    def add(self, segment: Segment) -> None:
        if isinstance(segment, Plain) and not segment.text:
            return
        self.segments.append(segment)

    def freeze(self) -> Line:
        return Line(segments=tuple(self.segments), **self.flags)


@dataclass
class _ListLevel:
    ordered: bool
    counter: int = 1


@dataclass
class _Span:
    """An open inline span: ``kind`` is Emphasis, Strong or Link."""

    kind: type
    url: str = ""
    text: str = ""


@dataclass
class _PendingTable:
    """Rows of a table being parsed; emitted only once the table closes."""

    rows: list[list[str]] = field(default_factory=list)
    widths: list[int] = field(default_factory=list)
    row: Optional[list[str]] = None
    cell: Optional[str] = None

    def open_row(self) -> None:
        self.row = []

    def open_cell(self) -> None:
        self.cell = ""

    def add_text(self, text: str) -> None:
        if self.cell is not None:
            self.cell += text

    def close_cell(self) -> None:
        if self.row is not None and self.cell is not None:
            self.row.append(self.cell.strip())
        self.cell = None

    def close_row(self) -> None:
        if self.row is None:
            return
        for i, cell in enumerate(self.row):
            width = cell_len(cell)
            if i >= len(self.widths):
                self.widths.append(width)
            elif width > self.widths[i]:
                self.widths[i] = width
        self.rows.append(self.row)
        self.row = None

    def _border(self, left: str, middle: str, right: str) -> Line:
        text = left + middle.join("─" * (w + 2) for w in self.widths) + right
        return Line(segments=(Plain(text),), is_table_row=True, is_table_separator=True)

    def _row_line(self, row: list[str]) -> Line:
        cells = row + [""] * (len(self.widths) - len(row))
        text = "│" + "".join(
            f" {cell}{' ' * (width - cell_len(cell))} │"
            for cell, width in zip(cells, self.widths)
        )
        return Line(segments=(Plain(text),), is_table_row=True)

    def finish(self) -> list[Line]:
        if not self.rows or not self.widths:
            return []
        lines = [self._border("┌", "┬", "┐")]
        for i, row in enumerate(self.rows):
            lines.append(self._row_line(row))
            if i == 0:
                lines.append(self._border("├", "┼", "┤"))
        lines.append(self._border("└", "┴", "┘"))
        lines.append(BLANK)
        return lines


def _image_label(token: Token) -> str:
    return str(token.attrGet("title") or token.content or "[image]")


# ============================================================================
# Transducer
# ============================================================================

class _Transducer:
    """Single pass over the markdown-it token stream.

    Block state lives in ``lists``, ``quote_depth`` and ``table``; inline state
    in ``spans``. Each token type has one handler in ``_block_handlers`` or
    ``_inline_handlers``; token types without a handler are skipped.
    """

    def __init__(self) -> None:
        self.lines: list[Line] = []
        self.draft = _LineDraft()
        self.text = ""
        self.marker_only = False
        self.lists: list[_ListLevel] = []
        self.quote_depth = 0
        self.spans: list[_Span] = []
        self.table: Optional[_PendingTable] = None

        self._block_handlers: dict[str, Callable[[Token], None]] = {
            "heading_open": self._heading_open,
            "heading_close": self._heading_close,
            "paragraph_open": self._paragraph_open,
            "paragraph_close": self._paragraph_close,
            "inline": self._inline,
            "fence": self._code_block,
            "code_block": self._code_block,
            "bullet_list_open": self._list_open,
            "ordered_list_open": self._list_open,
            "bullet_list_close": self._list_close,
            "ordered_list_close": self._list_close,
            "list_item_open": self._item_open,
            "list_item_close": self._item_close,
            "blockquote_open": self._blockquote_open,
            "blockquote_close": self._blockquote_close,
            "hr": self._rule,
            "table_open": self._table_open,
            "table_close": self._table_close,
            "tr_open": self._on_table("open_row"),
            "tr_close": self._on_table("close_row"),
            "th_open": self._on_table("open_cell"),
            "td_open": self._on_table("open_cell"),
            "th_close": self._on_table("close_cell"),
            "td_close": self._on_table("close_cell"),
        }
        self._inline_handlers: dict[str, Callable[[Token], None]] = {
            "text": lambda child: self._add_text(child.content),
            "softbreak": lambda child: self._add_text(" "),
            "hardbreak": self._hard_break,
            "code_inline": self._code_inline,
            "em_open": lambda child: self._span_open(Emphasis),
            "strong_open": lambda child: self._span_open(Strong),
            "link_open": lambda child: self._span_open(Link, child.attrGet("href") or ""),
            "em_close": lambda child: self._span_close(Emphasis),
            "strong_close": lambda child: self._span_close(Strong),
            "link_close": lambda child: self._span_close(Link),
            "image": self._image,
        }

    def run(self, tokens: list[Token]) -> list[Line]:
        for token in tokens:
            handler = self._block_handlers.get(token.type)
            if handler is not None:
                handler(token)

        self._close_line()

        while self.lines and self.lines[-1].is_blank:
            self.lines.pop()
        if not self.lines:
            self.lines.append(Line.plain(EMPTY_FILE_TEXT))
        return self.lines

    # -- line plumbing ------------------------------------------------------

    def _flush_text(self) -> None:
        """Move pending plain text into the draft line."""
        if self.text:
            self.draft.add(Plain(self.text))
            self.text = ""

    def _close_line(self) -> None:
        """Emit whatever is pending and push the draft if it has content."""
        self._flush_spans()
        self._flush_text()
        if self.draft.segments:
            self.lines.append(self.draft.freeze())
        self.draft = _LineDraft()
        self.marker_only = False

    def _start_block(self, **flags) -> None:
        self._close_line()
        if not flags and self.quote_depth:
            flags = {"is_blockquote": True}
        self.draft.flags = flags

    def _prefix(self) -> str:
        """Marker put before every line opened inside a blockquote."""
        return QUOTE_PREFIX if self.quote_depth else ""

    def _quote_prefix(self) -> None:
        self.text = self._prefix()

    def _emit_line(self, text: str, **flags) -> None:
        self.lines.append(Line(segments=(Plain(text),), **flags))

    def _blank(self) -> None:
        self.lines.append(BLANK)

    # -- block handlers -----------------------------------------------------

    def _heading_open(self, token: Token) -> None:
        level = int(token.tag[1])
        self._start_block(heading_level=level)
        self.text = self._prefix() + "#" * level + " "

    def _heading_close(self, token: Token) -> None:
        self._close_line()
        self._blank()

    def _paragraph_open(self, token: Token) -> None:
        if token.hidden or self.marker_only:
            return
        self._start_block()
        self._quote_prefix()

    def _paragraph_close(self, token: Token) -> None:
        if token.hidden:
            return
        self._close_line()
        self._blank()

    def _code_block(self, token: Token) -> None:
        self._close_line()
        prefix = self._prefix()
        language = token.info.strip() if token.type == "fence" else ""
        # split on "\n" only; other line separators stay inside the line
        rows = token.content.split("\n")
        if rows[-1] == "":
            rows.pop()
        self._emit_line(f"{prefix}```{language}", is_code_block=True)
        for raw in rows:
            self._emit_line(f"{prefix}  {raw}", is_code_block=True)
        self._emit_line(f"{prefix}```", is_code_block=True)
        self._blank()

    def _list_open(self, token: Token) -> None:
        self._close_line()
        ordered = token.type == "ordered_list_open"
        start = token.attrGet("start") if ordered else None
        start = int(start) if start is not None else 1
        self.lists.append(_ListLevel(ordered=ordered, counter=start))

    def _list_close(self, token: Token) -> None:
        self._close_line()
        if self.lists:
            self.lists.pop()
        if not self.lists:
            self._blank()

    def _item_open(self, token: Token) -> None:
        self._start_block(is_list_item=True)
        indent = self._prefix() + "  " * max(0, len(self.lists) - 1)
        level = self.lists[-1] if self.lists else _ListLevel(ordered=False)
        if level.ordered:
            self.text = f"{indent}{level.counter}. "
            level.counter += 1
        else:
            self.text = f"{indent}{BULLET}"
        self.marker_only = True

    def _item_close(self, token: Token) -> None:
        self._close_line()

    def _blockquote_open(self, token: Token) -> None:
        self._close_line()
        self.quote_depth += 1

    def _blockquote_close(self, token: Token) -> None:
        self._close_line()
        self.quote_depth = max(0, self.quote_depth - 1)
        self._blank()

    def _rule(self, token: Token) -> None:
        self._close_line()
        self._emit_line(self._prefix() + "─" * RULE_WIDTH, is_horizontal_rule=True)
        self._blank()

    def _table_open(self, token: Token) -> None:
        self._close_line()
        self.table = _PendingTable()

    def _table_close(self, token: Token) -> None:
        if self.table is not None:
            self.lines.extend(self.table.finish())
        self.table = None

    def _on_table(self, action: str) -> Callable[[Token], None]:
        def handler(token: Token) -> None:
            if self.table is not None:
                getattr(self.table, action)()
        return handler

    def _inline(self, token: Token) -> None:
        if self.table is not None:
            self._table_cell_text(token)
            return
        children = list(token.children or [])
        skip = 0
        if self.marker_only and children and children[0].type == "text":
            skip = self._task_marker(children[0].content)
        for index, child in enumerate(children):
            if index == 0 and skip:
                self._add_text(child.content[skip:])
                continue
            handler = self._inline_handlers.get(child.type)
            if handler is not None:
                handler(child)
        self.marker_only = False

    def _table_cell_text(self, token: Token) -> None:
        for child in token.children or []:
            if child.type == "code_inline":
                self.table.add_text(f"`{child.content}`")
            elif child.type == "text":
                self.table.add_text(child.content)
            elif child.type == "image":
                self.table.add_text(_image_label(child))
            elif child.type in ("softbreak", "hardbreak"):
                self.table.add_text(" ")

    def _task_marker(self, content: str) -> int:
        """Swap the bullet for a checkbox on ``[ ]`` / ``[x]`` items.

        Returns how many characters of ``content`` the checkbox consumed.
        """
        if not self.text.endswith(BULLET):
            return 0
        for prefix, box in TASK_MARKERS.items():
            if content.startswith(prefix):
                self.text = self.text[: -len(BULLET)] + box
                return len(prefix)
        return 0

    # -- inline handlers ----------------------------------------------------

    def _target(self) -> Optional[_Span]:
        """The span that receives text: an open link wins over nested spans."""
        for span in self.spans:
            if span.kind is Link:
                return span
        return self.spans[-1] if self.spans else None

    def _in_link(self) -> bool:
        return any(span.kind is Link for span in self.spans)

    def _add_text(self, text: str) -> None:
        target = self._target()
        if target is None:
            self.text += text
        else:
            target.text += text

    def _emit(self, span: _Span) -> None:
        if span.kind is Link:
            self.draft.add(Link(span.text or span.url, span.url))
        else:
            self.draft.add(span.kind(span.text))
        span.text = ""

    def _flush_target(self) -> None:
        target = self._target()
        if target is not None and target.text:
            self._emit(target)

    def _span_open(self, kind: type, url: str = "") -> None:
        self._flush_text()
        if not self._in_link():
            self._flush_target()
        self.spans.append(_Span(kind=kind, url=url))

    def _span_close(self, kind: type) -> None:
        for index in range(len(self.spans) - 1, -1, -1):
            if self.spans[index].kind is kind:
                break
        else:
            return
        span = self.spans.pop(index)
        if span.kind is Link:
            self._emit(span)
        elif self._in_link():
            # its text went into the enclosing link
            return
        elif span.text:
            self._emit(span)

    def _flush_spans(self) -> None:
        """Emit and drop any spans still open."""
        while self.spans:
            span = self.spans.pop()
            if span.text or span.kind is Link:
                self._emit(span)

    def _code_inline(self, child: Token) -> None:
        if self._in_link():
            self._target().text += child.content
            return
        self._flush_text()
        self._flush_target()
        self.draft.add(Code(child.content))

    def _image(self, child: Token) -> None:
        label = _image_label(child)
        if self._in_link():
            self._target().text += label
            return
        self._flush_text()
        self._flush_target()
        self.draft.add(Link(label, str(child.attrGet("src") or "")))

    def _hard_break(self, child: Token) -> None:
        self._flush_text()
        self._flush_target()
        flags = self.draft.flags
        if self.draft.segments:
            self.lines.append(self.draft.freeze())
        self.draft = _LineDraft(flags=dict(flags))
        self._quote_prefix()


# ============================================================================
# Public entry point
# ============================================================================

_PARSER = MarkdownIt("commonmark").enable(["table", "strikethrough"])


def render_markdown(content: str) -> list[Line]:
    """Render markdown text into styled lines.

    Never fails: anything markdown-it cannot make sense of comes through as
    plain text, and the result always holds at least one line.
    """
    tokens = _PARSER.parse(content)
    lines = _Transducer().run(tokens)
    logger.debug("rendered %d tokens into %d lines", len(tokens), len(lines))
    return lines
