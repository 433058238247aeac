"""
Colors for rendered lines.

Nothing here changes layout: a ``Fragment`` is turned into a ``rich.text.Text``
with exactly the characters the layout engine counted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rich.style import Style
from rich.text import Text

from .layout import Fragment
from .markup import Code, Emphasis, Line, Link, Plain, Strong
from .settings import Theme


@dataclass(frozen=True)
class ThemeColors:
    foreground: str
    background: str
    comment: str
    headings: tuple[str, str, str, str, str, str]
    code: str
    code_bg: str
    link: str
    table: str
    highlight_fg: str
    highlight_bg: str


# Monokai
DARK = ThemeColors(
    foreground="#f8f8f2",
    background="#272822",
    comment="#75715e",
    headings=("#fd971f", "#a6e22e", "#e6db74", "#ae81ff", "#66d9ef", "#75715e"),
    code="#a6e22e",
    code_bg="#272822",
    link="#66d9ef",
    table="#66d9ef",
    highlight_fg="#66d9ef",
    highlight_bg="#49483e",
)

# GitHub light
LIGHT = ThemeColors(
    foreground="#24292e",
    background="#ffffff",
    comment="#6a737d",
    headings=("#d73a49", "#22863a", "#6f42c1", "#005cc5", "#e36209", "#6a737d"),
    code="#005cc5",
    code_bg="#f6f8fa",
    link="#0366d6",
    table="#005cc5",
    highlight_fg="#24292e",
    highlight_bg="#fffbdd",
)


def colors_for(theme: Theme) -> ThemeColors:
    return LIGHT if theme is Theme.LIGHT else DARK


def heading_style(level: int, colors: ThemeColors) -> Style:
    if not 1 <= level <= 6:
        return Style()
    return Style(color=colors.headings[level - 1], bold=level <= 3)


def line_style(line: Line, colors: ThemeColors) -> Style:
    """Base style of a line, from its block kind."""
    if line.heading_level > 0:
        return heading_style(line.heading_level, colors)
    if line.is_code_block:
        return Style(color=colors.code)
    if line.is_blockquote or line.is_horizontal_rule:
        return Style(color=colors.comment)
    if line.is_table:
        return Style(color=colors.table)
    return Style(color=colors.foreground)


def fragment_to_text(fragment: Fragment, colors: ThemeColors) -> Text:
    base = line_style(fragment.line, colors)
    text = Text(no_wrap=True, overflow="ellipsis")
    if fragment.text is not None:
        text.append(fragment.text, base)
        return text

    for segment in fragment.line.segments:
        if isinstance(segment, Code):
            text.append(f"`{segment.text}`", Style(color=colors.headings[0], bgcolor=colors.code_bg))
        elif isinstance(segment, Link):
            text.append(segment.text, Style(color=colors.link, underline=True, link=segment.url or None))
        elif isinstance(segment, Emphasis):
            text.append(segment.text, base + Style(italic=True))
        elif isinstance(segment, Strong):
            text.append(segment.text, base + Style(bold=True))
        elif isinstance(segment, Plain):
            text.append(segment.text, base)
    return text


def render_row(
    fragment: Fragment,
    colors: ThemeColors,
    number_width: int = 0,
    query: Optional[str] = None,
    is_match: bool = False,
) -> Text:
    """One painted row: optional line number gutter, content, search hits."""
    row = Text(no_wrap=True, overflow="ellipsis")
    if number_width:
        number = str(fragment.source_index + 1) if fragment.is_first else ""
        gutter_style = Style(color=colors.highlight_fg if is_match else colors.comment)
        row.append(f"{number:>{number_width}} │ ", gutter_style)
    content = fragment_to_text(fragment, colors)
    if query:
        content.highlight_words(
            [query],
            Style(color=colors.highlight_fg, bgcolor=colors.highlight_bg),
            case_sensitive=False,
        )
    row.append_text(content)
    return row
