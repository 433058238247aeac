from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Input, Static

from rich.style import Style
from rich.text import Text

from .session import Focus, Mode, ReaderSession
from .theme import colors_for, render_row

THEME = """
$primary: #61afef;
$accent: #56b6c2;
$background: #1a1a1a;
$surface: #21252b;

Screen {
    background: $background;
    layers: base overlay;
}

#main-container {
    height: 1fr;
}

#sidebar {
    width: 30%;
    height: 100%;
    border: round #5c6370;
    background: $surface;
    padding: 0 1;
}

#sidebar.focused {
    border: round $primary;
}

#content-panel {
    width: 1fr;
    height: 100%;
}

#find-input {
    border: round #fd971f;
    height: 3;
}

#viewer {
    height: 1fr;
    border: round #5c6370;
    padding: 0 1;
}

#viewer.focused {
    border: round $primary;
}

#overlay-layer {
    layer: overlay;
    width: 100%;
    height: 100%;
    align: center middle;
}

.overlay {
    width: 60%;
    height: 50%;
    background: $surface;
    border: round $accent;
    padding: 0 1;
}

#search-input {
    border: round $accent;
    height: 3;
}

#search-results {
    height: 1fr;
    border: round #5c6370;
}

#about-panel {
    text-align: center;
    border: round #fd971f;
}

#status {
    dock: bottom;
    height: 1;
    background: $surface;
    color: #abb2bf;
}

.hidden {
    display: none;
}
"""

KEY_STYLE = Style(color="black", bgcolor="white")
KEY_HINTS = [
    (" q ", " Quit  "),
    (" hjkl ", " Nav  "),
    (" gg/G ", " Top/Bot  "),
    (" ^u/^d ", " Half  "),
    (" ^b/^f ", " Full  "),
    (" / ", " Find  "),
    (" ^s ", " Search  "),
    (" ^p ", " Settings  "),
    (" ? ", " About "),
]

ABOUT_LINES = [
    ("", None),
    ("rmd", Style(color="#fd971f", bold=True)),
    ("", None),
    ("A terminal-based Markdown viewer", Style(color="#75715e")),
    ("", None),
    ("Press Esc or Enter to close", Style(color="#75715e")),
]


# ============================================================================
# Sidebar
# ============================================================================

class Sidebar(Static):
    """The file tree, drawn from the session's visible items."""

    def __init__(self, session: ReaderSession):
        super().__init__(id="sidebar")
        self.session = session
        self.border_title = "Files"

    def sync(self) -> None:
        self.set_class(self.session.focus is Focus.SIDEBAR, "focused")
        self.refresh()

    def render(self) -> Text:
        session = self.session
        items = session.visible_items()
        height = max(self.content_size.height, 1)
        start = max(0, session.selected_index - height + 1)

        rendered = Text(no_wrap=True, overflow="ellipsis")
        for index, node in enumerate(items[start:start + height], start):
            if index > start:
                rendered.append("\n")
            icon = ("▼ " if node.expanded else "▶ ") if node.is_dir else "  "
            label = f"{'  ' * node.depth}{icon}{node.name}"
            if index == session.selected_index:
                background = "blue" if session.focus is Focus.SIDEBAR else "grey37"
                rendered.append(label, Style(color="white", bgcolor=background, bold=True))
            elif node.is_dir:
                rendered.append(label, Style(color="yellow"))
            else:
                rendered.append(label, Style(color="white"))
        return rendered


# ============================================================================
# Content
# ============================================================================

class ContentView(Static):
    """The visible window of the wrapped document."""

    def __init__(self, session: ReaderSession):
        super().__init__(id="viewer")
        self.session = session

    def on_resize(self, event: events.Resize) -> None:
        self.session.set_viewport_height(self.content_size.height)
        self.sync()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.session.scroll_wheel(down=True)
        self.sync()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.session.scroll_wheel(down=False)
        self.sync()

    def sync(self) -> None:
        session = self.session
        viewport = session.viewport
        self.set_class(session.focus is Focus.CONTENT, "focused")
        self.styles.background = colors_for(session.settings.theme).background
        self.border_title = session.current_file.name if session.current_file else "Content"
        total = viewport.total_rows
        if total > viewport.height:
            self.border_subtitle = f"{viewport.offset + 1}-{min(viewport.offset + viewport.height, total)}/{total}"
        else:
            self.border_subtitle = ""
        self.refresh()

    def render(self) -> Text:
        session = self.session
        colors = colors_for(session.settings.theme)
        number_width = len(str(len(session.lines))) if session.settings.show_line_numbers else 0
        query = session.find.query if session.mode is Mode.FIND else None
        matches = set(session.find.matches)
        rows = [
            render_row(fragment, colors, number_width, query, fragment.source_index in matches)
            for fragment in session.window()
        ]
        return Text("\n", no_wrap=True, overflow="crop").join(rows)


# ============================================================================
# Overlays
# ============================================================================

class SearchOverlay(Vertical):
    """Search across every file in the tree."""

    def __init__(self, session: ReaderSession):
        super().__init__(id="search-panel", classes="overlay hidden")
        self.session = session

    def compose(self) -> ComposeResult:
        search_input = Input(placeholder="Search all files", id="search-input")
        search_input.border_title = "Search"
        yield search_input
        yield SearchResults(self.session)


class SearchResults(Static):
    def __init__(self, session: ReaderSession):
        super().__init__(id="search-results")
        self.session = session

    def sync(self) -> None:
        self.border_title = f"Results ({len(self.session.search_results)})"
        self.refresh()

    def render(self) -> Text:
        session = self.session
        rendered = Text(no_wrap=True, overflow="ellipsis")
        for index, result in enumerate(session.search_results):
            if index:
                rendered.append("\n")
            selected = index == session.search_selected
            highlight = Style(bgcolor="#66d9ef") if selected else Style()
            rendered.append(result.name, Style(color="#b46400" if selected else "#fd971f", bold=True) + highlight)
            rendered.append(": ", highlight)
            rendered.append(result.preview, Style(color="black" if selected else "white") + highlight)
        return rendered


class SettingsPanel(Static):
    def __init__(self, session: ReaderSession):
        super().__init__(id="settings-panel", classes="overlay hidden")
        self.session = session
        self.border_title = "Settings (Enter to toggle, Esc to close)"

    def render(self) -> Text:
        rendered = Text()
        for index, row in enumerate(self.session.settings.rows()):
            if index:
                rendered.append("\n")
            if index == self.session.settings_selected:
                rendered.append(row, Style(color="black", bgcolor="#66d9ef"))
            else:
                rendered.append(row, Style(color="white"))
        return rendered


class AboutPanel(Static):
    def __init__(self):
        super().__init__(id="about-panel", classes="overlay hidden")
        self.border_title = "About"

    def render(self) -> Text:
        rendered = Text(justify="center")
        for index, (line, style) in enumerate(ABOUT_LINES):
            if index:
                rendered.append("\n")
            rendered.append(line, style)
        return rendered


# ============================================================================
# Status bar
# ============================================================================

class StatusBar(Static):
    def __init__(self, session: ReaderSession):
        super().__init__(id="status")
        self.session = session

    def render(self) -> Text:
        session = self.session
        rendered = Text(no_wrap=True, overflow="ellipsis")
        if session.mode is Mode.FIND:
            rendered.append(" FIND ", Style(color="black", bgcolor="#fd971f"))
            rendered.append(f" {session.find.query}{session.find.status_text()}  ")
            rendered.append(" Enter ", KEY_STYLE)
            rendered.append(" Next  ")
            rendered.append(" Esc ", KEY_STYLE)
            rendered.append(" Close ")
            return rendered
        for key, label in KEY_HINTS:
            rendered.append(key, KEY_STYLE)
            rendered.append(label)
        return rendered
