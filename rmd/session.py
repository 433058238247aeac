"""
The reader session: one open document plus everything derived from it.

``ReaderSession`` owns the rendered lines, the viewport scroll state and the
search state. Loading a file replaces all three together. The textual app
only translates key presses into calls on this object and paints its output.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from .filetree import TreeNode, build_tree, pick_initial_file
from .layout import WHEEL_STEP, Fragment, Viewport
from .markup import BLANK, Line, render_markdown
from .search import FileMatch, SearchState, search, search_files
from .settings import Settings

logger = logging.getLogger(__name__)

TREE_PAGE = 10


class Focus(Enum):
    SIDEBAR = "sidebar"
    CONTENT = "content"


class Mode(Enum):
    NORMAL = "normal"
    FIND = "find"
    SEARCH = "search"
    SETTINGS = "settings"
    ABOUT = "about"


def welcome_document() -> list[Line]:
    """Shown before any file is opened."""
    plain = Line.plain
    return [
        Line.heading("Welcome to rmd!", 1),
        BLANK,
        plain("Select a Markdown file from the sidebar to view its contents."),
        BLANK,
        Line.heading("Navigation", 2),
        BLANK,
        plain("  j/↓       Move down"),
        plain("  k/↑       Move up"),
        plain("  l/→/Enter Open file / Expand directory"),
        plain("  h/←       Collapse directory / Go to parent"),
        plain("  Tab       Switch focus between sidebar and content"),
        plain("  gg        Go to top"),
        plain("  G         Go to bottom"),
        BLANK,
        Line.heading("Scrolling", 2),
        BLANK,
        plain("  Ctrl+u    Half page up"),
        plain("  Ctrl+d    Half page down"),
        plain("  Ctrl+b    Full page up"),
        plain("  Ctrl+f    Full page down"),
        BLANK,
        Line.heading("Search", 2),
        BLANK,
        plain("  /         Search in document"),
        plain("  n / N     Next / previous match"),
        plain("  Ctrl+s    Search all files"),
        BLANK,
        Line.heading("General", 2),
        BLANK,
        plain("  r         Reload file"),
        plain("  q         Quit"),
        plain("  Ctrl+p    Settings"),
        plain("  ?         About"),
    ]


class ReaderSession:
    def __init__(self, root: Path, settings: Optional[Settings] = None, tree: Optional[TreeNode] = None):
        self.root = Path(root)
        self.settings = settings if settings is not None else Settings.load()
        self.tree = tree if tree is not None else build_tree(self.root)
        self.selected_index = 0
        self.focus = Focus.SIDEBAR
        self.mode = Mode.NORMAL

        self.current_file: Optional[Path] = None
        self._mtime: float = 0.0
        self.lines: list[Line] = welcome_document()
        self.viewport = Viewport(self.lines, self.settings.wrap_width.width)
        self.find = SearchState()

        self.search_query = ""
        self.search_results: list[FileMatch] = []
        self.search_selected = 0
        self.settings_selected = 0

    # -- documents ---------------------------------------------------------

    def _read(self, path: Path) -> list[Line]:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.error("failed to read %s: %s", path, exc)
            return [Line.plain(f"Error reading file: {exc}")]
        try:
            self._mtime = path.stat().st_mtime
        except OSError:
            self._mtime = 0.0
        return render_markdown(content)

    def load(self, path: Path) -> None:
        """Open ``path``, replacing the document, scroll and search state."""
        path = Path(path)
        self.current_file = path
        self.lines = self._read(path)
        self.viewport.set_lines(self.lines)
        self.find = SearchState()
        logger.info("loaded %s (%d lines)", path, len(self.lines))

    def reload(self) -> None:
        """Re-read the current file, keeping the scroll position."""
        if self.current_file is None:
            return
        offset = self.viewport.offset
        query = self.find.query
        self.lines = self._read(self.current_file)
        self.viewport.set_lines(self.lines)
        self.viewport.scroll_to(offset)
        self.find = search(self.lines, query)

    def changed_on_disk(self) -> bool:
        if self.current_file is None:
            return False
        try:
            return self.current_file.stat().st_mtime > self._mtime
        except OSError:
            return False

    def open_initial_file(self) -> None:
        index = pick_initial_file(self.visible_items())
        if index is not None:
            self.selected_index = index
            self.load(self.visible_items()[index].path)

    # -- viewport ----------------------------------------------------------

    def set_wrap_policy(self, width: Optional[int]) -> None:
        self.viewport.set_width(width)

    def set_viewport_height(self, height: int) -> None:
        self.viewport.set_height(height)

    def window(self) -> list[Fragment]:
        return self.viewport.window()

    def scroll_wheel(self, down: bool) -> None:
        self.viewport.scroll_by(WHEEL_STEP if down else -WHEEL_STEP)

    # -- in-document find --------------------------------------------------

    def _jump_to_match(self) -> None:
        match = self.find.current_match
        if match is not None:
            self.viewport.center_on(match)

    def set_query(self, query: str) -> None:
        self.find = search(self.lines, query)
        self._jump_to_match()

    def add_query_char(self, char: str) -> None:
        self.set_query(self.find.query + char)

    def backspace_query(self) -> None:
        self.set_query(self.find.query[:-1])

    def next_match(self) -> None:
        if self.find.next() is not None:
            self._jump_to_match()

    def previous_match(self) -> None:
        if self.find.previous() is not None:
            self._jump_to_match()

    def clear_search(self) -> None:
        self.find = SearchState()

    def enter_find(self) -> None:
        self.mode = Mode.FIND
        self.clear_search()

    def exit_find(self) -> None:
        self.mode = Mode.NORMAL
        self.clear_search()

    # -- search across files -----------------------------------------------

    def enter_search(self) -> None:
        self.mode = Mode.SEARCH
        self.search_query = ""
        self.search_results = []
        self.search_selected = 0

    def exit_search(self) -> None:
        self.mode = Mode.NORMAL
        self.search_query = ""
        self.search_results = []
        self.search_selected = 0

    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self.search_results = search_files(self.tree.iter_files(), query)
        self.search_selected = 0

    def search_next(self) -> None:
        if self.search_selected < len(self.search_results) - 1:
            self.search_selected += 1

    def search_previous(self) -> None:
        if self.search_selected > 0:
            self.search_selected -= 1

    def search_select(self) -> None:
        """Open the selected result and find the same text inside it."""
        if not self.search_results:
            return
        result = self.search_results[self.search_selected]
        query = self.search_query
        self.load(result.path)
        self.exit_search()
        self.focus = Focus.CONTENT
        self.mode = Mode.FIND
        self.set_query(query)

    # -- settings ----------------------------------------------------------

    def toggle_setting(self) -> None:
        self.settings.toggle(self.settings_selected)
        self.viewport.set_width(self.settings.wrap_width.width)
        self.settings.save()

    def settings_next(self) -> None:
        self.settings_selected = min(self.settings_selected + 1, len(self.settings.rows()) - 1)

    def settings_previous(self) -> None:
        self.settings_selected = max(self.settings_selected - 1, 0)

    # -- sidebar and navigation --------------------------------------------

    def visible_items(self) -> list[TreeNode]:
        return self.tree.visible_items()

    def selected_node(self) -> Optional[TreeNode]:
        items = self.visible_items()
        if 0 <= self.selected_index < len(items):
            return items[self.selected_index]
        return None

    def move_down(self) -> None:
        if self.focus is Focus.SIDEBAR:
            last = max(len(self.visible_items()) - 1, 0)
            self.selected_index = min(self.selected_index + 1, last)
        else:
            self.viewport.scroll_by(1)

    def move_up(self) -> None:
        if self.focus is Focus.SIDEBAR:
            self.selected_index = max(self.selected_index - 1, 0)
        else:
            self.viewport.scroll_by(-1)

    def go_top(self) -> None:
        if self.focus is Focus.SIDEBAR:
            self.selected_index = 0
        else:
            self.viewport.scroll_to_top()

    def go_bottom(self) -> None:
        if self.focus is Focus.SIDEBAR:
            self.selected_index = max(len(self.visible_items()) - 1, 0)
        else:
            self.viewport.scroll_to_bottom()

    def page_up(self) -> None:
        if self.focus is Focus.SIDEBAR:
            self.selected_index = max(self.selected_index - TREE_PAGE, 0)
        else:
            self.viewport.page_up()

    def page_down(self) -> None:
        if self.focus is Focus.SIDEBAR:
            last = max(len(self.visible_items()) - 1, 0)
            self.selected_index = min(self.selected_index + TREE_PAGE, last)
        else:
            self.viewport.page_down()

    def toggle_or_open(self) -> None:
        node = self.selected_node()
        if node is None:
            return
        if node.is_dir:
            node.toggle_expanded()
        else:
            self.load(node.path)

    def open_or_focus_content(self) -> None:
        if self.focus is not Focus.SIDEBAR:
            return
        node = self.selected_node()
        if node is None:
            return
        if node.is_dir:
            if not node.expanded:
                node.toggle_expanded()
        else:
            self.load(node.path)
            self.focus = Focus.CONTENT

    def collapse_or_parent(self) -> None:
        node = self.selected_node()
        if node is None:
            return
        if node.is_dir and node.expanded:
            node.toggle_expanded()
            return
        parent = self.tree.find_parent_index(self.selected_index)
        if parent is not None:
            self.selected_index = parent

    def focus_sidebar_or_collapse(self) -> None:
        if self.focus is Focus.CONTENT:
            self.focus = Focus.SIDEBAR
        else:
            self.collapse_or_parent()

    def toggle_focus(self) -> None:
        self.focus = Focus.CONTENT if self.focus is Focus.SIDEBAR else Focus.SIDEBAR
