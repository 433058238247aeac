"""
rmd - terminal Markdown reader for a whole directory of notes.

Usage:
    rmd [PATH] [--log-file FILE] [--log-level LEVEL]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Input

from . import __version__
from .session import Mode, ReaderSession
from .widgets import (
    THEME,
    AboutPanel,
    ContentView,
    SearchOverlay,
    SearchResults,
    SettingsPanel,
    Sidebar,
    StatusBar,
)

logger = logging.getLogger(__name__)

# Actions only reachable from the tree/content view.
NORMAL_ACTIONS = {
    "move_down", "move_up", "open_right", "close_left", "switch_focus",
    "press_g", "bottom", "half_page_up", "half_page_down",
    "full_page_up", "full_page_down", "page_up", "page_down", "home", "end",
    "find", "next_match", "previous_match", "search", "settings", "about",
    "reload",
}


# ============================================================================
# Main Application
# ============================================================================

class ReaderApp(App):
    """Sidebar of Markdown files next to the rendered document."""

    CSS = THEME
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("q", "quit_or_close", "Quit", show=False),
        Binding("escape", "escape", "Back", priority=True, show=False),
        Binding("ctrl+c", "quit", "Quit", priority=True, show=False),
        Binding("tab", "switch_focus", "Focus", priority=True, show=False),
        Binding("j", "move_down", show=False),
        Binding("k", "move_up", show=False),
        Binding("down", "cursor_down", show=False),
        Binding("up", "cursor_up", show=False),
        Binding("l,right", "open_right", show=False),
        Binding("h,left", "close_left", show=False),
        Binding("enter", "select", show=False),
        Binding("space", "toggle_setting", show=False),
        Binding("g", "press_g", show=False),
        Binding("G,shift+g", "bottom", show=False),
        Binding("ctrl+u", "half_page_up", show=False),
        Binding("ctrl+d", "half_page_down", show=False),
        Binding("ctrl+b", "full_page_up", show=False),
        Binding("ctrl+f", "full_page_down", show=False),
        Binding("pageup", "page_up", show=False),
        Binding("pagedown", "page_down", show=False),
        Binding("home", "home", show=False),
        Binding("end", "end", show=False),
        Binding("slash", "find", "Find", show=False),
        Binding("n", "next_match", show=False),
        Binding("N,shift+n", "previous_match", show=False),
        Binding("ctrl+s", "search", "Search", show=False),
        Binding("ctrl+p", "settings", "Settings", show=False),
        Binding("question_mark", "about", "About", show=False),
        Binding("r", "reload", "Reload", show=False),
    ]

    TITLE = "rmd"

    def __init__(self, session: ReaderSession):
        super().__init__()
        self.session = session
        self._pending_g = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="main-container"):
            yield Sidebar(self.session)
            with Vertical(id="content-panel"):
                find_input = Input(placeholder="Find in document", id="find-input", classes="hidden")
                find_input.border_title = "Find"
                yield find_input
                yield ContentView(self.session)
        with Container(id="overlay-layer", classes="hidden"):
            yield SearchOverlay(self.session)
            yield SettingsPanel(self.session)
            yield AboutPanel()
        yield StatusBar(self.session)

    def on_mount(self) -> None:
        self.session.open_initial_file()
        self.set_interval(1, self.check_file_changes)
        self.refresh_view()

    def check_file_changes(self) -> None:
        """Reload the open file when it changed on disk."""
        if self.session.changed_on_disk():
            logger.info("%s changed on disk, reloading", self.session.current_file)
            self.session.reload()
            self.refresh_view()

    def refresh_view(self) -> None:
        self._pending_g = False
        mode = self.session.mode
        self.query_one("#find-input").set_class(mode is not Mode.FIND, "hidden")
        self.query_one("#overlay-layer").set_class(
            mode not in (Mode.SEARCH, Mode.SETTINGS, Mode.ABOUT), "hidden"
        )
        self.query_one(SearchOverlay).set_class(mode is not Mode.SEARCH, "hidden")
        self.query_one(SettingsPanel).set_class(mode is not Mode.SETTINGS, "hidden")
        self.query_one(AboutPanel).set_class(mode is not Mode.ABOUT, "hidden")

        self.query_one(Sidebar).sync()
        self.query_one(ContentView).sync()
        self.query_one(SearchResults).sync()
        self.query_one(SettingsPanel).refresh()
        self.query_one(StatusBar).refresh()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> Optional[bool]:
        if action in NORMAL_ACTIONS:
            return self.session.mode is Mode.NORMAL
        if action == "toggle_setting":
            return self.session.mode is Mode.SETTINGS
        return True

    def _leave_text_mode(self, input_id: str) -> None:
        text_input = self.query_one(input_id, Input)
        text_input.value = ""
        self.set_focus(None)

    # -- modes ---------------------------------------------------------------

    def action_escape(self) -> None:
        mode = self.session.mode
        if mode is Mode.NORMAL:
            self.exit()
            return
        if mode is Mode.FIND:
            self.session.exit_find()
            self._leave_text_mode("#find-input")
        elif mode is Mode.SEARCH:
            self.session.exit_search()
            self._leave_text_mode("#search-input")
        else:
            self.session.mode = Mode.NORMAL
        self.refresh_view()

    def action_quit_or_close(self) -> None:
        if self.session.mode is Mode.NORMAL:
            self.exit()
        elif self.session.mode is Mode.ABOUT:
            self.session.mode = Mode.NORMAL
            self.refresh_view()

    def action_find(self) -> None:
        self.session.enter_find()
        self.refresh_view()
        find_input = self.query_one("#find-input", Input)
        find_input.value = ""
        self.call_after_refresh(find_input.focus)

    def action_search(self) -> None:
        self.session.enter_search()
        self.refresh_view()
        search_input = self.query_one("#search-input", Input)
        search_input.value = ""
        self.call_after_refresh(search_input.focus)

    def action_settings(self) -> None:
        self.session.mode = Mode.SETTINGS
        self.session.settings_selected = 0
        self.refresh_view()

    def action_about(self) -> None:
        self.session.mode = Mode.ABOUT
        self.refresh_view()

    def action_toggle_setting(self) -> None:
        self.session.toggle_setting()
        self.refresh_view()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "find-input" and self.session.mode is Mode.FIND:
            self.session.set_query(event.value)
        elif event.input.id == "search-input" and self.session.mode is Mode.SEARCH:
            self.session.set_search_query(event.value)
        self.refresh_view()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "find-input":
            self.session.next_match()
        elif event.input.id == "search-input":
            if not self.session.search_results:
                return
            query = self.session.search_query
            self.session.search_select()
            self._leave_text_mode("#search-input")
            find_input = self.query_one("#find-input", Input)
            find_input.value = query
            self.call_after_refresh(find_input.focus)
            self.notify(f"Opened {self.session.current_file.name}", timeout=2)
        self.refresh_view()

    # -- navigation ------------------------------------------------------------

    def action_move_down(self) -> None:
        self.session.move_down()
        self.refresh_view()

    def action_move_up(self) -> None:
        self.session.move_up()
        self.refresh_view()

    def action_cursor_down(self) -> None:
        mode = self.session.mode
        if mode is Mode.SEARCH:
            self.session.search_next()
        elif mode is Mode.SETTINGS:
            self.session.settings_next()
        elif mode is Mode.NORMAL:
            self.session.move_down()
        self.refresh_view()

    def action_cursor_up(self) -> None:
        mode = self.session.mode
        if mode is Mode.SEARCH:
            self.session.search_previous()
        elif mode is Mode.SETTINGS:
            self.session.settings_previous()
        elif mode is Mode.NORMAL:
            self.session.move_up()
        self.refresh_view()

    def action_select(self) -> None:
        mode = self.session.mode
        if mode is Mode.NORMAL:
            self.session.toggle_or_open()
        elif mode is Mode.SETTINGS:
            self.session.toggle_setting()
        elif mode is Mode.ABOUT:
            self.session.mode = Mode.NORMAL
        self.refresh_view()

    def action_open_right(self) -> None:
        self.session.open_or_focus_content()
        self.refresh_view()

    def action_close_left(self) -> None:
        self.session.focus_sidebar_or_collapse()
        self.refresh_view()

    def action_switch_focus(self) -> None:
        self.session.toggle_focus()
        self.refresh_view()

    def action_press_g(self) -> None:
        if self._pending_g:
            self._pending_g = False
            self.session.go_top()
            self.refresh_view()
        else:
            self._pending_g = True

    def action_bottom(self) -> None:
        self.session.go_bottom()
        self.refresh_view()

    def action_half_page_up(self) -> None:
        self.session.viewport.half_page_up()
        self.refresh_view()

    def action_half_page_down(self) -> None:
        self.session.viewport.half_page_down()
        self.refresh_view()

    def action_full_page_up(self) -> None:
        self.session.viewport.page_up()
        self.refresh_view()

    def action_full_page_down(self) -> None:
        self.session.viewport.page_down()
        self.refresh_view()

    def action_page_up(self) -> None:
        self.session.page_up()
        self.refresh_view()

    def action_page_down(self) -> None:
        self.session.page_down()
        self.refresh_view()

    def action_home(self) -> None:
        self.session.viewport.scroll_to_top()
        self.refresh_view()

    def action_end(self) -> None:
        self.session.viewport.scroll_to_bottom()
        self.refresh_view()

    def action_next_match(self) -> None:
        self.session.next_match()
        self.refresh_view()

    def action_previous_match(self) -> None:
        self.session.previous_match()
        self.refresh_view()

    def action_reload(self) -> None:
        if self.session.current_file is None:
            return
        self.notify("Reloading...", timeout=1)
        self.session.reload()
        self.refresh_view()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="rmd", description="Browse and read Markdown files in the terminal.")
    parser.add_argument("path", nargs="?", default=".", help="directory to browse (default: current directory)")
    parser.add_argument("--log-file", help="write a debug log to this file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level used with --log-file (default: INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point."""
    args = parse_args(argv)

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, args.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger("rmd").addHandler(logging.NullHandler())

    root = Path(args.path)
    if not root.exists():
        print(f"Error: path does not exist: {root}", file=sys.stderr)
        return 1
    if not root.is_dir():
        print(f"Error: not a directory: {root}", file=sys.stderr)
        return 1

    logger.info("starting in %s", root.resolve())
    ReaderApp(ReaderSession(root.resolve())).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
