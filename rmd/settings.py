"""
Persisted viewer settings.

Stored as JSON under the platform config directory. A missing or malformed
file yields the defaults; a failed save is logged and otherwise ignored.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path

from platformdirs import user_config_dir

from .layout import WrapWidth

logger = logging.getLogger(__name__)

APP_NAME = "rmd"
SETTINGS_FILENAME = "settings.json"
CONFIG_DIR_ENV = "RMD_CONFIG_DIR"


class Theme(str, Enum):
    DARK = "Dark"
    LIGHT = "Light"

    def next(self) -> "Theme":
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


def settings_path() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    base = Path(override) if override else Path(user_config_dir(APP_NAME, appauthor=False))
    return base / SETTINGS_FILENAME


@dataclass
class Settings:
    show_line_numbers: bool = True
    theme: Theme = Theme.DARK
    wrap_width: WrapWidth = WrapWidth.CHARS_120

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        settings = cls()
        if isinstance(data.get("show_line_numbers"), bool):
            settings.show_line_numbers = data["show_line_numbers"]
        try:
            settings.theme = Theme(data.get("theme", settings.theme))
        except ValueError:
            logger.debug("unknown theme %r, keeping default", data.get("theme"))
        try:
            settings.wrap_width = WrapWidth(data.get("wrap_width", settings.wrap_width))
        except ValueError:
            logger.debug("unknown wrap width %r, keeping default", data.get("wrap_width"))
        return settings

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        path = path or settings_path()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return cls()
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable settings file %s: %s", path, exc)
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["theme"] = self.theme.value
        data["wrap_width"] = self.wrap_width.value
        return data

    def save(self, path: Path | None = None) -> None:
        path = path or settings_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            logger.warning("could not save settings to %s: %s", path, exc)

    # -- the settings panel ------------------------------------------------

    def toggle(self, index: int) -> None:
        """Flip or cycle the setting shown at row ``index`` of the panel."""
        if index == 0:
            self.show_line_numbers = not self.show_line_numbers
        elif index == 1:
            self.theme = self.theme.next()
        elif index == 2:
            self.wrap_width = self.wrap_width.next()

    def rows(self) -> list[str]:
        checkbox = "[x]" if self.show_line_numbers else "[ ]"
        return [
            f"{checkbox} Show line numbers",
            f"    Theme: {self.theme.value}",
            f"    Wrap width: {self.wrap_width.display_name}",
        ]
