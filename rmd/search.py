"""
Substring search, inside the open document and across files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .markup import Line

logger = logging.getLogger(__name__)

RESULT_LIMIT = 50
PREVIEW_CHARS = 60


@dataclass
class SearchState:
    """Matches of ``query`` in a document, with a wrap-around cursor."""

    query: str = ""
    matches: list[int] = field(default_factory=list)
    current: int = 0

    @property
    def current_match(self) -> Optional[int]:
        if not self.matches:
            return None
        return self.matches[self.current]

    def next(self) -> Optional[int]:
        if self.matches:
            self.current = (self.current + 1) % len(self.matches)
        return self.current_match

    def previous(self) -> Optional[int]:
        if self.matches:
            self.current = len(self.matches) - 1 if self.current == 0 else self.current - 1
        return self.current_match

    def status_text(self) -> str:
        if self.matches:
            return f" ({self.current + 1}/{len(self.matches)})"
        if self.query:
            return " (0 matches)"
        return ""


def search(lines: Sequence[Line], query: str) -> SearchState:
    """Source indices of every line whose text contains ``query``, ignoring case."""
    if not query:
        return SearchState(query=query)
    needle = query.lower()
    matches = [
        index for index, line in enumerate(lines)
        if needle in line.search_text().lower()
    ]
    return SearchState(query=query, matches=matches)


# ============================================================================
# Cross-file search
# ============================================================================

@dataclass(frozen=True)
class FileMatch:
    path: Path
    name: str
    preview: str


def _first_match(content: str, needle: str) -> Optional[str]:
    preview = None
    count = 0
    for text in content.splitlines():
        if needle in text.lower():
            if preview is None:
                preview = text.strip()[:PREVIEW_CHARS]
            count += 1
    if preview is None:
        return None
    if count > 1:
        return f"{preview} ({count} matches)"
    return preview


def search_files(paths: Iterable[Path], query: str, limit: int = RESULT_LIMIT) -> list[FileMatch]:
    """Files whose raw text contains ``query``, each with its first matching line."""
    results: list[FileMatch] = []
    if not query:
        return results
    needle = query.lower()
    for path in paths:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.debug("skipping %s: %s", path, exc)
            continue
        preview = _first_match(content, needle)
        if preview is None:
            continue
        results.append(FileMatch(path=path, name=path.name, preview=preview))
        if len(results) >= limit:
            break
    return results
