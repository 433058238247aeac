"""
Directory tree of Markdown files for the sidebar.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")
README_NAMES = ("readme.md", "readme.markdown")


@dataclass
class TreeNode:
    name: str
    path: Path
    is_dir: bool
    depth: int = 0
    expanded: bool = False
    children: list["TreeNode"] = field(default_factory=list)

    def visible_items(self) -> list["TreeNode"]:
        """This node and every descendant not hidden by a collapsed parent."""
        items: list[TreeNode] = []
        self._collect_visible(items)
        return items

    def _collect_visible(self, items: list["TreeNode"]) -> None:
        items.append(self)
        if self.expanded:
            for child in self.children:
                child._collect_visible(items)

    def toggle_expanded(self) -> None:
        if self.is_dir:
            self.expanded = not self.expanded

    def find_parent_index(self, target: int) -> Optional[int]:
        """Visible index of the parent of the node at visible index ``target``."""
        counter = [0]
        return self._find_parent(counter, target, None)

    def _find_parent(self, counter: list[int], target: int, parent: Optional[int]) -> Optional[int]:
        mine = counter[0]
        if mine == target:
            return parent
        counter[0] += 1
        if self.expanded:
            for child in self.children:
                found = child._find_parent(counter, target, mine)
                if found is not None:
                    return found
        return None

    def iter_files(self) -> Iterator[Path]:
        """Every file below this node, in display order, expanded or not."""
        if not self.is_dir:
            yield self.path
        for child in self.children:
            yield from child.iter_files()


def _sort_key(node: TreeNode) -> tuple[bool, str]:
    return (not node.is_dir, node.name.lower())


def _scan(directory: Path, depth: int) -> list[TreeNode]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("cannot list %s: %s", directory, exc)
        return []

    nodes: list[TreeNode] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        path = Path(entry.path)
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            children = _scan(path, depth + 1)
            if children:
                nodes.append(TreeNode(entry.name, path, True, depth, children=children))
        elif path.suffix in MARKDOWN_SUFFIXES:
            nodes.append(TreeNode(entry.name, path, False, depth))
    nodes.sort(key=_sort_key)
    return nodes


def build_tree(root: Path) -> TreeNode:
    """Tree of the Markdown files under ``root``.

    Hidden entries are skipped and directories without Markdown files
    anywhere below them are dropped. Directories sort before files, then
    by name ignoring case. Only the root starts expanded.
    """
    root = Path(root)
    node = TreeNode(root.name or str(root), root, True, 0, expanded=True)
    node.children = _scan(root, 1)
    logger.debug("scanned %s: %d files", root, sum(1 for _ in node.iter_files()))
    return node


def pick_initial_file(items: list[TreeNode]) -> Optional[int]:
    """Visible index of the file to open first: a README if there is one."""
    for index, item in enumerate(items):
        if not item.is_dir and item.name.lower() in README_NAMES:
            return index
    for index, item in enumerate(items):
        if not item.is_dir:
            return index
    return None
