from __future__ import annotations

from rmd.markup import Code, Line, Plain, render_markdown
from rmd.search import PREVIEW_CHARS, FileMatch, SearchState, search, search_files

LINES = render_markdown("# Apples\n\nI like apples.\n\nPears are fine.\n\nAPPLE pie")


def test_matches_ignore_case():
    state = search(LINES, "apple")
    assert state.matches == [0, 2, 6]
    for index, line in enumerate(LINES):
        assert (index in state.matches) == ("apple" in line.search_text().lower())


def test_empty_query_matches_nothing():
    state = search(LINES, "")
    assert state.matches == []
    assert state.current_match is None
    assert state.status_text() == ""


def test_no_matches_status():
    state = search(LINES, "banana")
    assert state.matches == []
    assert state.status_text() == " (0 matches)"


def test_cursor_wraps_around():
    state = search(LINES, "apple")
    assert state.current_match == 0
    assert state.status_text() == " (1/3)"
    assert state.previous() == 6
    assert state.next() == 0
    assert state.next() == 2
    assert state.next() == 6
    assert state.next() == 0


def test_navigation_without_matches_is_a_noop():
    state = SearchState(query="x")
    assert state.next() is None
    assert state.previous() is None
    assert state.current == 0


def test_inline_code_is_searched_without_backticks():
    lines = [Line(segments=(Plain("run "), Code("make")))]
    assert search(lines, "run make").matches == [0]
    assert search(lines, "`make").matches == []


def test_search_files_reports_first_match_and_count(tmp_path):
    first = tmp_path / "a.md"
    first.write_text("Hello\nsomething\n  hello again\n", encoding="utf-8")
    (tmp_path / "b.md").write_text("nothing here\n", encoding="utf-8")
    results = search_files([first, tmp_path / "b.md"], "HELLO")
    assert results == [FileMatch(path=first, name="a.md", preview="Hello (2 matches)")]


def test_search_files_truncates_preview(tmp_path):
    path = tmp_path / "long.md"
    path.write_text("   " + "x" * 100 + " needle\n", encoding="utf-8")
    (result,) = search_files([path], "needle")
    assert result.preview == "x" * PREVIEW_CHARS


def test_search_files_honours_limit_and_skips_missing(tmp_path):
    paths = [tmp_path / "missing.md"]
    for i in range(5):
        path = tmp_path / f"{i}.md"
        path.write_text("match\n", encoding="utf-8")
        paths.append(path)
    results = search_files(paths, "match", limit=3)
    assert [r.name for r in results] == ["0.md", "1.md", "2.md"]


def test_search_files_empty_query(tmp_path):
    path = tmp_path / "a.md"
    path.write_text("anything\n", encoding="utf-8")
    assert search_files([path], "") == []
