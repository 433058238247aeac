from __future__ import annotations

import asyncio

import pytest

from rmd.app import ReaderApp, main
from rmd.session import Focus, Mode, ReaderSession
from rmd.settings import Settings, Theme


@pytest.fixture
def app(tmp_path):
    (tmp_path / "README.md").write_text("# Hello\n\nworld\n\nmore words\n", encoding="utf-8")
    (tmp_path / "other.md").write_text("other world\n", encoding="utf-8")
    return ReaderApp(ReaderSession(tmp_path, settings=Settings()))


def test_app_opens_readme_and_finds_text(app):
    async def drive():
        async with app.run_test() as pilot:
            assert app.session.current_file.name == "README.md"

            await pilot.press("slash")
            await pilot.pause()
            await pilot.press("w", "o")
            await pilot.pause()
            assert app.session.mode is Mode.FIND
            assert app.session.find.query == "wo"
            assert app.session.find.matches == [2, 4]

            await pilot.press("enter")
            await pilot.pause()
            assert app.session.find.current_match == 4

            await pilot.press("escape")
            await pilot.pause()
            assert app.session.mode is Mode.NORMAL
            assert app.session.find.query == ""

    asyncio.run(drive())


def test_app_navigation_keys(app):
    async def drive():
        async with app.run_test() as pilot:
            await pilot.press("g", "g")
            assert app.session.selected_index == 0
            await pilot.press("j")
            assert app.session.selected_index == 1
            await pilot.press("tab")
            assert app.session.focus is Focus.CONTENT
            await pilot.press("h")
            assert app.session.focus is Focus.SIDEBAR

    asyncio.run(drive())


def test_app_settings_and_about(app):
    async def drive():
        async with app.run_test() as pilot:
            await pilot.press("ctrl+p")
            assert app.session.mode is Mode.SETTINGS
            await pilot.press("down", "enter")
            assert app.session.settings.theme is Theme.LIGHT
            await pilot.press("escape")
            assert app.session.mode is Mode.NORMAL

            await pilot.press("question_mark")
            assert app.session.mode is Mode.ABOUT
            await pilot.press("q")
            assert app.session.mode is Mode.NORMAL

    asyncio.run(drive())


def test_app_search_all_files(app):
    async def drive():
        async with app.run_test() as pilot:
            await pilot.press("ctrl+s")
            await pilot.pause()
            assert app.session.mode is Mode.SEARCH
            await pilot.press("o", "t", "h")
            await pilot.pause()
            assert [r.name for r in app.session.search_results] == ["other.md"]
            await pilot.press("enter")
            await pilot.pause()
            assert app.session.current_file.name == "other.md"
            assert app.session.mode is Mode.FIND
            assert app.session.find.query == "oth"

    asyncio.run(drive())


def test_cli_rejects_missing_path(tmp_path, capsys):
    assert main([str(tmp_path / "nope")]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_cli_rejects_file_path(tmp_path, capsys):
    path = tmp_path / "a.md"
    path.write_text("x", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "not a directory" in capsys.readouterr().err
