from __future__ import annotations

from rmd.markup import (
    BLANK,
    EMPTY_FILE_TEXT,
    RULE_WIDTH,
    Code,
    Emphasis,
    Line,
    Link,
    Plain,
    Strong,
    render_markdown,
)


def texts(lines: list[Line]) -> list[str]:
    return [line.plain_text() for line in lines]


def test_heading_and_paragraph():
    lines = render_markdown("# Title\n\nHello world")
    assert texts(lines) == ["# Title", "", "Hello world"]
    assert lines[0].heading_level == 1
    assert lines[1].is_blank
    assert lines[2].heading_level == 0


def test_empty_input_renders_placeholder():
    assert render_markdown("") == [Line.plain(EMPTY_FILE_TEXT)]
    assert render_markdown("\n\n   \n") == [Line.plain(EMPTY_FILE_TEXT)]


def test_rendering_is_deterministic():
    source = "# A\n\n- one\n- two\n\n> quote\n\n| x | y |\n|---|---|\n| 1 | 2 |\n"
    assert render_markdown(source) == render_markdown(source)


def test_heading_levels():
    lines = render_markdown("## Sub\n\n###### Tiny")
    assert texts(lines) == ["## Sub", "", "###### Tiny"]
    assert [line.heading_level for line in lines] == [2, 0, 6]


def test_table_columns_are_padded_to_widest_cell():
    lines = render_markdown("| a | bb |\n|---|---|\n| ccc | d |\n")
    assert texts(lines) == [
        "┌─────┬────┐",
        "│ a   │ bb │",
        "├─────┼────┤",
        "│ ccc │ d  │",
        "└─────┴────┘",
    ]
    assert all(line.is_table for line in lines)
    assert [line.is_table_separator for line in lines] == [True, False, True, False, True]


def test_table_is_followed_by_blank_line():
    lines = render_markdown("| a |\n|---|\n| b |\n\nafter")
    assert texts(lines)[-2:] == ["", "after"]
    assert not lines[-1].is_table


def test_table_cells_flatten_inline_markup():
    lines = render_markdown("| *x* | `y` |\n|---|---|\n")
    assert lines[1].plain_text() == "│ x │ `y` │"


def test_bullet_list():
    lines = render_markdown("- one\n- two\n")
    assert texts(lines) == ["• one", "• two"]
    assert all(line.is_list_item for line in lines)


def test_nested_list_is_indented():
    lines = render_markdown("- a\n  - b\n- c\n")
    assert texts(lines) == ["• a", "  • b", "• c"]


def test_ordered_list_counts_from_declared_start():
    assert texts(render_markdown("3. x\n4. y\n")) == ["3. x", "4. y"]
    assert texts(render_markdown("1. x\n1. y\n")) == ["1. x", "2. y"]


def test_task_list_markers():
    lines = render_markdown("- [ ] todo\n- [x] done\n")
    assert texts(lines) == ["☐ todo", "✓ done"]


def test_block_close_blank_lines_are_not_merged():
    lines = render_markdown("- a\n\n- b\n\nafter")
    assert texts(lines) == ["• a", "", "• b", "", "", "after"]


def test_code_block():
    lines = render_markdown("```python\nprint(1)\nx = 2\n```\n")
    assert texts(lines) == ["```python", "  print(1)", "  x = 2", "```"]
    assert all(line.is_code_block for line in lines)


def test_indented_code_block_has_no_language():
    lines = render_markdown("    raw *text*\n")
    assert texts(lines) == ["```", "  raw *text*", "```"]


def test_blockquote_is_prefixed():
    lines = render_markdown("> quoted\n\nafter")
    assert texts(lines) == ["│ quoted", "", "", "after"]
    assert lines[0].is_blockquote
    assert not lines[-1].is_blockquote


def test_horizontal_rule():
    lines = render_markdown("a\n\n---\n\nb")
    assert texts(lines) == ["a", "", "─" * RULE_WIDTH, "", "b"]
    assert lines[2].is_horizontal_rule


def test_inline_segments_keep_their_order():
    lines = render_markdown("Some *em* and **strong** and `code` [link](http://x)")
    assert lines[0].segments == (
        Plain("Some "),
        Emphasis("em"),
        Plain(" and "),
        Strong("strong"),
        Plain(" and "),
        Code("code"),
        Plain(" "),
        Link("link", "http://x"),
    )


def test_nested_emphasis_splits_outer_span():
    lines = render_markdown("*a **b** c*")
    assert lines[0].segments == (Emphasis("a "), Strong("b"), Emphasis(" c"))


def test_link_absorbs_nested_formatting():
    lines = render_markdown("[a *b*](u)")
    assert lines[0].segments == (Link("a b", "u"),)


def test_empty_link_shows_url():
    lines = render_markdown("[](http://example.com)")
    assert lines[0].segments == (Link("http://example.com", "http://example.com"),)


def test_image_renders_as_link():
    lines = render_markdown("![diagram](pic.png)")
    assert lines[0].segments == (Link("diagram", "pic.png"),)


def test_soft_break_is_a_space():
    assert texts(render_markdown("a\nb")) == ["a b"]


def test_hard_break_starts_new_line():
    assert texts(render_markdown("a  \nb")) == ["a", "b"]


def test_hard_break_inside_quote_keeps_prefix():
    lines = render_markdown("> a  \n> b")
    assert texts(lines) == ["│ a", "│ b"]
    assert all(line.is_blockquote for line in lines)


def test_strikethrough_text_is_kept():
    assert texts(render_markdown("~~gone~~ text")) == ["gone text"]


def test_search_text_drops_backticks():
    line = render_markdown("run `make`")[0]
    assert line.plain_text() == "run `make`"
    assert line.search_text() == "run make"


def test_blank_line_constant():
    assert BLANK.is_blank
    assert BLANK.plain_text() == ""


def test_ordered_list_can_start_at_zero():
    assert texts(render_markdown("0. a\n1. b\n")) == ["0. a", "1. b"]


def test_list_inside_blockquote_keeps_quote_marker():
    lines = render_markdown("> - a\n> - b\n\ntext")
    assert texts(lines) == ["│ • a", "│ • b", "", "", "text"]
    assert all(line.is_list_item for line in lines[:2])


def test_heading_code_and_rule_inside_blockquote():
    lines = render_markdown("> # Title\n>\n> ```\n> x\n> ```\n>\n> ---\n")
    assert texts(lines) == [
        "│ # Title",
        "",
        "│ ```",
        "│   x",
        "│ ```",
        "",
        "│ " + "─" * RULE_WIDTH,
    ]
    assert lines[0].heading_level == 1
    assert lines[3].is_code_block
    assert lines[6].is_horizontal_rule


def test_table_cell_keeps_image_label():
    lines = render_markdown("| a |\n|---|\n| ![i](p.png) |\n")
    assert lines[3].plain_text() == "│ i │"


def test_code_block_splits_on_newlines_only():
    lines = render_markdown("```\na\x0cb\nc\u2028d\n```\n")
    assert texts(lines) == ["```", "  a\x0cb", "  c\u2028d", "```"]


def test_code_block_keeps_inner_blank_lines():
    lines = render_markdown("```\na\n\nb\n```\n")
    assert texts(lines) == ["```", "  a", "  ", "  b", "```"]
    assert texts(render_markdown("```\n```\n")) == ["```", "```"]
