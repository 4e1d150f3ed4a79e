# backend/tests/test_notion_blocks.py

import pytest

from notion_fakes import child_page_block, text_block
from weekly_report.notion.blocks import BlockKind, parse_block


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("paragraph", "Shipped X"),
        ("heading_1", "# Shipped X"),
        ("heading_2", "## Shipped X"),
        ("heading_3", "### Shipped X"),
        ("bulleted_list_item", "• Shipped X"),
        ("numbered_list_item", "1. Shipped X"),
    ],
)
def test_parse_block_renders_prefix_for_text_kinds(kind, expected):
    block = parse_block(text_block(kind, "Shipped X"))

    assert block.kind == BlockKind(kind)
    assert block.line == expected


def test_parse_block_to_do_reflects_checked_state():
    done = parse_block(text_block("to_do", "write report", checked=True))
    todo = parse_block(text_block("to_do", "review", checked=False))

    assert done.line == "[x] write report"
    assert todo.line == "[ ] review"


def test_parse_block_uses_only_first_rich_text_run():
    block = text_block("paragraph", "first")
    block["paragraph"]["rich_text"].append({"plain_text": " second"})

    assert parse_block(block).line == "first"


def test_empty_text_block_has_no_line():
    block = parse_block(text_block("paragraph", ""))

    assert block.kind == BlockKind.PARAGRAPH
    assert block.line is None


def test_unknown_block_kind_is_unrecognized():
    block = parse_block({"id": "img-1", "type": "image", "image": {}})

    assert block.kind == BlockKind.UNRECOGNIZED
    assert block.raw_type == "image"
    assert block.line is None


def test_child_page_is_not_rendered_but_marked_for_recursion():
    block = parse_block(child_page_block("child-1", title="Sub"))

    assert block.is_child_page
    assert block.block_id == "child-1"
    assert block.line is None
