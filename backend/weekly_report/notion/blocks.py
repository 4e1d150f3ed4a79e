# backend/weekly_report/notion/blocks.py

"""
Notion ブロックからの表示テキスト抽出。

ブロック種別ごとに「接頭辞 + 最初の rich_text の plain_text」を取り出す。
未対応の種別は UNRECOGNIZED として明示的に返し、呼び出し側で数えられるようにする。
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class BlockKind(str, Enum):
    """週報で扱うブロック種別。"""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    CHILD_PAGE = "child_page"
    UNRECOGNIZED = "unrecognized"


# to_do はチェック状態で接頭辞が変わるので別扱い
_PREFIXES: Dict[BlockKind, str] = {
    BlockKind.PARAGRAPH: "",
    BlockKind.HEADING_1: "# ",
    BlockKind.HEADING_2: "## ",
    BlockKind.HEADING_3: "### ",
    BlockKind.BULLETED_LIST_ITEM: "• ",
    BlockKind.NUMBERED_LIST_ITEM: "1. ",
}

_TEXT_KINDS = frozenset(_PREFIXES) | {BlockKind.TO_DO}


class BlockText(BaseModel):
    """
    1 ブロック分の表示用テキスト。

    - text が空のテキスト系ブロックは line が None になる（スキップ対象）
    - CHILD_PAGE は本文には含めず、再帰探索の対象になる
    """

    kind: BlockKind
    block_id: str = ""
    text: str = ""
    prefix: str = ""
    raw_type: Optional[str] = Field(None, description="Notion 上の元の type 値")

    @property
    def line(self) -> Optional[str]:
        if self.kind not in _TEXT_KINDS or not self.text:
            return None
        return f"{self.prefix}{self.text}"

    @property
    def is_child_page(self) -> bool:
        return self.kind == BlockKind.CHILD_PAGE


def _first_plain_text(payload: Dict[str, Any]) -> str:
    rich_text = payload.get("rich_text") or []
    if not rich_text:
        return ""
    first = rich_text[0]
    if not isinstance(first, dict):
        return ""
    text = first.get("plain_text")
    return text if isinstance(text, str) else ""


def parse_block(block: Dict[str, Any]) -> BlockText:
    """
    Notion のブロックオブジェクトを BlockText に変換する。

    payload の構造が想定外の場合は例外がそのまま上がる（呼び出し側でブロック単位に握る）。
    """
    raw_type = block.get("type")
    block_id = block.get("id", "")

    try:
        kind = BlockKind(raw_type)
    except ValueError:
        return BlockText(kind=BlockKind.UNRECOGNIZED, block_id=block_id, raw_type=raw_type)

    if kind == BlockKind.UNRECOGNIZED:
        return BlockText(kind=kind, block_id=block_id, raw_type=raw_type)

    payload = block.get(raw_type) or {}

    if kind == BlockKind.CHILD_PAGE:
        return BlockText(
            kind=kind,
            block_id=block_id,
            text=payload.get("title", "") or "",
            raw_type=raw_type,
        )

    if kind == BlockKind.TO_DO:
        prefix = "[x] " if payload.get("checked") else "[ ] "
    else:
        prefix = _PREFIXES[kind]

    return BlockText(
        kind=kind,
        block_id=block_id,
        text=_first_plain_text(payload),
        prefix=prefix,
        raw_type=raw_type,
    )
