# backend/weekly_report/notion/walker.py

"""
監視対象ページのツリー走査。

責務:
- ページのメタデータと直下のブロックを取得する
- 基準日時（ウォーターマーク）より後に更新されていれば本文を抽出する
- 子ページ（child_page）を深さ制限付きで再帰的に辿る
- 取得失敗は例外として上げず、TraversalIssue として結果に残す
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .blocks import BlockKind, parse_block
from .client import NotionClient
from .schemas import UNTITLED, ExploreResult, PageUpdate, TraversalIssue

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 2


def _as_aware(value: datetime) -> datetime:
    """naive な datetime は UTC とみなす。"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_notion_time(value: str) -> datetime:
    """Notion の ISO8601 文字列（末尾 Z）を aware な datetime に変換する。"""
    return _as_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))


def extract_title(page: Dict[str, Any]) -> str:
    """
    ページオブジェクトからタイトルを取り出す。

    データベース配下のページはタイトルプロパティ名が任意なので、
    type == "title" のプロパティを優先して探す。
    """
    properties: Dict[str, Any] = page.get("properties") or {}

    candidates = [prop for prop in properties.values() if isinstance(prop, dict) and prop.get("type") == "title"]
    if "title" in properties and isinstance(properties["title"], dict):
        candidates.append(properties["title"])

    for prop in candidates:
        title_parts = prop.get("title") or []
        if title_parts and isinstance(title_parts[0], dict):
            text = title_parts[0].get("plain_text")
            if isinstance(text, str) and text:
                return text

    return UNTITLED


class PageTreeWalker:
    """
    ルートページから子ページを辿り、更新されたページを PageUpdate として集めるクラス。

    - 基準日時は呼び出しごとに引数で受け取る（ウォーターマークの所有者は Aggregator）
    - depth > max_depth で打ち切るため、循環したページ構造でも停止する
    """

    def __init__(self, client: Optional[NotionClient] = None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.client = client or NotionClient()
        self.max_depth = max_depth

    def explore(
        self,
        page_id: str,
        *,
        since: datetime,
        until: Optional[datetime] = None,
        depth: int = 0,
        max_depth: Optional[int] = None,
    ) -> ExploreResult:
        """
        page_id 配下を深さ優先で走査する。

        結果の順序は「このページ自身の更新（最大 1 件）→ 子ページを並び順に再帰」。
        """
        if max_depth is None:
            max_depth = self.max_depth

        result = ExploreResult()
        if depth > max_depth:
            return result

        since = _as_aware(since)
        if until is not None:
            until = _as_aware(until)

        try:
            page = self.client.retrieve_page(page_id)
            listing = self.client.list_block_children(page_id)
            last_edited_time = _parse_notion_time(page["last_edited_time"])
        except Exception as exc:  # noqa: BLE001 - 1 ページの失敗で走査全体を止めない
            logger.warning("Failed to explore Notion page. page_id=%s error=%s", page_id, exc)
            result.issues.append(TraversalIssue(page_id=page_id, reason=str(exc)))
            return result

        blocks: List[Dict[str, Any]] = listing.get("results", [])
        if listing.get("has_more"):
            logger.warning(
                "Block listing truncated at %d blocks. page_id=%s", len(blocks), page_id
            )
            result.issues.append(
                TraversalIssue(
                    page_id=page_id,
                    reason=f"block listing truncated after {len(blocks)} blocks",
                )
            )

        parsed = []
        for block in blocks:
            try:
                parsed.append(parse_block(block))
            except Exception as exc:  # noqa: BLE001
                block_id = block.get("id", page_id) if isinstance(block, dict) else page_id
                logger.warning(
                    "Failed to parse Notion block. page_id=%s block_id=%s error=%s",
                    page_id,
                    block_id,
                    exc,
                )
                result.issues.append(TraversalIssue(page_id=block_id, reason=str(exc)))

        if self._is_updated(last_edited_time, since, until):
            unrecognized = sum(1 for block in parsed if block.kind == BlockKind.UNRECOGNIZED)
            if unrecognized:
                logger.debug("Skipped %d unrecognized blocks. page_id=%s", unrecognized, page_id)

            lines = [block.line for block in parsed if block.line is not None]
            result.updates.append(
                PageUpdate(
                    page_id=page_id,
                    title=extract_title(page),
                    last_edited_time=last_edited_time,
                    content="\n".join(lines),
                )
            )

        for block in parsed:
            if not block.is_child_page:
                continue
            child = self.explore(
                block.block_id,
                since=since,
                until=until,
                depth=depth + 1,
                max_depth=max_depth,
            )
            result.extend(child)

        return result

    @staticmethod
    def _is_updated(last_edited_time: datetime, since: datetime, until: Optional[datetime]) -> bool:
        if last_edited_time <= since:
            return False
        if until is not None and last_edited_time > until:
            return False
        return True
