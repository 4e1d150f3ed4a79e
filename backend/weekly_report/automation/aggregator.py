# backend/weekly_report/automation/aggregator.py

"""
設定された複数のルートページを走査し、1 回分の更新一覧と対象期間をまとめる。

ウォーターマークの読み書きはこのモジュールでのみ行う。
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from weekly_report.notion.schemas import PageUpdate, TimeWindow, TraversalIssue
from weekly_report.notion.walker import PageTreeWalker
from weekly_report.utils.ids import normalize_notion_id

from .schemas import ScanResult
from .state import WatermarkStore, get_watermark_store

logger = logging.getLogger(__name__)


def _normalize_now(now: Optional[datetime]) -> datetime:
    """
    naive な datetime が渡された場合でも UTC として扱うヘルパー。
    """
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


class UpdateAggregator:
    """
    ルートページごとに PageTreeWalker を呼び出し、結果を連結するサービス。

    - ルート間の重複排除は行わない（共有された子ページは 2 回現れうる）
    - scan() は WatermarkStore.lock で直列化される
    """

    def __init__(
        self,
        page_ids: Iterable[str],
        *,
        walker: Optional[PageTreeWalker] = None,
        store: Optional[WatermarkStore] = None,
    ) -> None:
        self.page_ids: List[str] = [normalize_notion_id(page_id.strip()) for page_id in page_ids if page_id.strip()]
        self.walker = walker or PageTreeWalker()
        self.store = store or get_watermark_store()

    def _collect(
        self, since: datetime, until: Optional[datetime]
    ) -> Tuple[List[PageUpdate], List[TraversalIssue]]:
        updates: List[PageUpdate] = []
        issues: List[TraversalIssue] = []

        for page_id in self.page_ids:
            logger.info("Processing page: %s", page_id)
            try:
                explored = self.walker.explore(page_id, since=since, until=until)
            except Exception as exc:  # noqa: BLE001 - 1 ルートの失敗で他のルートを止めない
                logger.exception("Failed to scan root page. page_id=%s", page_id)
                issues.append(TraversalIssue(page_id=page_id, reason=str(exc)))
                continue

            updates.extend(explored.updates)
            issues.extend(explored.issues)

        return updates, issues

    def scan(self, *, now: Optional[datetime] = None) -> ScanResult:
        """
        前回のウォーターマーク以降に更新されたページを集める。

        - now は呼び出し開始時に 1 度だけ決定し、period.end と新しいウォーターマークになる
        - period.start は更新前のウォーターマーク
        """
        with self.store.lock:
            now_norm = _normalize_now(now)
            since = self.store.value

            updates, issues = self._collect(since, None)
            result = ScanResult(
                updates=updates,
                period=TimeWindow(start=since, end=now_norm),
                issues=issues,
            )

            self.store.advance(now_norm)

        logger.info(
            "Found %d updated pages (issues=%d)", len(result.updates), len(result.issues)
        )
        return result

    def scan_range(self, start: datetime, end: datetime) -> ScanResult:
        """
        明示した期間 (start, end] に更新されたページを集める。ウォーターマークは読み書きしない。
        """
        start_norm = _normalize_now(start)
        end_norm = _normalize_now(end)

        updates, issues = self._collect(start_norm, end_norm)
        result = ScanResult(
            updates=updates,
            period=TimeWindow(start=start_norm, end=end_norm),
            issues=issues,
        )

        logger.info(
            "Found %d updated pages in custom range (issues=%d)",
            len(result.updates),
            len(result.issues),
        )
        return result
