# backend/weekly_report/automation/reporting_service.py

"""
走査 → 週報生成 → Notion 書き込みの一連の流れをまとめるサービス。

責務:
- UpdateAggregator で更新ページと対象期間を取得
- ReportComposer で週報テキストを生成
- ReportPublisher で Notion に書き込み
- 手動実行（HTTP）向けに進捗ログをストリームで返す
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterator, Optional

from weekly_report.ai.service import ReportComposer, format_time
from weekly_report.notion.client import NotionClient
from weekly_report.notion.publisher import ReportPublisher
from weekly_report.notion.walker import PageTreeWalker

from .aggregator import UpdateAggregator
from .config import get_report_config
from .schemas import ReportRunResult, ScanResult

logger = logging.getLogger(__name__)


class WeeklyReportService:
    """
    週報生成の上位サービス。

    各コンポーネントはコンストラクタで差し替え可能（テストではダミーを渡す）。
    """

    def __init__(
        self,
        *,
        aggregator: Optional[UpdateAggregator] = None,
        composer: Optional[ReportComposer] = None,
        publisher: Optional[ReportPublisher] = None,
    ) -> None:
        if aggregator is None or publisher is None:
            client = NotionClient()
            config = get_report_config()
            if aggregator is None:
                aggregator = UpdateAggregator(
                    client.config.page_ids,
                    walker=PageTreeWalker(client, max_depth=config.max_depth),
                )
            if publisher is None:
                publisher = ReportPublisher(client, preflight=config.preflight)

        self.aggregator = aggregator
        self.composer = composer or ReportComposer()
        self.publisher = publisher

    def _finish(self, scan: ScanResult, *, publish_when_empty: bool) -> ReportRunResult:
        if not scan.updates and not publish_when_empty:
            logger.info("No updates found, skipping report generation")
            return ReportRunResult(scan=scan)

        report = self.composer.compose(scan.updates, scan.period)
        report_url = self.publisher.publish(report)
        return ReportRunResult(scan=scan, report=report, report_url=report_url, published=True)

    def run(self, *, now: Optional[datetime] = None, publish_when_empty: bool = True) -> ReportRunResult:
        """
        ウォーターマーク以降の更新から週報を作成する。

        publish_when_empty=False の場合、更新 0 件なら生成も書き込みも行わない（定期実行向け）。
        """
        scan = self.aggregator.scan(now=now)
        return self._finish(scan, publish_when_empty=publish_when_empty)

    def run_range(self, start: datetime, end: datetime) -> ReportRunResult:
        """指定期間の更新から週報を作成する。ウォーターマークは動かさない。"""
        scan = self.aggregator.scan_range(start, end)
        return self._finish(scan, publish_when_empty=True)

    def iter_progress(self, *, now: Optional[datetime] = None) -> Iterator[str]:
        """
        run() と同じ処理を行いながら、進捗をプレーンテキストの行として順に返す。

        途中で例外が起きた場合もストリームは閉じず、エラー行を出して終了する。
        """
        yield "週報生成を開始しました...\n"
        try:
            yield "Notionページの更新を確認中...\n"
            scan = self.aggregator.scan(now=now)
            yield f"{len(scan.updates)}件の更新を検出しました\n"

            if scan.partial:
                yield f"⚠ 一部のページを取得できませんでした（{len(scan.issues)}件）\n"

            if scan.updates:
                yield "\n更新されたページ一覧:\n"
                for update in scan.updates:
                    edited = format_time(update.last_edited_time, self.composer.tz)
                    yield f"- {update.title} ({edited})\n"

            yield "\nAIによる週報を生成中...\n"
            report = self.composer.compose(scan.updates, scan.period)

            yield "週報をNotionに保存中...\n"
            report_url = self.publisher.publish(report)
        except Exception as exc:  # noqa: BLE001 - ストリーム途中ではステータスを変えられない
            logger.exception("Weekly report generation failed.")
            yield f"\nエラーが発生しました: {exc}\n"
            return

        if report_url:
            yield "\n✅ 週報の生成が完了しました！\n"
            yield f"Notionで確認: {report_url}\n"
        else:
            yield "\n❌ 週報の保存中にエラーが発生しました\n"
