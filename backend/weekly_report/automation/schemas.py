# backend/weekly_report/automation/schemas.py

"""
走査結果・週報生成結果のスキーマ定義。
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from weekly_report.notion.schemas import PageUpdate, TimeWindow, TraversalIssue


class ScanResult(BaseModel):
    """複数ルートページを走査した結果と、その対象期間。"""

    updates: List[PageUpdate] = Field(default_factory=list)
    period: TimeWindow
    issues: List[TraversalIssue] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        """一部のページが取得できなかった場合 True。"""
        return bool(self.issues)


class ReportRunResult(BaseModel):
    """走査 → 生成 → 書き込みの 1 回分の結果。"""

    scan: ScanResult
    report: Optional[str] = Field(None, description="生成した週報テキスト。生成を省略した場合は None")
    report_url: Optional[str] = Field(None, description="作成された Notion ページの URL")
    published: bool = Field(False, description="Notion への書き込みを試みたかどうか")

    @property
    def succeeded(self) -> bool:
        return self.report_url is not None


class UpdatedPageSummary(BaseModel):
    """レスポンス用の更新ページ概要（本文は含めない）。"""

    page_id: str
    title: str
    last_edited_time: datetime


class ReportRunResponse(BaseModel):
    """
    /api/generate-report のレスポンス全体。
    """

    success: bool = Field(..., description="Notion への書き込みまで成功したかどうか")
    published: bool = Field(False, description="週報の作成を試みたかどうか（更新 0 件でスキップした場合 False）")
    updates_count: int
    updated_pages: List[UpdatedPageSummary]
    period_start: datetime
    period_end: datetime
    report_url: Optional[str] = None
    partial: bool = Field(False, description="一部のページの取得に失敗した場合 True")
    issues: List[TraversalIssue] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ReportRunResult) -> "ReportRunResponse":
        scan = result.scan
        return cls(
            success=result.succeeded,
            published=result.published,
            updates_count=len(scan.updates),
            updated_pages=[
                UpdatedPageSummary(
                    page_id=update.page_id,
                    title=update.title,
                    last_edited_time=update.last_edited_time,
                )
                for update in scan.updates
            ],
            period_start=scan.period.start,
            period_end=scan.period.end,
            report_url=result.report_url,
            partial=scan.partial,
            issues=scan.issues,
        )
