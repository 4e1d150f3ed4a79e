# backend/weekly_report/automation/router.py
"""
週報生成を手動で実行するための FastAPI ルーター定義。

- /generate-report             進捗をプレーンテキストでストリーム
- /api/generate-report         JSON サマリ
- /api/generate-report/custom  期間指定（YYYY-MM-DD）
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from .config import get_report_config
from .reporting_service import WeeklyReportService
from .schemas import ReportRunResponse

router = APIRouter(tags=["report"])

DATE_FORMAT = "%Y-%m-%d"


# テスト時に FastAPI dependency_overrides で差し替え可能にする
def get_report_service() -> WeeklyReportService:
    return WeeklyReportService()


def _parse_date(name: str, value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid '{name}' date: {value!r}. Expected format YYYY-MM-DD.",
        ) from exc


def parse_date_range(start: str, end: str) -> Tuple[datetime, datetime]:
    """
    YYYY-MM-DD の開始日・終了日を、レポートのタイムゾーンでの
    [開始日 00:00, 終了日 23:59:59.999999] に変換する。
    """
    start_date = _parse_date("start", start)
    end_date = _parse_date("end", end)

    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"'start' ({start}) must not be after 'end' ({end}).",
        )

    tz = get_report_config().timezone
    return (
        datetime.combine(start_date, time.min, tzinfo=tz),
        datetime.combine(end_date, time.max, tzinfo=tz),
    )


@router.get(
    "/generate-report",
    response_class=StreamingResponse,
    summary="週報を生成（進捗ログをストリーム）",
)
def generate_report_with_progress(
    service: WeeklyReportService = Depends(get_report_service),
) -> StreamingResponse:
    """
    走査・生成・書き込みの進捗を 1 行ずつ返す。
    """
    return StreamingResponse(
        service.iter_progress(),
        media_type="text/plain; charset=utf-8",
    )


@router.get(
    "/api/generate-report",
    response_model=ReportRunResponse,
    summary="週報を生成（JSON）",
)
def generate_report(
    skip_empty: bool = Query(
        False,
        description="true の場合、更新 0 件なら週報を作成しない（定期実行用）",
    ),
    service: WeeklyReportService = Depends(get_report_service),
) -> ReportRunResponse:
    """
    前回チェック以降の更新から週報を作成し、結果のサマリを返す。

    - 定期実行（jobs.py）もこのエンドポイント経由で実行し、ウォーターマークを共有する
    - 書き込みに失敗した場合も 200 で success=false を返す
    - 予期しない例外発生時は 500 エラーとして扱う
    """
    try:
        result = service.run(publish_when_empty=not skip_empty)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate weekly report: {exc}",
        ) from exc

    return ReportRunResponse.from_result(result)


@router.get(
    "/api/generate-report/custom",
    response_model=ReportRunResponse,
    summary="期間を指定して週報を生成",
    description="start / end を YYYY-MM-DD で指定する。前回チェック日時は更新しない。",
)
def generate_report_for_range(
    start: str = Query(..., description="開始日 (YYYY-MM-DD)"),
    end: str = Query(..., description="終了日 (YYYY-MM-DD)。この日の終わりまでを含む"),
    service: WeeklyReportService = Depends(get_report_service),
) -> ReportRunResponse:
    start_at, end_at = parse_date_range(start, end)

    try:
        result = service.run_range(start_at, end_at)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate weekly report: {exc}",
        ) from exc

    return ReportRunResponse.from_result(result)
