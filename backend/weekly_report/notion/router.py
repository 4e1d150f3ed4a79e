# backend/weekly_report/notion/router.py

from fastapi import APIRouter, Depends, HTTPException, status

from weekly_report.notion.publisher import ReportPublisher
from weekly_report.notion.schemas import DestinationAccessResponse, TokenCheck

router = APIRouter(prefix="/notion", tags=["notion"])

ACCESS_HINTS = [
    "Notion で書き込み先ページを開き、右上の「…」→「コネクト」からインテグレーションを追加してください。",
    "NOTION_REPORT_PARENT_ID がページまたはデータベースの ID になっているか確認してください。",
    "ページ URL 末尾の 32 桁の ID はハイフンなしのまま指定できます。",
]


def get_publisher() -> ReportPublisher:
    return ReportPublisher()


@router.get(
    "/check-access",
    response_model=DestinationAccessResponse,
    summary="週報の書き込み先にアクセスできるか確認",
)
def check_destination_access(
    publisher: ReportPublisher = Depends(get_publisher),
) -> DestinationAccessResponse:
    """
    書き込み先 ID をページ / データベースとして取得できるか確認する。
    """
    try:
        check = publisher.check_destination()
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check Notion destination.",
        ) from exc

    hints = [] if check.accessible else list(ACCESS_HINTS)
    return DestinationAccessResponse(check=check, hints=hints)


@router.get(
    "/check-token",
    response_model=TokenCheck,
    summary="Notion トークンの有効性を確認",
)
def check_token(
    publisher: ReportPublisher = Depends(get_publisher),
) -> TokenCheck:
    try:
        return publisher.check_token()
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check Notion token.",
        ) from exc
