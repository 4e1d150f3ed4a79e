# backend/weekly_report/notion/schemas.py

"""
Notion から取得したデータを内部で扱うためのスキーマ定義。
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

UNTITLED = "Untitled"


class PageUpdate(BaseModel):
    """
    前回チェック以降に更新された 1 ページ分の情報。

    1 回の走査の中だけで生成され、週報に畳み込まれた後は破棄される。
    """

    page_id: str = Field(..., description="Notion ページ ID（ハイフン区切り）")
    title: str = Field(UNTITLED, description="ページタイトル。取得できない場合は Untitled")
    last_edited_time: datetime = Field(..., description="Notion 側の最終更新日時")
    content: str = Field("", description="抽出したテキストを改行で連結したもの")


class TraversalIssue(BaseModel):
    """
    走査中に発生した部分的な失敗。

    走査自体は止めずに続行し、その理由をここに残す。
    """

    page_id: str = Field(..., description="失敗したページ / ブロックの ID")
    reason: str = Field(..., description="失敗理由（例外メッセージなど）")


class ExploreResult(BaseModel):
    """1 つのルートページから辿った結果。"""

    updates: List[PageUpdate] = Field(default_factory=list)
    issues: List[TraversalIssue] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        """一部のページ / ブロックが取得できなかった場合 True。"""
        return bool(self.issues)

    def extend(self, other: "ExploreResult") -> None:
        self.updates.extend(other.updates)
        self.issues.extend(other.issues)


class DestinationKind(str, Enum):
    """書き込み先の種別。"""

    PAGE = "page"
    DATABASE = "database"


class DestinationCheck(BaseModel):
    """書き込み先 ID にアクセスできるかどうかの診断結果。"""

    destination_id: str
    accessible: bool
    kind: Optional[DestinationKind] = None
    title: Optional[str] = None
    error: Optional[str] = None


class TokenCheck(BaseModel):
    """Notion トークンの有効性診断結果。"""

    valid: bool
    bot_name: Optional[str] = None
    bot_id: Optional[str] = None
    error: Optional[str] = None


class TimeWindow(BaseModel):
    """
    走査対象期間。

    start は直前のウォーターマーク、end は走査開始時点の現在時刻。
    """

    start: datetime
    end: datetime


class DestinationAccessResponse(BaseModel):
    """
    /notion/check-access のレスポンス。

    アクセスできない場合は設定見直しのヒントを添える。
    """

    check: DestinationCheck
    hints: List[str] = Field(default_factory=list)
