# backend/weekly_report/notion/publisher.py

"""
生成した週報を Notion に書き込むモジュール。

書き込み先 ID がページかデータベースかは設定からは分からないため、
1. ページ配下として作成
2. 4xx で拒否されたらデータベース配下として作成
の順に試す。
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from weekly_report.automation.config import get_report_config

from .client import NotionClient, NotionClientError, is_rejection
from .schemas import DestinationCheck, DestinationKind, TokenCheck
from .walker import extract_title

logger = logging.getLogger(__name__)

REPORT_HEADING = "今週のAIフィードバック"

# Notion の rich_text 1 要素あたりの文字数上限
RICH_TEXT_LIMIT = 2000


def build_report_title(today: Optional[date] = None) -> str:
    """作成するページのタイトル（例: 週報 2025/1/5）。"""
    today = today or datetime.now(get_report_config().timezone).date()
    return f"週報 {today.year}/{today.month}/{today.day}"


def _rich_text(content: str) -> List[Dict[str, Any]]:
    return [{"type": "text", "text": {"content": content}}]


def _chunk_text(text: str, limit: int = RICH_TEXT_LIMIT) -> List[str]:
    if not text:
        return [""]
    return [text[i : i + limit] for i in range(0, len(text), limit)]


def build_report_blocks(content: str) -> List[Dict[str, Any]]:
    """見出し 1 つ + 本文段落（2000 文字ごとに分割）のブロック配列を組み立てる。"""
    blocks: List[Dict[str, Any]] = [
        {
            "object": "block",
            "type": "heading_2",
            "heading_2": {"rich_text": _rich_text(REPORT_HEADING)},
        }
    ]
    for chunk in _chunk_text(content):
        blocks.append(
            {
                "object": "block",
                "type": "paragraph",
                "paragraph": {"rich_text": _rich_text(chunk)},
            }
        )
    return blocks


class ParentStrategy(Protocol):
    """
    書き込み先の親として振る舞う能力の最小インターフェース。

    実装例:
    - PageParentStrategy: parent.page_id としてページを作成
    - DatabaseParentStrategy: parent.database_id としてデータベース行を作成
    """

    kind: DestinationKind

    def create_entry_under(self, parent_id: str, title: str, content: str) -> str:  # pragma: no cover - Protocol
        ...


class PageParentStrategy:
    """ページ配下に子ページとして週報を作成する。"""

    kind = DestinationKind.PAGE

    def __init__(self, client: NotionClient) -> None:
        self._client = client

    def create_entry_under(self, parent_id: str, title: str, content: str) -> str:
        response = self._client.create_page(
            parent={"page_id": parent_id},
            properties={"title": {"title": _rich_text(title)}},
            children=build_report_blocks(content),
        )
        return response.get("url", "")


class DatabaseParentStrategy:
    """データベースの行として週報を作成する。タイトルプロパティ名は設定値を使う。"""

    kind = DestinationKind.DATABASE

    def __init__(self, client: NotionClient, title_property: str = "Name") -> None:
        self._client = client
        self._title_property = title_property

    def create_entry_under(self, parent_id: str, title: str, content: str) -> str:
        response = self._client.create_page(
            parent={"database_id": parent_id},
            properties={self._title_property: {"title": _rich_text(title)}},
            children=build_report_blocks(content),
        )
        return response.get("url", "")


class ReportPublisher:
    """
    週報テキストを Notion に書き込むサービス。

    publish() は成功時に作成ページの URL、失敗時に None を返す。
    失敗の詳細はログにのみ残る。
    """

    def __init__(
        self,
        client: Optional[NotionClient] = None,
        *,
        destination_id: Optional[str] = None,
        strategies: Optional[Sequence[ParentStrategy]] = None,
        preflight: bool = True,
    ) -> None:
        self.client = client or NotionClient()
        self.destination_id = destination_id or self.client.config.report_parent_id
        self.preflight = preflight
        if strategies is None:
            strategies = [
                PageParentStrategy(self.client),
                DatabaseParentStrategy(
                    self.client,
                    title_property=self.client.config.database_title_property,
                ),
            ]
        self._strategies: List[ParentStrategy] = list(strategies)

    def check_destination(self) -> DestinationCheck:
        """
        書き込み先 ID にアクセスできるかを確認する。

        ページとして取得できなければデータベースとして取得を試みる。
        """
        errors: List[str] = []

        try:
            page = self.client.retrieve_page(self.destination_id)
            return DestinationCheck(
                destination_id=self.destination_id,
                accessible=True,
                kind=DestinationKind.PAGE,
                title=extract_title(page),
            )
        except NotionClientError as exc:
            errors.append(f"page: {exc}")

        try:
            database = self.client.retrieve_database(self.destination_id)
            title_parts = database.get("title") or []
            first = title_parts[0] if title_parts else None
            title = first.get("plain_text") if isinstance(first, dict) else None
            return DestinationCheck(
                destination_id=self.destination_id,
                accessible=True,
                kind=DestinationKind.DATABASE,
                title=title,
            )
        except NotionClientError as exc:
            errors.append(f"database: {exc}")

        return DestinationCheck(
            destination_id=self.destination_id,
            accessible=False,
            error="; ".join(errors),
        )

    def check_token(self) -> TokenCheck:
        """Notion トークンが有効かどうかを users/me で確認する。"""
        try:
            user = self.client.retrieve_bot_user()
        except NotionClientError as exc:
            return TokenCheck(valid=False, error=str(exc))

        return TokenCheck(valid=True, bot_name=user.get("name"), bot_id=user.get("id"))

    def publish(self, report: str, *, today: Optional[date] = None) -> Optional[str]:
        """
        週報を書き込み、作成されたページの URL を返す。

        1. （preflight=True の場合）書き込み先の存在確認。失敗なら作成を試みずに None
        2. 各 strategy を順に試す。4xx で拒否された場合のみ次の strategy へ進む
        """
        title = build_report_title(today)

        if self.preflight:
            check = self.check_destination()
            if not check.accessible:
                logger.error(
                    "Report destination is not accessible. destination_id=%s error=%s",
                    self.destination_id,
                    check.error,
                )
                return None

        for index, strategy in enumerate(self._strategies):
            try:
                url = strategy.create_entry_under(self.destination_id, title, report)
            except NotionClientError as exc:
                has_next = index + 1 < len(self._strategies)
                if is_rejection(exc) and has_next:
                    logger.warning(
                        "Creating report as %s child was rejected; trying next strategy. error=%s",
                        strategy.kind.value,
                        exc,
                    )
                    continue
                logger.error(
                    "Failed to write weekly report to Notion. destination_id=%s error=%s",
                    self.destination_id,
                    exc,
                )
                return None

            logger.info("Weekly report created: %s", url)
            return url

        return None
