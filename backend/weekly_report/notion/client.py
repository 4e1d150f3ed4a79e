# backend/weekly_report/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。
"""

from typing import Any, Dict, Optional

import httpx

from .config import NotionConfig, get_notion_config


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotionAuthError(NotionClientError):
    """認証・権限関連のエラー。"""


class NotionAPIError(NotionClientError):
    """その他 Notion API 呼び出し時のエラー。"""


def is_rejection(exc: BaseException) -> bool:
    """
    Notion がリクエストを 4xx で拒否したかどうか。

    通信エラー（status_code なし）や 5xx は拒否とはみなさない。
    """
    status_code = getattr(exc, "status_code", None)
    return isinstance(exc, NotionClientError) and status_code is not None and 400 <= status_code < 500


class NotionClient:
    """
    Notion API の薄いラッパークライアント。

    - ページ / データベースのメタデータ取得
    - 子ブロック一覧の取得
    - ページ作成
    - トークン診断用の users/me
    """

    def __init__(self, config: Optional[NotionConfig] = None, timeout: Optional[float] = None) -> None:
        self.config = config or get_notion_config()
        self._timeout = timeout if timeout is not None else float(self.config.timeout_seconds)

    def _build_headers(self) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise NotionAuthError("Unauthorized. Check NOTION_API_KEY.", status_code=401)
        if response.status_code == 403:
            raise NotionAuthError(
                "Forbidden. Check Notion integration permissions.", status_code=403
            )
        if response.status_code >= 400:
            raise NotionAPIError(
                f"Notion API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

    def _parse_json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise NotionAPIError("Unexpected Notion API response: body is not JSON.") from exc
        if not isinstance(data, dict):
            raise NotionAPIError("Unexpected Notion API response format: body is not an object.")
        return data

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.config.api_base_url}{path}"
        try:
            response = httpx.get(
                url,
                headers=self._build_headers(),
                params=params,
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            raise NotionClientError(f"Failed to call Notion API: {exc}") from exc

        self._raise_for_status(response)
        return self._parse_json(response)

    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        """ページのメタデータ（last_edited_time / properties など）を取得する。"""
        return self._get(f"/pages/{page_id}")

    def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        """データベースのメタデータを取得する。書き込み先の診断用。"""
        return self._get(f"/databases/{database_id}")

    def list_block_children(self, block_id: str) -> Dict[str, Any]:
        """
        ブロックの子要素を 1 ページ分だけ取得する。

        返り値は Notion API の生レスポンス（results / has_more / next_cursor）。
        2 ページ目以降は取得しない。
        """
        data = self._get(
            f"/blocks/{block_id}/children",
            params={"page_size": self.config.block_page_size},
        )
        results = data.get("results", [])
        if not isinstance(results, list):
            raise NotionAPIError("Unexpected Notion API response format: 'results' is not a list.")
        return data

    def retrieve_bot_user(self) -> Dict[str, Any]:
        """トークンに紐づくユーザー（インテグレーションの bot）を取得する。"""
        return self._get("/users/me")

    def create_page(
        self,
        parent: Dict[str, Any],
        properties: Dict[str, Any],
        children: Optional[list] = None,
    ) -> Dict[str, Any]:
        """
        ページを新規作成する。

        :param parent: {"page_id": ...} または {"database_id": ...}
        :return: 作成されたページオブジェクト（url を含む）
        """
        url = f"{self.config.api_base_url}/pages"

        body: Dict[str, Any] = {"parent": parent, "properties": properties}
        if children:
            body["children"] = children

        try:
            response = httpx.post(
                url,
                headers=self._build_headers(),
                json=body,
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            raise NotionClientError(f"Failed to create Notion page: {exc}") from exc

        self._raise_for_status(response)
        return self._parse_json(response)
