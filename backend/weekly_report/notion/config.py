# backend/weekly_report/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from weekly_report.utils.config import get_env, get_env_int, split_csv
from weekly_report.utils.ids import normalize_notion_id

# blocks/children の page_size 上限（Notion API 仕様）
MAX_BLOCK_PAGE_SIZE = 100


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    api_key: str
    page_ids: Tuple[str, ...]
    report_parent_id: str
    database_title_property: str
    api_base_url: str
    api_version: str
    timeout_seconds: int
    block_page_size: int


@lru_cache()
def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    必須:
      - NOTION_API_KEY
      - NOTION_PAGE_IDS (カンマ区切り。旧名 NOTION_PAGE_ID も可)

    任意:
      - NOTION_REPORT_PARENT_ID        (デフォルト: NOTION_PAGE_IDS の先頭)
      - NOTION_DATABASE_TITLE_PROPERTY (デフォルト: Name)
      - NOTION_API_BASE_URL            (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION             (デフォルト: 2022-06-28)
      - NOTION_TIMEOUT_SECONDS         (デフォルト: 10)
      - NOTION_BLOCK_PAGE_SIZE         (デフォルト: 100)
    """
    api_key = get_env("NOTION_API_KEY")

    raw_page_ids = get_env("NOTION_PAGE_IDS", required=False) or get_env("NOTION_PAGE_ID")
    page_ids = tuple(normalize_notion_id(page_id) for page_id in split_csv(raw_page_ids))

    report_parent_id = get_env("NOTION_REPORT_PARENT_ID", required=False)
    if report_parent_id:
        report_parent_id = normalize_notion_id(report_parent_id.strip())
    else:
        report_parent_id = page_ids[0] if page_ids else ""

    database_title_property = get_env(
        "NOTION_DATABASE_TITLE_PROPERTY",
        default="Name",
        required=False,
    )
    api_base_url = get_env(
        "NOTION_API_BASE_URL",
        default="https://api.notion.com/v1",
        required=False,
    )
    api_version = get_env(
        "NOTION_API_VERSION",
        default="2022-06-28",
        required=False,
    )

    block_page_size = get_env_int("NOTION_BLOCK_PAGE_SIZE", default=MAX_BLOCK_PAGE_SIZE)
    block_page_size = max(1, min(block_page_size, MAX_BLOCK_PAGE_SIZE))

    return NotionConfig(
        api_key=api_key,
        page_ids=page_ids,
        report_parent_id=report_parent_id,
        database_title_property=database_title_property,
        api_base_url=api_base_url,
        api_version=api_version,
        timeout_seconds=get_env_int("NOTION_TIMEOUT_SECONDS", default=10),
        block_page_size=block_page_size,
    )
