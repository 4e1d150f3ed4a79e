# backend/weekly_report/ai/config.py

"""
OpenAI 連携に必要な設定値。
"""

from dataclasses import dataclass
from functools import lru_cache

from weekly_report.utils.config import get_env


@dataclass(frozen=True)
class OpenAIConfig:
    """OpenAI API 用の設定値コンテナ。"""

    api_key: str
    model: str


@lru_cache()
def get_openai_config() -> OpenAIConfig:
    """
    環境変数から OpenAI 設定を読み込む。

    必須:
      - OPENAI_API_KEY

    任意:
      - OPENAI_MODEL (デフォルト: gpt-4o)
    """
    return OpenAIConfig(
        api_key=get_env("OPENAI_API_KEY"),
        model=get_env("OPENAI_MODEL", default="gpt-4o", required=False),
    )
