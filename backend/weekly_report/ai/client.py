# backend/weekly_report/ai/client.py

"""
OpenAI Chat Completions を呼び出すクライアント。
"""

from typing import Dict, List, Optional

from openai import OpenAI, OpenAIError

from .config import OpenAIConfig, get_openai_config


class OpenAIClientError(RuntimeError):
    """テキスト生成サービス呼び出し時のエラー。"""


class OpenAIChatClient:
    """
    role 付きメッセージ列を渡し、生成テキストを 1 件受け取るだけのクライアント。

    SDK クライアントは初回呼び出し時に生成する（import 時に API キーを要求しないため）。
    """

    def __init__(self, config: Optional[OpenAIConfig] = None) -> None:
        self._config = config
        self._client = None

    @property
    def config(self) -> OpenAIConfig:
        if self._config is None:
            self._config = get_openai_config()
        return self._config

    def _get_client(self):
        if self._client is None:
            self._client = OpenAI(api_key=self.config.api_key)
        return self._client

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Chat Completions を 1 回呼び出し、最初の choice の本文を返す。

        :raises OpenAIClientError: API 呼び出しの失敗や空レスポンス。
        """
        try:
            completion = self._get_client().chat.completions.create(
                model=self.config.model,
                messages=messages,
            )
        except OpenAIError as exc:
            raise OpenAIClientError(str(exc)) from exc

        if not completion.choices:
            raise OpenAIClientError("OpenAI returned no choices.")

        content = completion.choices[0].message.content
        if content is None:
            raise OpenAIClientError("OpenAI returned an empty message.")
        return content
