# backend/weekly_report/ai/service.py
"""
週報テキスト生成のサービス層。

責務:
- 更新ページ一覧から LLM 向けのプロンプトを組み立てる
- 外部の LLM クライアント（OpenAI 等）を差し替え可能な構造にする
- 生成に失敗しても例外は上げず、エラー内容を含む文面を週報として返す
"""

import logging
from datetime import datetime, tzinfo
from typing import Callable, Dict, List, Optional, Sequence

from weekly_report.automation.config import get_report_config
from weekly_report.notion.schemas import PageUpdate, TimeWindow

from .client import OpenAIChatClient

logger = logging.getLogger(__name__)


# role 付きメッセージ列 -> 生成テキスト を返す callable
ChatCompleter = Callable[[List[Dict[str, str]]], str]

LLM_SYSTEM_PROMPT = (
    "あなたは個人の生産性向上とAI活用を支援するライフコーチです。"
    "Notionの更新内容を分析して、週次のフィードバックを提供します。"
    "特にAI活用の観点からアドバイスしてください。"
)

NO_UPDATES_MESSAGE = "今週は更新がありませんでした。"

GENERATION_FAILED_MESSAGE = "週報の生成中にエラーが発生しました: "

TIME_FORMAT = "%Y/%m/%d %H:%M"


def format_time(value: datetime, tz: tzinfo) -> str:
    return value.astimezone(tz).strftime(TIME_FORMAT)


def format_period(period: TimeWindow, tz: tzinfo) -> str:
    """週報の先頭に付ける対象期間の行（例: 対象期間: 2025/01/05 20:00 〜 2025/01/12 20:00）。"""
    return f"対象期間: {format_time(period.start, tz)} 〜 {format_time(period.end, tz)}"


class ReportComposer:
    """
    更新ページ一覧と対象期間を受け取り、週報テキストを返すサービスクラス。

    - コンストラクタで ChatCompleter を注入可能（テストではモックを渡す）
    - デフォルトでは OpenAIChatClient.complete を利用する
    """

    def __init__(
        self,
        *,
        completer: Optional[ChatCompleter] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._completer = completer
        self._tz = tz

    @property
    def tz(self) -> tzinfo:
        if self._tz is None:
            self._tz = get_report_config().timezone
        return self._tz

    def _get_completer(self) -> ChatCompleter:
        if self._completer is None:
            self._completer = OpenAIChatClient().complete
        return self._completer

    def build_prompt(self, updates: Sequence[PageUpdate], period: TimeWindow) -> str:
        """LLM に渡すユーザープロンプトを組み立てる。"""
        sections = []
        for update in updates:
            sections.append(
                f"タイトル: {update.title}\n"
                f"最終更新: {format_time(update.last_edited_time, self.tz)}\n"
                f"内容:\n{update.content}\n"
                "-------------------"
            )

        return (
            f"以下は私のNotionで{format_period(period, self.tz)} の間に更新されたページの内容です。"
            "これらの更新内容を分析して、以下の形式で週報フィードバックを作成してください：\n\n"
            "1. 今週の進捗まとめ\n"
            "2. 達成した項目\n"
            "3. 課題や停滞している項目\n"
            "4. 来週に向けたアドバイス\n"
            "5. AIが推奨する優先事項（特にAI活用の視点から）\n\n"
            "更新内容：\n" + "\n".join(sections)
        )

    def build_messages(self, updates: Sequence[PageUpdate], period: TimeWindow) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": LLM_SYSTEM_PROMPT},
            {"role": "user", "content": self.build_prompt(updates, period)},
        ]

    def compose(self, updates: Sequence[PageUpdate], period: TimeWindow) -> str:
        """
        週報テキストを生成する。

        1. 更新 0 件なら LLM を呼ばずに固定文面を返す
        2. LLM 呼び出しに失敗した場合はエラー内容を含む固定文面を返す（リトライしない）
        """
        header = format_period(period, self.tz) + "\n\n"

        if not updates:
            return header + NO_UPDATES_MESSAGE

        messages = self.build_messages(updates, period)
        try:
            text = self._get_completer()(messages)
        except Exception as exc:  # noqa: BLE001 - 失敗も「週報」として返す
            logger.error("Error generating weekly report: %s", exc)
            return header + GENERATION_FAILED_MESSAGE + str(exc)

        return header + text
