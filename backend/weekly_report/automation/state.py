# backend/weekly_report/automation/state.py

"""
ウォーターマーク（前回チェック日時）の状態管理モジュール。

- アプリ全体で共有する WatermarkStore インスタンスを提供
- テスト時にリセットできるようにする

値はプロセスのメモリ上にのみ保持され、再起動すると lookback_days 前に戻る。
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

from .config import get_report_config


class WatermarkStore:
    """
    「ここまでは報告済み」を表す単一の日時と、その読み書きを直列化するロック。

    lock は走査全体（読み取り → 走査 → 書き込み）を囲むために公開している。
    """

    def __init__(self, initial: Optional[datetime] = None, *, lookback_days: int = 7) -> None:
        if initial is None:
            initial = datetime.now(timezone.utc) - timedelta(days=lookback_days)
        elif initial.tzinfo is None:
            initial = initial.replace(tzinfo=timezone.utc)
        self._value = initial
        self.lock = threading.Lock()

    @property
    def value(self) -> datetime:
        return self._value

    def advance(self, new_value: datetime) -> datetime:
        """ウォーターマークを new_value に更新し、更新前の値を返す。"""
        previous = self._value
        self._value = new_value
        return previous


_watermark_store: Optional[WatermarkStore] = None
_store_init_lock = threading.Lock()


def get_watermark_store() -> WatermarkStore:
    """
    共有の WatermarkStore インスタンスを返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    """
    global _watermark_store
    if _watermark_store is None:
        with _store_init_lock:
            # 同時に初回リクエストが来ても 1 つのインスタンス（= 1 つのロック）だけを作る
            if _watermark_store is None:
                _watermark_store = WatermarkStore(lookback_days=get_report_config().lookback_days)
    return _watermark_store


def reset_state() -> None:
    """
    テスト用に WatermarkStore のシングルトン状態をリセットする。
    """
    global _watermark_store
    with _store_init_lock:
        _watermark_store = None
