# backend/weekly_report/automation/config.py

"""
週報ジョブ全体に関わる設定値。
"""

from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo

from weekly_report.utils.config import get_env, get_env_bool, get_env_int


@dataclass(frozen=True)
class ReportConfig:
    """週報ジョブ用の設定値コンテナ。"""

    timezone: ZoneInfo
    max_depth: int
    lookback_days: int
    preflight: bool
    port: int
    server_url: str
    job_timeout_seconds: int


@lru_cache()
def get_report_config() -> ReportConfig:
    """
    環境変数から週報ジョブの設定を読み込む。すべて任意。

      - REPORT_TIMEZONE      (デフォルト: Asia/Tokyo)
      - REPORT_MAX_DEPTH     (デフォルト: 2)
      - REPORT_LOOKBACK_DAYS (デフォルト: 7) 起動直後のウォーターマーク
      - REPORT_PREFLIGHT     (デフォルト: true) 書き込み前の存在確認
      - PORT                 (デフォルト: 3000)
      - REPORT_SERVER_URL    (デフォルト: http://127.0.0.1:$PORT) 定期ジョブの呼び出し先
      - REPORT_JOB_TIMEOUT_SECONDS (デフォルト: 600) 定期ジョブの待ち時間
    """
    port = get_env_int("PORT", default=3000)
    return ReportConfig(
        timezone=ZoneInfo(get_env("REPORT_TIMEZONE", default="Asia/Tokyo", required=False)),
        max_depth=get_env_int("REPORT_MAX_DEPTH", default=2),
        lookback_days=get_env_int("REPORT_LOOKBACK_DAYS", default=7),
        preflight=get_env_bool("REPORT_PREFLIGHT", default=True),
        port=port,
        server_url=get_env(
            "REPORT_SERVER_URL",
            default=f"http://127.0.0.1:{port}",
            required=False,
        ),
        job_timeout_seconds=get_env_int("REPORT_JOB_TIMEOUT_SECONDS", default=600),
    )
