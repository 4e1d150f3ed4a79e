# backend/weekly_report/automation/jobs.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import get_report_config

logger = logging.getLogger(__name__)

WEEKLY_REPORT_PATH = "/api/generate-report"


class JobTriggerError(RuntimeError):
    """稼働中のサーバーへの週報生成リクエストが失敗した場合の例外。"""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def run_weekly_jobs(
    *,
    base_url: Optional[str] = None,
    force: bool = False,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """
    週次の自動ジョブを実行する。

    ウォーターマークはサーバープロセスのメモリ上にあるため、
    このジョブ自身は走査せず、稼働中のサーバーの /api/generate-report を呼び出す。
    これにより手動実行と定期実行が同じ「前回チェック日時」を共有する。

    - 更新 0 件の場合は生成も書き込みも行わない（force=True なら書き込む）

    :raises JobTriggerError: サーバーに接続できない / 4xx・5xx が返った場合。
    :return: 作成された週報ページの URL。作成しなかった / 失敗した場合は None。
    """
    config = get_report_config()
    base_url = (base_url or config.server_url).rstrip("/")
    if timeout is None:
        timeout = float(config.job_timeout_seconds)

    logger.info("Running weekly report generation via %s", base_url)
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(
                f"{base_url}{WEEKLY_REPORT_PATH}",
                params={"skip_empty": "false" if force else "true"},
            )
    except httpx.RequestError as exc:
        raise JobTriggerError(f"Failed to reach report server: {exc}") from exc

    if response.status_code // 100 != 2:
        raise JobTriggerError(
            f"Report server error: {response.status_code} {response.text}",
            status_code=response.status_code,
        )

    body: Dict[str, Any] = response.json()

    if not body.get("published"):
        logger.info("No updates found, skipping report generation")
        return None

    report_url = body.get("report_url")
    if report_url:
        logger.info("Weekly report created: %s", report_url)
    else:
        logger.error("Weekly report could not be written to Notion.")
    return report_url


def main() -> None:
    """
    簡易 CLI エントリーポイント。

    例:
        python -m weekly_report.automation.jobs weekly
        python -m weekly_report.automation.jobs weekly --force
        python -m weekly_report.automation.jobs weekly --url http://localhost:3000

    本番運用では cron から呼び出す想定（毎週日曜 20:00 JST）。サーバーが起動している必要がある:
        CRON_TZ=Asia/Tokyo
        0 20 * * 0  cd /path/to/backend && python -m weekly_report.automation.jobs weekly
    """
    import argparse

    parser = argparse.ArgumentParser(description="Weekly report jobs runner")
    parser.add_argument(
        "job",
        choices=["weekly"],
        help="実行するジョブ種別",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="更新が 0 件でも週報を作成する",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="週報サーバーのベース URL（デフォルト: REPORT_SERVER_URL）",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.job == "weekly":
        run_weekly_jobs(base_url=args.url, force=args.force)


if __name__ == "__main__":
    main()
