# backend/weekly_report/automation/__init__.py

"""
週報の自動生成用モジュール群。

- state: ウォーターマーク（前回チェック日時）の共有インスタンス管理
- aggregator: 複数ルートページの走査と期間の決定
- reporting_service: 走査 → 週報生成 → Notion 書き込みの一連の流れ
- jobs: cron から呼び出す CLI
- router: 手動実行用の HTTP エンドポイント
"""
