# backend/weekly_report/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- 監視対象ページを再帰的に辿り、更新されたページの本文を抽出する
- 生成した週報を Notion のページ / データベース配下に書き込む
- 連携設定（トークン / 書き込み先）の診断
"""
