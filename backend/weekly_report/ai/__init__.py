# backend/weekly_report/ai/__init__.py
"""
週報生成（LLM 呼び出し）用パッケージ。

- client: OpenAI Chat Completions の薄いラッパー
- service: 更新内容からプロンプトを組み立てて週報テキストを生成する
"""

from .service import ReportComposer, format_period  # noqa: F401
