# backend/weekly_report/__init__.py
"""
Notion weekly report backend package.

This package contains:
- main: FastAPI application entrypoint
- notion: Notion integration modules (page tree walker, report publisher)
- ai: weekly report composition via an LLM
- automation: update aggregation, watermark state and scheduled jobs
"""
