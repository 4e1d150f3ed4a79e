# backend/tests/conftest.py
"""
Pytest configuration for the Notion weekly report backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import weekly_report.*` works correctly in tests.
- Ensures required environment variables for tests are set
  with safe dummy values (e.g., NOTION_API_KEY, NOTION_PAGE_IDS).
- Resets cached configuration and the shared watermark between tests.
"""

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        # Insert at the beginning so it has priority over site-packages, etc.
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set dummy environment variables required for tests.

    These values are only for local testing and do NOT contain real secrets.
    In real environments, proper values should be provided via system env.
    """
    os.environ.setdefault("NOTION_API_KEY", "dummy-notion-api-key-for-tests")
    os.environ.setdefault("NOTION_PAGE_IDS", "37380149ec3e47e99e8f533c3486ab89")
    os.environ.setdefault("OPENAI_API_KEY", "dummy-openai-api-key-for-tests")


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()


@pytest.fixture(autouse=True)
def _reset_cached_state():
    from weekly_report.ai.config import get_openai_config
    from weekly_report.automation.config import get_report_config
    from weekly_report.automation.state import reset_state
    from weekly_report.notion.config import get_notion_config

    caches = (get_notion_config, get_openai_config, get_report_config)
    for cached in caches:
        cached.cache_clear()
    reset_state()

    yield

    for cached in caches:
        cached.cache_clear()
    reset_state()
