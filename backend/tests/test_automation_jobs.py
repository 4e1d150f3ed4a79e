# backend/tests/test_automation_jobs.py
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import httpx
import pytest
from fastapi.testclient import TestClient

from notion_fakes import FakeNotionClient, make_page, text_block
from weekly_report.ai.service import ReportComposer
from weekly_report.automation import jobs
from weekly_report.automation.aggregator import UpdateAggregator
from weekly_report.automation.jobs import JobTriggerError, run_weekly_jobs
from weekly_report.automation.reporting_service import WeeklyReportService
from weekly_report.automation.router import get_report_service
from weekly_report.main import create_app
from weekly_report.notion.publisher import ReportPublisher
from weekly_report.notion.walker import PageTreeWalker


class DummyHTTPClient:
    """httpx.Client の代わりに使う、固定レスポンスを返すダミー。"""

    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.requests = []
        self.timeout = None

    def __call__(self, timeout=None):
        self.timeout = timeout
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def get(self, url, params=None):
        self.requests.append((url, params))
        if self.error is not None:
            raise self.error
        return self.response


def _install(monkeypatch, dummy: DummyHTTPClient) -> DummyHTTPClient:
    monkeypatch.setattr(jobs.httpx, "Client", dummy)
    return dummy


def test_run_weekly_jobs_calls_server_with_skip_empty(monkeypatch) -> None:
    dummy = _install(
        monkeypatch,
        DummyHTTPClient(httpx.Response(200, json={"published": True, "report_url": "https://www.notion.so/report"})),
    )

    url = run_weekly_jobs(base_url="http://report.local:3000/", timeout=30)

    assert url == "https://www.notion.so/report"
    assert dummy.requests == [("http://report.local:3000/api/generate-report", {"skip_empty": "true"})]
    assert dummy.timeout == 30


def test_run_weekly_jobs_uses_configured_server_url(monkeypatch) -> None:
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.delenv("REPORT_SERVER_URL", raising=False)
    dummy = _install(monkeypatch, DummyHTTPClient(httpx.Response(200, json={"published": False})))

    assert run_weekly_jobs() is None
    assert dummy.requests[0][0] == "http://127.0.0.1:8080/api/generate-report"


def test_run_weekly_jobs_force_publishes_empty_report(monkeypatch) -> None:
    dummy = _install(
        monkeypatch,
        DummyHTTPClient(httpx.Response(200, json={"published": True, "report_url": "https://www.notion.so/r"})),
    )

    assert run_weekly_jobs(base_url="http://report.local", force=True) == "https://www.notion.so/r"
    assert dummy.requests[0][1] == {"skip_empty": "false"}


def test_run_weekly_jobs_returns_none_when_publish_fails(monkeypatch) -> None:
    _install(monkeypatch, DummyHTTPClient(httpx.Response(200, json={"published": True, "report_url": None})))

    assert run_weekly_jobs(base_url="http://report.local") is None


def test_run_weekly_jobs_server_error(monkeypatch) -> None:
    _install(monkeypatch, DummyHTTPClient(httpx.Response(500, json={"detail": "boom"})))

    with pytest.raises(JobTriggerError) as excinfo:
        run_weekly_jobs(base_url="http://report.local")

    assert excinfo.value.status_code == 500


def test_run_weekly_jobs_server_unreachable(monkeypatch) -> None:
    _install(monkeypatch, DummyHTTPClient(error=httpx.ConnectError("connection refused")))

    with pytest.raises(JobTriggerError):
        run_weekly_jobs(base_url="http://report.local")


class RecordingReportService(WeeklyReportService):
    results = []

    def run(self, **kwargs):
        result = super().run(**kwargs)
        self.results.append(result)
        return result


def test_scheduled_run_continues_from_manual_run(monkeypatch) -> None:
    now = datetime.now(timezone.utc)
    notion = FakeNotionClient()
    notion.add_page(make_page("root", now - timedelta(hours=1), title="Log"), [text_block("paragraph", "Shipped X")])
    notion.add_page(make_page("parent-page", now - timedelta(days=60), title="Reports"))
    RecordingReportService.results = []

    def build_service() -> WeeklyReportService:
        # 本番の provider と同様にリクエストごとに生成し、ウォーターマークは共有ストアを使う
        return RecordingReportService(
            aggregator=UpdateAggregator(["root"], walker=PageTreeWalker(notion)),
            composer=ReportComposer(completer=lambda _messages: "AI feedback", tz=ZoneInfo("Asia/Tokyo")),
            publisher=ReportPublisher(notion),
        )

    app = create_app()
    app.dependency_overrides[get_report_service] = build_service
    client = TestClient(app)

    manual = client.get("/api/generate-report").json()
    assert manual["updates_count"] == 1

    monkeypatch.setattr(jobs.httpx, "Client", lambda timeout=None: client)
    scheduled_url = run_weekly_jobs(base_url="http://testserver")

    manual_result, scheduled_result = RecordingReportService.results
    assert scheduled_result.scan.period.start == manual_result.scan.period.end
    # 手動実行で報告済みの内容は定期実行で再度報告されない
    assert scheduled_result.scan.updates == []
    assert scheduled_url is None
    assert len(notion.created) == 1
