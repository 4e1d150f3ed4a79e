# backend/tests/test_notion_publisher.py

from datetime import date, datetime, timezone

from notion_fakes import FakeNotionClient, make_page
from weekly_report.notion import publisher as publisher_module
from weekly_report.notion.client import NotionAPIError, NotionClientError
from weekly_report.notion.publisher import (
    RICH_TEXT_LIMIT,
    ReportPublisher,
    build_report_blocks,
    build_report_title,
)
from weekly_report.notion.schemas import DestinationKind


EDITED = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _client_with_page_destination() -> FakeNotionClient:
    client = FakeNotionClient()
    client.add_page(make_page("parent-page", EDITED, title="Reports"))
    return client


def test_build_report_title_uses_unpadded_date():
    assert build_report_title(date(2025, 1, 5)) == "週報 2025/1/5"


def test_build_report_blocks_splits_long_text():
    text = "a" * (RICH_TEXT_LIMIT + 10)
    blocks = build_report_blocks(text)

    assert blocks[0]["type"] == "heading_2"
    paragraphs = [b for b in blocks if b["type"] == "paragraph"]
    assert len(paragraphs) == 2
    assert len(paragraphs[0]["paragraph"]["rich_text"][0]["text"]["content"]) == RICH_TEXT_LIMIT


def test_publish_creates_page_under_page_parent():
    client = _client_with_page_destination()
    publisher = ReportPublisher(client)

    url = publisher.publish("report body", today=date(2025, 1, 12))

    assert url == "https://www.notion.so/new-page-1"
    created = client.created[0]
    assert created["parent"] == {"page_id": "parent-page"}
    assert created["properties"]["title"]["title"][0]["text"]["content"] == "週報 2025/1/12"
    assert created["children"][1]["paragraph"]["rich_text"][0]["text"]["content"] == "report body"


def test_publish_falls_back_to_database_parent_on_rejection():
    client = FakeNotionClient()
    client.databases["parent-page"] = {"object": "database", "title": [{"plain_text": "DB"}]}
    client.create_errors["page_id"] = NotionAPIError("Notion API error: 400", status_code=400)
    publisher = ReportPublisher(client)

    url = publisher.publish("report body")

    assert url == "https://www.notion.so/new-page-2"
    assert [c["parent"] for c in client.created] == [
        {"page_id": "parent-page"},
        {"database_id": "parent-page"},
    ]
    assert "Name" in client.created[1]["properties"]


def test_publish_does_not_fall_back_on_network_error():
    client = _client_with_page_destination()
    client.create_errors["page_id"] = NotionClientError("Failed to create Notion page: timeout")
    publisher = ReportPublisher(client)

    assert publisher.publish("report body") is None
    assert len(client.created) == 1


def test_publish_returns_none_when_both_strategies_fail():
    client = _client_with_page_destination()
    client.create_errors["page_id"] = NotionAPIError("Notion API error: 400", status_code=400)
    client.create_errors["database_id"] = NotionAPIError("Notion API error: 404", status_code=404)
    publisher = ReportPublisher(client)

    assert publisher.publish("report body") is None
    assert len(client.created) == 2


def test_publish_skips_creation_when_preflight_fails():
    client = FakeNotionClient()  # 書き込み先が存在しない
    publisher = ReportPublisher(client)

    assert publisher.publish("report body") is None
    assert client.created == []


def test_publish_without_preflight_relies_on_creation_result():
    client = FakeNotionClient()
    publisher = ReportPublisher(client, preflight=False)

    assert publisher.publish("report body") == "https://www.notion.so/new-page-1"


def test_check_destination_reports_kind():
    client = _client_with_page_destination()
    page_check = ReportPublisher(client).check_destination()

    assert page_check.accessible
    assert page_check.kind == DestinationKind.PAGE
    assert page_check.title == "Reports"

    db_client = FakeNotionClient()
    db_client.databases["parent-page"] = {"object": "database", "title": [{"plain_text": "DB"}]}
    db_check = ReportPublisher(db_client).check_destination()

    assert db_check.kind == DestinationKind.DATABASE
    assert db_check.title == "DB"


def test_check_destination_unreachable_includes_errors():
    check = ReportPublisher(FakeNotionClient()).check_destination()

    assert not check.accessible
    assert check.kind is None
    assert "page:" in check.error and "database:" in check.error


def test_check_token():
    client = FakeNotionClient()
    assert ReportPublisher(client).check_token().bot_name == "Weekly Bot"

    client.errors["users/me"] = NotionAPIError("Unauthorized", status_code=401)
    token = ReportPublisher(client).check_token()
    assert not token.valid
    assert "Unauthorized" in token.error


class LateEveningUTC(datetime):
    """UTC 23:30 に固定した datetime。"""

    @classmethod
    def now(cls, tz=None):
        return datetime(2025, 1, 11, 23, 30, tzinfo=timezone.utc).astimezone(tz)


def test_build_report_title_uses_report_timezone(monkeypatch):
    monkeypatch.setenv("REPORT_TIMEZONE", "Asia/Tokyo")
    monkeypatch.setattr(publisher_module, "datetime", LateEveningUTC)

    # UTC ではまだ 11 日だが、JST では 12 日
    assert build_report_title() == "週報 2025/1/12"


def test_check_destination_tolerates_malformed_database_title():
    client = FakeNotionClient()
    client.databases["parent-page"] = {"object": "database", "title": ["not-a-rich-text"]}
    publisher = ReportPublisher(client)

    check = publisher.check_destination()

    assert check.accessible
    assert check.kind == DestinationKind.DATABASE
    assert check.title is None
    assert publisher.publish("report body") == "https://www.notion.so/new-page-1"
