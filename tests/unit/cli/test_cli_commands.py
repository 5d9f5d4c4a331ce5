"""Tests for the webcrawlerapi command line interface."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx
from rich.console import Console
from typer.testing import CliRunner

from tests.fixtures.api_responses import (
    BASE_URL,
    JOB_ID,
    RAW_CONTENT_URL,
    make_item_payload,
    make_job_payload,
)
from webcrawlerapi.cli.app import app
from webcrawlerapi.cli.common import print_job
from webcrawlerapi.services.models import Job

runner = CliRunner()

ENV = {"WEBCRAWLERAPI_API_KEY": "cli-key", "WEBCRAWLERAPI_BASE_URL": BASE_URL}
CRAWL_URL = f"{BASE_URL}/v1/crawl"
JOB_URL = f"{BASE_URL}/v1/job/{JOB_ID}"


@pytest.fixture(autouse=True)
def mock_sleep():
    with patch(
        "webcrawlerapi.services.client.asyncio.sleep", new_callable=AsyncMock
    ) as sleep:
        yield sleep


@pytest.mark.parametrize("command", ["crawl", "status", "cancel", "content"])
def test_command_help(command: str) -> None:
    result = runner.invoke(app, [command, "--help"])
    assert result.exit_code == 0
    assert command in result.output


def test_missing_api_key_exits_with_config_error() -> None:
    result = runner.invoke(
        app, ["status", JOB_ID], env={"WEBCRAWLERAPI_API_KEY": ""}
    )
    assert result.exit_code == 2
    assert "WEBCRAWLERAPI_API_KEY is not set" in result.output


@respx.mock
def test_crawl_no_wait_prints_job_id() -> None:
    route = respx.post(CRAWL_URL).mock(
        return_value=httpx.Response(200, json={"id": JOB_ID})
    )

    result = runner.invoke(
        app, ["crawl", "https://example.com", "--no-wait", "-t", "markdown"], env=ENV
    )

    assert result.exit_code == 0
    assert f"Submitted job {JOB_ID}" in result.output
    assert route.calls.last.request.headers["Authorization"] == "Bearer cli-key"


@respx.mock
def test_crawl_waits_for_done_job() -> None:
    respx.post(CRAWL_URL).mock(return_value=httpx.Response(200, json={"id": JOB_ID}))
    respx.get(JOB_URL).mock(
        side_effect=[
            httpx.Response(200, json=make_job_payload(status="in_progress")),
            httpx.Response(200, json=make_job_payload(status="done")),
        ]
    )

    result = runner.invoke(app, ["crawl", "https://example.com"], env=ENV)

    assert result.exit_code == 0
    assert JOB_ID in result.output
    assert "done" in result.output


@respx.mock
def test_crawl_error_status_exits_non_zero() -> None:
    respx.post(CRAWL_URL).mock(return_value=httpx.Response(200, json={"id": JOB_ID}))
    respx.get(JOB_URL).mock(
        return_value=httpx.Response(200, json=make_job_payload(status="error"))
    )

    result = runner.invoke(app, ["crawl", "https://example.com"], env=ENV)

    assert result.exit_code == 1


@respx.mock
def test_crawl_poll_budget_exhausted_exits_non_zero() -> None:
    respx.post(CRAWL_URL).mock(return_value=httpx.Response(200, json={"id": JOB_ID}))
    job_route = respx.get(JOB_URL).mock(
        return_value=httpx.Response(200, json=make_job_payload(status="in_progress"))
    )

    result = runner.invoke(
        app, ["crawl", "https://example.com", "--max-polls", "2"], env=ENV
    )

    assert result.exit_code == 1
    assert "not finished after 2 polls" in result.output
    assert job_route.call_count == 2


@respx.mock
def test_crawl_writes_contents(tmp_path: Path) -> None:
    respx.post(CRAWL_URL).mock(return_value=httpx.Response(200, json={"id": JOB_ID}))
    respx.get(JOB_URL).mock(
        return_value=httpx.Response(200, json=make_job_payload(status="done"))
    )
    content_route = respx.get(RAW_CONTENT_URL).mock(
        return_value=httpx.Response(200, text="<html>page</html>")
    )

    result = runner.invoke(
        app, ["crawl", "https://example.com", "-o", str(tmp_path)], env=ENV
    )

    assert result.exit_code == 0
    files = list(tmp_path.iterdir())
    assert len(files) == 1
    assert files[0].suffix == ".html"
    assert files[0].read_text() == "<html>page</html>"
    assert "Authorization" not in content_route.calls.last.request.headers


@respx.mock
def test_status_prints_job() -> None:
    respx.get(JOB_URL).mock(
        return_value=httpx.Response(200, json=make_job_payload(status="in_progress"))
    )

    result = runner.invoke(app, ["status", JOB_ID], env=ENV)

    assert result.exit_code == 0
    assert JOB_ID in result.output
    assert "in_progress" in result.output


@respx.mock
def test_cancel_prints_server_response() -> None:
    respx.put(f"{JOB_URL}/cancel").mock(
        return_value=httpx.Response(200, json={"status": "cancelled"})
    )

    result = runner.invoke(app, ["cancel", JOB_ID], env=ENV)

    assert result.exit_code == 0
    assert '"status": "cancelled"' in result.output


@respx.mock
def test_content_skips_items_without_content(tmp_path: Path) -> None:
    respx.get(JOB_URL).mock(
        return_value=httpx.Response(
            200,
            json=make_job_payload(
                scrape_type="markdown",
                job_items=[
                    make_item_payload(id="a", markdown_content_url=None),
                    make_item_payload(id="b", status="in_progress"),
                ],
            ),
        )
    )

    result = runner.invoke(app, ["content", JOB_ID, "-o", str(tmp_path)], env=ENV)

    assert result.exit_code == 0
    assert "Wrote 0 files" in result.output
    assert "(2 skipped)" in result.output
    assert list(tmp_path.iterdir()) == []


BRACKETED_TITLE = "Closing [/b] tag [PDF] Report"


@respx.mock
def test_status_prints_bracketed_server_text() -> None:
    respx.get(JOB_URL).mock(
        return_value=httpx.Response(
            200,
            json=make_job_payload(
                url="https://example.com/[docs]",
                job_items=[
                    make_item_payload(title=BRACKETED_TITLE, last_error="[red]x")
                ],
            ),
        )
    )

    result = runner.invoke(app, ["status", JOB_ID], env=ENV)

    assert result.exit_code == 0
    assert "Job Items" in result.output


def test_print_job_keeps_brackets_literal() -> None:
    job = Job.from_dict(
        make_job_payload(
            webhook_error="[bold]timeout",
            job_items=[make_item_payload(title=BRACKETED_TITLE)],
        )
    )
    console = Console(width=300, record=True)

    print_job(console, job)

    text = console.export_text()
    assert BRACKETED_TITLE in text
    assert "[bold]timeout" in text


@respx.mock
def test_status_unknown_job_exits_with_message() -> None:
    respx.get(JOB_URL).mock(return_value=httpx.Response(404, json={"error": "nf"}))

    result = runner.invoke(app, ["status", JOB_ID], env=ENV)

    assert result.exit_code == 1
    assert "API request failed: 404" in result.output
    assert not isinstance(result.exception, httpx.HTTPError)


@respx.mock
def test_crawl_unauthorized_exits_with_message() -> None:
    respx.post(CRAWL_URL).mock(return_value=httpx.Response(401, json={}))

    result = runner.invoke(app, ["crawl", "https://example.com"], env=ENV)

    assert result.exit_code == 1
    assert "API request failed: 401" in result.output
    assert not isinstance(result.exception, httpx.HTTPError)


@respx.mock
def test_cancel_network_failure_exits_with_message() -> None:
    respx.put(f"{JOB_URL}/cancel").mock(side_effect=httpx.ConnectError("refused"))

    result = runner.invoke(app, ["cancel", JOB_ID], env=ENV)

    assert result.exit_code == 1
    assert "API request failed" in result.output


@respx.mock
def test_content_malformed_job_exits_with_message(tmp_path: Path) -> None:
    payload = make_job_payload()
    del payload["org_id"]
    respx.get(JOB_URL).mock(return_value=httpx.Response(200, json=payload))

    result = runner.invoke(app, ["content", JOB_ID, "-o", str(tmp_path)], env=ENV)

    assert result.exit_code == 1
    assert "Missing required field: org_id" in result.output


@respx.mock
def test_content_written_as_utf8(tmp_path: Path) -> None:
    respx.get(JOB_URL).mock(return_value=httpx.Response(200, json=make_job_payload()))
    respx.get(RAW_CONTENT_URL).mock(
        return_value=httpx.Response(200, text="<p>Zürich – 東京</p>")
    )

    result = runner.invoke(app, ["content", JOB_ID, "-o", str(tmp_path)], env=ENV)

    assert result.exit_code == 0
    [written] = list(tmp_path.iterdir())
    assert written.read_bytes().decode("utf-8") == "<p>Zürich – 東京</p>"
