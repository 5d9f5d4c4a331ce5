"""Helpers shared by CLI commands."""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from urllib.parse import urlparse

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from webcrawlerapi.core.config import Settings
from webcrawlerapi.core.exceptions import WebCrawlerAPIError
from webcrawlerapi.core.logger import get_logger
from webcrawlerapi.services.models import Job, JobItem

EXIT_CONFIG_ERROR = 2
EXIT_API_ERROR = 1


def load_settings() -> Settings:
    """Load settings and configure the package logger.

    Exits with code 2 when the settings are invalid or no API key is set.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc

    if not settings.api_key:
        typer.echo("WEBCRAWLERAPI_API_KEY is not set", err=True)
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    get_logger("webcrawlerapi", settings.log_level, settings.log_file)
    return settings


@contextmanager
def api_errors() -> Iterator[None]:
    """Turn transport and response errors into a message and exit code 1."""
    try:
        yield
    except httpx.HTTPStatusError as exc:
        typer.echo(
            f"API request failed: {exc.response.status_code} {exc.request.url}",
            err=True,
        )
        raise typer.Exit(code=EXIT_API_ERROR) from exc
    except httpx.HTTPError as exc:
        typer.echo(f"API request failed: {exc!r}", err=True)
        raise typer.Exit(code=EXIT_API_ERROR) from exc
    except WebCrawlerAPIError as exc:
        typer.echo(f"Invalid API response: {exc}", err=True)
        raise typer.Exit(code=EXIT_API_ERROR) from exc


def _plain(value: object) -> str:
    return "-" if value is None else escape(str(value))


def _status_style(status: str) -> str:
    return {
        "done": "green",
        "error": "red",
        "cancelled": "yellow",
    }.get(status, "blue")


def print_job(console: Console, job: Job) -> None:
    """Print a job summary line followed by its items."""
    color = _status_style(job.status)
    console.print(
        f"{_plain(job.id)} [{color}]{_plain(job.status)}[/{color}] "
        f"{_plain(job.url)} "
        f"({len(job.job_items)} items, scrape type {_plain(job.scrape_type)})"
    )
    if job.webhook_error:
        console.print(f"[red]Webhook error:[/red] {_plain(job.webhook_error)}")
    if not job.job_items:
        return

    table = Table(title="Job Items")
    table.add_column("Item ID")
    table.add_column("Status")
    table.add_column("Code")
    table.add_column("URL")
    table.add_column("Title")
    table.add_column("Error")
    for item in job.job_items:
        item_color = _status_style(item.status)
        table.add_row(
            _plain(item.id),
            f"[{item_color}]{_plain(item.status)}[/{item_color}]",
            str(item.page_status_code),
            _plain(item.original_url),
            _plain(item.title),
            _plain(item.last_error),
        )
    console.print(table)


def slugify_url(url: str) -> str:
    parsed = urlparse(url)
    path = parsed.path or "index"
    slug = f"{parsed.netloc}{path}"
    slug = re.sub(r"[^a-zA-Z0-9_-]+", "_", slug).strip("_")
    return slug[:80] or "page"


_EXTENSIONS = {"html": ".html", "cleaned": ".txt", "markdown": ".md"}


async def write_contents(job: Job, output: Path) -> tuple[int, int]:
    """Fetch content of every done item and write one file per item.

    Content is fetched with a separate client so the API key is never sent
    to the content storage host.

    Returns:
        Tuple of (files written, items skipped)
    """
    output.mkdir(parents=True, exist_ok=True)
    extension = _EXTENSIONS.get(job.scrape_type, ".txt")
    written = 0
    skipped = 0
    async with httpx.AsyncClient(follow_redirects=True) as content_client:
        for item in job.job_items:
            content = await item.get_content(content_client)
            if content is None:
                skipped += 1
                continue
            path = _output_path(output, item, extension)
            path.write_text(content, encoding="utf-8")
            written += 1
    return written, skipped


def _output_path(output: Path, item: JobItem, extension: str) -> Path:
    return output / f"{slugify_url(item.original_url)}-{item.id}{extension}"
