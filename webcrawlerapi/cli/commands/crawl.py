"""Crawl command: submit a job and optionally wait for it."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from webcrawlerapi.cli.common import (
    api_errors,
    load_settings,
    print_job,
    write_contents,
)
from webcrawlerapi.services.client import WebCrawlerAPI
from webcrawlerapi.services.models import Job, ScrapeType


def crawl_command(
    url: str = typer.Argument(..., help="Seed URL to crawl"),
    scrape_type: ScrapeType = typer.Option(
        ScrapeType.HTML, "-t", "--scrape-type", help="Content form to store"
    ),
    items_limit: int = typer.Option(10, "-n", "--items-limit"),
    webhook_url: str | None = typer.Option(None, "--webhook-url"),
    allow_subdomains: bool = typer.Option(False, "--allow-subdomains"),
    whitelist_regexp: str | None = typer.Option(None, "--whitelist"),
    blacklist_regexp: str | None = typer.Option(None, "--blacklist"),
    main_content_only: bool = typer.Option(False, "--main-content-only"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
    max_polls: int | None = typer.Option(None, "--max-polls"),
    output: Path | None = typer.Option(None, "-o", "--output"),
) -> None:
    """Submit a crawl job and wait for it to finish."""
    settings = load_settings()
    client = WebCrawlerAPI.from_settings(settings)
    console = Console()
    submission = {
        "scrape_type": scrape_type.value,
        "items_limit": items_limit,
        "webhook_url": webhook_url,
        "allow_subdomains": allow_subdomains,
        "whitelist_regexp": whitelist_regexp,
        "blacklist_regexp": blacklist_regexp,
        "main_content_only": main_content_only,
    }

    if not wait:
        with api_errors():
            job_id = asyncio.run(_submit(client, url, submission))
        console.print(f"Submitted job {job_id}")
        return

    polls = max_polls if max_polls is not None else settings.max_polls
    with api_errors():
        job = asyncio.run(_crawl(client, console, url, submission, polls, output))
    print_job(console, job)

    if not job.is_terminal():
        console.print(
            f"[yellow]Job {escape(job.id)} not finished after {polls} polls[/yellow]"
        )
        raise typer.Exit(code=1)
    if job.status == "error":
        raise typer.Exit(code=1)


async def _submit(client: WebCrawlerAPI, url: str, submission: dict) -> str:
    async with client:
        response = await client.submit(url, **submission)
    return response.id


async def _crawl(
    client: WebCrawlerAPI,
    console: Console,
    url: str,
    submission: dict,
    max_polls: int,
    output: Path | None,
) -> Job:
    async with client:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as progress:
            progress.add_task(f"Crawling {url}", total=None)
            job = await client.crawl(url, max_polls=max_polls, **submission)

    if output is not None and job.is_terminal():
        written, skipped = await write_contents(job, output)
        console.print(f"Wrote {written} files ({skipped} skipped) to {output}")
    return job
