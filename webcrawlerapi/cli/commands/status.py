"""Status command for a single crawl job."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from webcrawlerapi.cli.common import api_errors, load_settings, print_job
from webcrawlerapi.services.client import WebCrawlerAPI
from webcrawlerapi.services.models import Job


def status_command(job_id: str = typer.Argument(..., help="Job identifier")) -> None:
    """Show the current status of a job and its items."""
    client = WebCrawlerAPI.from_settings(load_settings())
    with api_errors():
        job = asyncio.run(_fetch_job(client, job_id))
    print_job(Console(), job)


async def _fetch_job(client: WebCrawlerAPI, job_id: str) -> Job:
    async with client:
        return await client.get_job(job_id)
