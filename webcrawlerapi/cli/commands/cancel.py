"""Cancel command for a running crawl job."""

from __future__ import annotations

import asyncio
from typing import Any

import typer
from rich.console import Console

from webcrawlerapi.cli.common import api_errors, load_settings
from webcrawlerapi.services.client import WebCrawlerAPI


def cancel_command(job_id: str = typer.Argument(..., help="Job identifier")) -> None:
    """Cancel a job and print the server response."""
    client = WebCrawlerAPI.from_settings(load_settings())
    with api_errors():
        response = asyncio.run(_cancel(client, job_id))
    Console().print_json(data=response)


async def _cancel(client: WebCrawlerAPI, job_id: str) -> dict[str, Any]:
    async with client:
        return await client.cancel_job(job_id)
