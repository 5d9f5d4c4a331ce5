"""Content command: download stored content of a finished job."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from webcrawlerapi.cli.common import api_errors, load_settings, write_contents
from webcrawlerapi.services.client import WebCrawlerAPI


def content_command(
    job_id: str = typer.Argument(..., help="Job identifier"),
    output: Path = typer.Option(Path("."), "-o", "--output"),
) -> None:
    """Write the content of every done item of a job to OUTPUT."""
    client = WebCrawlerAPI.from_settings(load_settings())
    with api_errors():
        written, skipped = asyncio.run(_download(client, job_id, output))
    Console().print(f"Wrote {written} files ({skipped} skipped) to {output}")


async def _download(
    client: WebCrawlerAPI, job_id: str, output: Path
) -> tuple[int, int]:
    async with client:
        job = await client.get_job(job_id)
    return await write_contents(job, output)
