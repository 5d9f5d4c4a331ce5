"""Usage examples for the WebCrawlerAPI client.

Demonstrates blocking crawls, manual submit-and-poll, cancellation and
error handling.

Prerequisites:
    - WEBCRAWLERAPI_API_KEY set in the environment or a .env file

Run examples:
    python examples/client_usage.py
"""

import asyncio

import httpx

from webcrawlerapi.core.config import Settings
from webcrawlerapi.core.logger import get_logger
from webcrawlerapi.services import InvalidResponseError, WebCrawlerAPI

logger = get_logger(__name__)


# =============================================================================
# Example 1: Blocking crawl
# =============================================================================


async def example_blocking_crawl(api: WebCrawlerAPI) -> None:
    """Example 1: Crawl a site and print the markdown of each page."""
    logger.info("Example 1: Blocking crawl")

    job = await api.crawl(
        "https://books.toscrape.com/", scrape_type="markdown", items_limit=3
    )
    if not job.is_terminal():
        logger.warning(f"Job {job.id} still {job.status}, giving up")
        return

    for item in job.items_by_status("done"):
        content = await item.get_content()
        logger.info(f"{item.original_url}: {len(content or '')} characters")


# =============================================================================
# Example 2: Submit now, poll later
# =============================================================================


async def example_submit_then_poll(api: WebCrawlerAPI) -> None:
    """Example 2: Submit a crawl and wait for it separately."""
    logger.info("Example 2: Submit then poll")

    response = await api.submit("https://books.toscrape.com/", items_limit=2)
    logger.info(f"Submitted job {response.id}")

    job = await api.wait_for_job(response.id, max_polls=20)
    logger.info(f"Job {job.id} ended as {job.status} at {job.finished_at}")


# =============================================================================
# Example 3: Cancellation and error handling
# =============================================================================


async def example_cancel(api: WebCrawlerAPI) -> None:
    """Example 3: Cancel a job and handle API errors."""
    logger.info("Example 3: Cancel")

    response = await api.submit("https://books.toscrape.com/", items_limit=50)
    try:
        result = await api.cancel_job(response.id)
        logger.info(f"Cancel response: {result}")
    except httpx.HTTPStatusError as exc:
        logger.error(f"Cancel failed with HTTP {exc.response.status_code}")
    except InvalidResponseError as exc:
        logger.error(f"Unexpected cancel response: {exc}")


async def main() -> None:
    async with WebCrawlerAPI.from_settings(Settings()) as api:
        await example_blocking_crawl(api)
        await example_submit_then_poll(api)
        await example_cancel(api)


if __name__ == "__main__":
    asyncio.run(main())
