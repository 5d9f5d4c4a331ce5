"""Integration test fixtures.

Integration tests talk to the live WebCrawlerAPI service and are skipped
unless ``WEBCRAWLERAPI_API_KEY`` is set. ``WEBCRAWLERAPI_BASE_URL`` may point
them at a staging deployment.

Example:
    WEBCRAWLERAPI_API_KEY=sk-... pytest -m integration
"""

import os
from collections.abc import AsyncGenerator

import pytest

from webcrawlerapi.core.config import Settings
from webcrawlerapi.services.client import WebCrawlerAPI

TEST_SITE = os.getenv("WEBCRAWLERAPI_TEST_SITE", "https://books.toscrape.com/")


@pytest.fixture
def live_settings() -> Settings:
    """Settings from the environment; skips when no API key is configured."""
    settings = Settings()
    if not settings.api_key:
        pytest.skip("WEBCRAWLERAPI_API_KEY not set")
    return settings


@pytest.fixture
async def live_api(live_settings: Settings) -> AsyncGenerator[WebCrawlerAPI, None]:
    """Client for the live service, closed after the test."""
    client = WebCrawlerAPI.from_settings(live_settings)
    yield client
    await client.close()
