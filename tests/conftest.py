"""Shared pytest fixtures for unit and integration tests."""

from collections.abc import AsyncGenerator

import pytest

from tests.fixtures.api_responses import API_KEY, BASE_URL
from webcrawlerapi.services.client import WebCrawlerAPI


@pytest.fixture
async def api() -> AsyncGenerator[WebCrawlerAPI, None]:
    """Client pointed at the mocked base URL, closed after the test."""
    client = WebCrawlerAPI(api_key=API_KEY, base_url=BASE_URL)
    yield client
    await client.close()
