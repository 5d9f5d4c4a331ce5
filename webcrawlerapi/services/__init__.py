"""Client and data models for the WebCrawlerAPI service."""

from webcrawlerapi.core.exceptions import (
    InvalidResponseError,
    MissingFieldError,
    WebCrawlerAPIError,
)
from webcrawlerapi.services.client import WebCrawlerAPI
from webcrawlerapi.services.models import (
    TERMINAL_STATUSES,
    CrawlResponse,
    Job,
    JobItem,
    ScrapeType,
)

__all__ = [
    "CrawlResponse",
    "InvalidResponseError",
    "Job",
    "JobItem",
    "MissingFieldError",
    "ScrapeType",
    "TERMINAL_STATUSES",
    "WebCrawlerAPI",
    "WebCrawlerAPIError",
]
