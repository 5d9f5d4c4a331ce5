"""Data models for WebCrawlerAPI jobs and crawled items."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from webcrawlerapi.core.exceptions import InvalidResponseError, MissingFieldError

TERMINAL_STATUSES = frozenset({"done", "error", "cancelled"})
ITEM_DONE_STATUS = "done"

JOB_REQUIRED_FIELDS = (
    "id",
    "org_id",
    "url",
    "status",
    "scrape_type",
    "items_limit",
    "created_at",
    "updated_at",
    "webhook_url",
)

JOB_ITEM_REQUIRED_FIELDS = (
    "id",
    "job_id",
    "original_url",
    "page_status_code",
    "status",
    "title",
    "created_at",
    "updated_at",
    "cost",
    "referred_url",
)

_datetime_adapter = TypeAdapter(datetime)


class ScrapeType(str, Enum):
    """Rendered forms of a page the service can store."""

    HTML = "html"
    CLEANED = "cleaned"
    MARKDOWN = "markdown"


# Which JobItem attribute holds the content URL for each scrape type
CONTENT_URL_FIELDS = {
    ScrapeType.HTML.value: "raw_content_url",
    ScrapeType.CLEANED.value: "cleaned_content_url",
    ScrapeType.MARKDOWN.value: "markdown_content_url",
}


def _require(data: Mapping[str, Any], fields: tuple[str, ...], entity: str) -> None:
    for name in fields:
        if name not in data:
            raise MissingFieldError(name, entity=entity)


def _parse_timestamp(value: Any, field_name: str) -> datetime:
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError as exc:
        raise InvalidResponseError(
            f"Invalid timestamp in field {field_name}", {"value": value}
        ) from exc


@dataclass(frozen=True)
class CrawlResponse:
    """Acknowledgement of a crawl submission.

    Args:
        id: Identifier of the newly created job
    """

    id: str


@dataclass
class _ContentCache:
    """Fetch state of an item's content: unfetched until ``store`` is called."""

    fetched: bool = False
    value: str | None = None

    def store(self, value: str) -> None:
        self.value = value
        self.fetched = True


@dataclass(frozen=True)
class JobItem:
    """One crawled page within a job.

    The owning job's scrape type is copied onto the item at construction so
    the item can pick its content URL without holding a reference to the job.

    Args:
        id: Item identifier
        job_id: Identifier of the owning job
        original_url: URL that was crawled
        page_status_code: HTTP status the crawler got for the page
        status: Item processing status ("done" once content is stored)
        title: Page title
        created_at: Creation time
        updated_at: Last update time
        cost: Billing cost of the item
        referred_url: Page the URL was discovered on
        scrape_type: Scrape type of the owning job
        last_error: Last processing error, if any
        error_code: Machine-readable error code, if any
        raw_content_url: Location of the raw HTML
        cleaned_content_url: Location of the cleaned text
        markdown_content_url: Location of the markdown
    """

    id: str
    job_id: str
    original_url: str
    page_status_code: int
    status: str
    title: str
    created_at: datetime
    updated_at: datetime
    cost: float
    referred_url: str
    scrape_type: str
    last_error: str | None = None
    error_code: str | None = None
    raw_content_url: str | None = None
    cleaned_content_url: str | None = None
    markdown_content_url: str | None = None
    _cache: _ContentCache = field(
        default_factory=_ContentCache, init=False, repr=False, compare=False
    )
    _lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False, compare=False
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], scrape_type: str) -> JobItem:
        """Build an item from an entry of a job's ``job_items`` list.

        Args:
            data: Decoded item object
            scrape_type: Scrape type of the owning job

        Raises:
            MissingFieldError: If a required field is absent
            InvalidResponseError: If a timestamp cannot be parsed
        """
        _require(data, JOB_ITEM_REQUIRED_FIELDS, "JobItem")
        return cls(
            id=data["id"],
            job_id=data["job_id"],
            original_url=data["original_url"],
            page_status_code=data["page_status_code"],
            status=data["status"],
            title=data["title"],
            created_at=_parse_timestamp(data["created_at"], "created_at"),
            updated_at=_parse_timestamp(data["updated_at"], "updated_at"),
            cost=data["cost"],
            referred_url=data["referred_url"],
            scrape_type=scrape_type,
            last_error=data.get("last_error"),
            error_code=data.get("error_code"),
            raw_content_url=data.get("raw_content_url"),
            cleaned_content_url=data.get("cleaned_content_url"),
            markdown_content_url=data.get("markdown_content_url"),
        )

    @property
    def content_url(self) -> str | None:
        """Content location matching the job's scrape type, if any."""
        attr = CONTENT_URL_FIELDS.get(self.scrape_type)
        if attr is None:
            return None
        return getattr(self, attr) or None

    @property
    def content(self) -> str | None:
        """Content fetched by a previous ``get_content`` call, or None."""
        return self._cache.value

    async def get_content(self, client: httpx.AsyncClient | None = None) -> str | None:
        """Fetch the item's content, caching it after the first success.

        Returns None without any request when the item is not done yet or
        has no URL for the job's scrape type. Those None results are not
        cached, so a later call on a newer snapshot can still succeed.

        Args:
            client: Optional client to reuse; a short-lived one is created
                when omitted

        Returns:
            Content body as text, or None when not available

        Raises:
            httpx.HTTPStatusError: If the content URL answers with non-2xx
            httpx.RequestError: On network failures
        """
        if self.status != ITEM_DONE_STATUS:
            return None
        if self._cache.fetched:
            return self._cache.value

        url = self.content_url
        if not url:
            return None

        async with self._lock:
            # Another task may have populated the cache while we waited
            if self._cache.fetched:
                return self._cache.value
            body = await self._fetch(url, client)
            self._cache.store(body)
            return body

    async def _fetch(self, url: str, client: httpx.AsyncClient | None) -> str:
        if client is not None:
            response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
            return response.text

        async with httpx.AsyncClient(follow_redirects=True) as own_client:
            response = await own_client.get(url)
            response.raise_for_status()
            return response.text


@dataclass(frozen=True)
class Job:
    """Snapshot of a crawl job as reported by the server.

    A job is never updated in place; polling produces a new Job per response.

    Args:
        id: Job identifier
        org_id: Owning organization
        url: Seed URL of the crawl
        status: Server-side status; open set of strings
        scrape_type: Requested scrape type; unknown values are kept as-is
        items_limit: Maximum number of pages to crawl
        created_at: Creation time
        updated_at: Last update time
        webhook_url: Webhook notified on completion
        whitelist_regexp: Only URLs matching this pattern are crawled
        blacklist_regexp: URLs matching this pattern are skipped
        allow_subdomains: Whether subdomains of the seed are crawled
        recommended_pull_delay_ms: Server hint for the next poll
        finished_at: Completion time, set once terminal
        webhook_status: Webhook delivery status
        webhook_error: Webhook delivery error
        job_items: Crawled items
    """

    id: str
    org_id: str
    url: str
    status: str
    scrape_type: str
    items_limit: int
    created_at: datetime
    updated_at: datetime
    webhook_url: str | None
    whitelist_regexp: str | None = None
    blacklist_regexp: str | None = None
    allow_subdomains: bool | None = None
    recommended_pull_delay_ms: int | None = None
    finished_at: datetime | None = None
    webhook_status: str | None = None
    webhook_error: str | None = None
    job_items: tuple[JobItem, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Job:
        """Build a job, including its items, from a decoded response.

        Raises:
            MissingFieldError: If a required job or item field is absent
            InvalidResponseError: If a timestamp cannot be parsed
        """
        _require(data, JOB_REQUIRED_FIELDS, "Job")
        scrape_type = data["scrape_type"]
        finished_at = data.get("finished_at")
        items = data.get("job_items") or []
        return cls(
            id=data["id"],
            org_id=data["org_id"],
            url=data["url"],
            status=data["status"],
            scrape_type=scrape_type,
            items_limit=data["items_limit"],
            created_at=_parse_timestamp(data["created_at"], "created_at"),
            updated_at=_parse_timestamp(data["updated_at"], "updated_at"),
            webhook_url=data["webhook_url"],
            whitelist_regexp=data.get("whitelist_regexp"),
            blacklist_regexp=data.get("blacklist_regexp"),
            allow_subdomains=data.get("allow_subdomains"),
            recommended_pull_delay_ms=data.get("recommended_pull_delay_ms"),
            finished_at=(
                _parse_timestamp(finished_at, "finished_at") if finished_at else None
            ),
            webhook_status=data.get("webhook_status"),
            webhook_error=data.get("webhook_error"),
            job_items=tuple(
                JobItem.from_dict(item, scrape_type=scrape_type) for item in items
            ),
        )

    def is_terminal(self) -> bool:
        """Return True once the job is done, errored or cancelled."""
        return self.status in TERMINAL_STATUSES

    def items_by_status(self, status: str) -> list[JobItem]:
        """Return the items currently in ``status``."""
        return [item for item in self.job_items if item.status == status]
