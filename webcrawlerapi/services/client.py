"""Async client for the WebCrawlerAPI service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from webcrawlerapi.core.config import (
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_MAX_POLLS,
    DEFAULT_POLL_DELAY_SECONDS,
    Settings,
)
from webcrawlerapi.core.exceptions import InvalidResponseError
from webcrawlerapi.services.models import CrawlResponse, Job, ScrapeType

logger = logging.getLogger(__name__)


class WebCrawlerAPI:
    """Client for submitting crawl jobs and tracking them to completion.

    Every request carries the bearer token and a JSON content type. HTTP
    errors are raised by httpx and passed through untouched.

    Example:
        >>> async with WebCrawlerAPI(api_key="sk-test") as api:
        ...     job = await api.crawl("https://example.com", items_limit=5)
        ...     for item in job.job_items:
        ...         print(await item.get_content())
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        version: str = DEFAULT_API_VERSION,
        timeout: float = 60.0,
        default_poll_delay: int = DEFAULT_POLL_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Bearer token for the API
            base_url: API root URL; a trailing slash is removed
            version: Version path segment
            timeout: Request timeout in seconds
            default_poll_delay: Seconds between polls when the server sends
                no ``recommended_pull_delay_ms``
            transport: Optional httpx transport, mainly for tests
        """
        self._base_url = base_url.rstrip("/")
        self._version = version
        self._default_poll_delay = default_poll_delay
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> WebCrawlerAPI:
        """Create a client from loaded settings."""
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            version=settings.api_version,
            timeout=settings.timeout,
            default_poll_delay=settings.default_poll_delay,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def version(self) -> str:
        return self._version

    async def __aenter__(self) -> WebCrawlerAPI:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def submit(
        self,
        url: str,
        scrape_type: str = ScrapeType.HTML.value,
        items_limit: int = 10,
        webhook_url: str | None = None,
        allow_subdomains: bool = False,
        whitelist_regexp: str | None = None,
        blacklist_regexp: str | None = None,
        main_content_only: bool = False,
    ) -> CrawlResponse:
        """Submit a crawl job without waiting for it.

        Args:
            url: Seed URL to crawl
            scrape_type: "html", "cleaned" or "markdown"
            items_limit: Maximum number of pages to crawl
            webhook_url: Webhook notified when the job finishes
            allow_subdomains: Whether subdomains of the seed are crawled
            whitelist_regexp: Only crawl URLs matching this pattern
            blacklist_regexp: Skip URLs matching this pattern
            main_content_only: Strip navigation, footers and similar chrome

        Returns:
            CrawlResponse with the new job id

        Raises:
            InvalidResponseError: If the response has no job id
            httpx.HTTPStatusError: If the API answers with non-2xx
        """
        payload: dict[str, Any] = {
            "url": url,
            "scrape_type": scrape_type,
            "items_limit": items_limit,
            "allow_subdomains": allow_subdomains,
            "main_content_only": main_content_only,
        }
        # Optional keys are omitted rather than sent as null
        if webhook_url is not None:
            payload["webhook_url"] = webhook_url
        if whitelist_regexp is not None:
            payload["whitelist_regexp"] = whitelist_regexp
        if blacklist_regexp is not None:
            payload["blacklist_regexp"] = blacklist_regexp

        data = await self._request("POST", "/crawl", json=payload)
        if not isinstance(data, dict) or data.get("id") is None:
            raise InvalidResponseError("Invalid API response: missing id field")

        logger.debug("Submitted crawl of %s as job %s", url, data["id"])
        return CrawlResponse(id=data["id"])

    async def get_job(self, job_id: str) -> Job:
        """Fetch the current state of a job, including its items.

        Raises:
            InvalidResponseError: If the body is not a JSON object
            MissingFieldError: If a required job or item field is absent
            httpx.HTTPStatusError: If the API answers with non-2xx
        """
        data = await self._request("GET", f"/job/{job_id}")
        if not isinstance(data, dict):
            raise InvalidResponseError(
                "Invalid API response: expected object", {"job_id": job_id}
            )
        return Job.from_dict(data)

    async def cancel_job(self, job_id: str) -> dict[str, Any]:
        """Cancel a job and return the server's response as-is.

        Cancelling does not interrupt a ``crawl`` call that is polling the
        same job; that loop ends when it observes the cancelled status.

        Raises:
            InvalidResponseError: If the body is not a JSON object
            httpx.HTTPStatusError: If the API answers with non-2xx
        """
        data = await self._request("PUT", f"/job/{job_id}/cancel")
        if not isinstance(data, dict):
            raise InvalidResponseError(
                "Invalid API response: expected object", {"job_id": job_id}
            )
        logger.info("Cancel requested for job %s", job_id)
        return data

    async def crawl(
        self,
        url: str,
        scrape_type: str = ScrapeType.HTML.value,
        items_limit: int = 10,
        webhook_url: str | None = None,
        allow_subdomains: bool = False,
        whitelist_regexp: str | None = None,
        blacklist_regexp: str | None = None,
        main_content_only: bool = False,
        max_polls: int = DEFAULT_MAX_POLLS,
    ) -> Job:
        """Submit a crawl and poll until the job reaches a terminal status.

        Between polls the client waits for the server's
        ``recommended_pull_delay_ms`` (truncated to whole seconds) or the
        default delay. If the budget runs out first, the last fetched job is
        returned as-is; check ``job.is_terminal()`` to tell the cases apart.
        A budget below one still performs a single fetch.

        Args:
            url: Seed URL to crawl
            scrape_type: "html", "cleaned" or "markdown"
            items_limit: Maximum number of pages to crawl
            webhook_url: Webhook notified when the job finishes
            allow_subdomains: Whether subdomains of the seed are crawled
            whitelist_regexp: Only crawl URLs matching this pattern
            blacklist_regexp: Skip URLs matching this pattern
            main_content_only: Strip navigation, footers and similar chrome
            max_polls: Maximum number of job fetches

        Returns:
            The terminal job, or the last fetched job on exhaustion

        Raises:
            InvalidResponseError: If a response has the wrong shape
            MissingFieldError: If a job response lacks a required field
            httpx.HTTPError: On any transport failure; polling stops
        """
        response = await self.submit(
            url,
            scrape_type=scrape_type,
            items_limit=items_limit,
            webhook_url=webhook_url,
            allow_subdomains=allow_subdomains,
            whitelist_regexp=whitelist_regexp,
            blacklist_regexp=blacklist_regexp,
            main_content_only=main_content_only,
        )
        return await self.wait_for_job(response.id, max_polls=max_polls)

    async def wait_for_job(self, job_id: str, max_polls: int = DEFAULT_MAX_POLLS) -> Job:
        """Poll an existing job until it is terminal or the budget runs out.

        Args:
            job_id: Job to poll
            max_polls: Maximum number of fetches; values below 1 mean 1

        Returns:
            The terminal job, or the last fetched job on exhaustion
        """
        budget = max(max_polls, 1)
        for poll in range(1, budget + 1):
            job = await self.get_job(job_id)
            if job.is_terminal():
                logger.debug("Job %s finished with status %s", job_id, job.status)
                return job
            if poll == budget:
                break

            delay = self._next_delay(job)
            logger.debug(
                "Job %s is %s (poll %d/%d), next poll in %ds",
                job_id,
                job.status,
                poll,
                budget,
                delay,
            )
            await asyncio.sleep(delay)

        logger.warning(
            "Job %s still %s after %d polls", job_id, job.status, budget
        )
        return job

    def _next_delay(self, job: Job) -> int:
        if job.recommended_pull_delay_ms:
            return int(job.recommended_pull_delay_ms / 1000)
        return self._default_poll_delay

    async def _request(
        self, method: str, path: str, *, json: dict[str, Any] | None = None
    ) -> Any:
        response = await self._client.request(
            method, f"/{self._version}{path}", json=json
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise InvalidResponseError(
                "Invalid API response: body is not JSON",
                {"path": path, "status_code": response.status_code},
            ) from exc
