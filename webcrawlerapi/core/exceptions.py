"""Exception hierarchy for the WebCrawlerAPI client.

Transport failures (connection errors, timeouts, non-2xx responses) are raised
by httpx and are not wrapped here. These exceptions cover problems with the
content of otherwise successful responses.

Hierarchy::

    WebCrawlerAPIError
    +-- MissingFieldError     -- required field absent while building Job/JobItem
    +-- InvalidResponseError  -- response body has the wrong shape
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "WebCrawlerAPIError",
    "MissingFieldError",
    "InvalidResponseError",
]


class WebCrawlerAPIError(Exception):
    """Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        details: Additional context (field name, job id, etc.)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class MissingFieldError(WebCrawlerAPIError):
    """Raised when a required response field is absent.

    Args:
        field: Wire name of the missing field (e.g. ``"org_id"``)
        entity: Name of the entity being built (``"Job"`` or ``"JobItem"``)
    """

    def __init__(self, field: str, entity: str | None = None) -> None:
        details = {"entity": entity} if entity else None
        super().__init__(f"Missing required field: {field}", details)
        self.field = field
        self.entity = entity


class InvalidResponseError(WebCrawlerAPIError):
    """Raised when a successful response body does not match the protocol.

    Examples:
        - Submission response without an ``id``
        - Job response that is a list instead of an object
        - Body that is not JSON at all
        - Timestamp that cannot be parsed
    """

    pass
