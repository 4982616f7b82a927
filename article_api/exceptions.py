"""
Domain exceptions for the Article API.

Every exception carries the HTTP status it maps to so the handlers in
``error_handlers`` can render them without a lookup table.  Services raise
these; routers never catch them.
"""
from datetime import datetime
from typing import Any

DATE_RANGE_MESSAGE = "The start date must be earlier than or equal to end date"


class ArticleAPIError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None):
        self.message = message
        self.details = details or []
        super().__init__(message)


class ValidationError(ArticleAPIError):
    """Malformed or missing input.  Always client-caused."""

    status_code = 400


class NotFoundError(ArticleAPIError):
    """A referenced resource has no matching row."""

    status_code = 404


class ArticleNotFoundError(NotFoundError):
    def __init__(self, article_id: int):
        self.article_id = article_id
        super().__init__(f"Article {article_id} was not found")


class InvalidDateRangeError(ArticleAPIError):
    status_code = 400

    def __init__(self, created_from: datetime, created_to: datetime):
        self.created_from = created_from
        self.created_to = created_to
        super().__init__(
            DATE_RANGE_MESSAGE,
            details=[{
                "location": "query",
                "field": "from",
                "message": DATE_RANGE_MESSAGE,
                "type": "date_range",
            }],
        )


class DependencyMissingError(ArticleAPIError):
    """A service was constructed without a required collaborator."""

    def __init__(self, dependency_name: str):
        self.dependency_name = dependency_name
        super().__init__(f"Missing ArticleService dependency: {dependency_name}")


class ProviderError(ArticleAPIError):
    """The draft provider failed or returned an unusable result."""

    status_code = 502

    def __init__(self, provider: str, message: str, upstream_status: int | None = None):
        self.provider = provider
        self.upstream_status = upstream_status
        super().__init__(f"[{provider}] {message}")


class ProviderNotConfiguredError(ProviderError):
    status_code = 503

    def __init__(self, provider: str, message: str = "provider is not configured"):
        super().__init__(provider, message)
