import math
from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from article_api.config import settings

SortDirection = Literal["asc", "desc"]

# Upper bound of the INTEGER primary key; larger ids cannot exist.
MAX_ARTICLE_ID = 2_147_483_647
# Keeps (page - 1) * MAX_PAGE_SIZE well inside a BIGINT OFFSET.
MAX_PAGE = 2_147_483_647


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Article ---

class ArticleCreate(CamelModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    photo_url: str | None = None


class ArticleUpdate(CamelModel):
    title: str | None = Field(None, min_length=1)
    content: str | None = Field(None, min_length=1)
    photo_url: str | None = None

    @field_validator("title", "content")
    @classmethod
    def _reject_explicit_null(cls, value: str | None) -> str:
        # photo_url may be cleared with null; title and content may not.
        if value is None:
            raise ValueError("must be a non-empty string when provided")
        return value

    @model_validator(mode="after")
    def _require_at_least_one_field(self) -> "ArticleUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided to update an article")
        return self


class ArticleResponse(CamelModel):
    id: int
    title: str
    content: str
    photo_url: str | None = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Pagination ---

class PaginationMeta(CamelModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, page_size: int, total_items: int) -> "PaginationMeta":
        total_pages = math.ceil(total_items / page_size) if total_items > 0 else 0
        return cls(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


class PaginatedArticles(CamelModel):
    data: list[ArticleResponse]
    pagination: PaginationMeta


class ArticleListQuery(CamelModel):
    """
    Strictly typed listing parameters, built from the raw query string by
    ``dependencies.parse_list_query``.

    ``page`` below 1 is coerced to 1 and ``page_size`` is clamped into
    ``[1, settings.MAX_PAGE_SIZE]``; neither is ever rejected for being out
    of range.  Naive datetimes are read as UTC.
    """

    page: int = Field(1, le=MAX_PAGE)
    page_size: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)
    sort_direction: SortDirection = "desc"
    created_from: datetime | None = Field(None, alias="from")
    created_to: datetime | None = Field(None, alias="to")

    @field_validator("page")
    @classmethod
    def _coerce_page(cls, value: int) -> int:
        return max(1, value)

    @field_validator("page_size")
    @classmethod
    def _clamp_page_size(cls, value: int) -> int:
        return min(max(1, value), settings.MAX_PAGE_SIZE)

    @field_validator("sort_direction", mode="before")
    @classmethod
    def _normalise_direction(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("created_from", "created_to")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @property
    def offset(self) -> int:
        """SQL OFFSET value computed from the current page and page size."""
        return (self.page - 1) * self.page_size


# --- Draft generation ---

class _ChatMessageBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = None


class SystemMessage(_ChatMessageBase):
    role: Literal["system"]
    content: str


class UserMessage(_ChatMessageBase):
    role: Literal["user"]
    content: str


class AssistantMessage(_ChatMessageBase):
    role: Literal["assistant"]
    content: str | None = None


ChatMessage = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage],
    Field(discriminator="role"),
]


class GenerateArticleRequest(CamelModel):
    model: str = Field(min_length=1)
    messages: list[ChatMessage] = Field(min_length=1)
    # Hints used by the local template provider; the remote provider only
    # sends model + messages.
    topic: str | None = None
    keywords: list[str] = []
    tone: str | None = None


# --- Metrics ---

class MetricsResponse(CamelModel):
    total_articles: int
    cache_info: dict = {}
