"""
Row ↔ entity mapping for the ``articles`` table.

The store is the only caller.  Drivers disagree on how they hand values
back (asyncpg returns aware datetimes, SQLite returns naive ones or plain
strings, some COUNT expressions come back as text or Decimal), so every
value is normalised here and nothing downstream sees a storage-native
representation.
"""
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from article_api.schemas import ArticleResponse


def to_int(value: int | str | Decimal | None) -> int:
    """Coerce a count-like value to ``int``; ``None`` counts as zero."""
    if value is None:
        return 0
    if isinstance(value, str):
        return int(value.strip() or 0)
    return int(value)


def to_utc_datetime(value: datetime | str) -> datetime:
    """Return *value* as a timezone-aware UTC datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def map_article_row(row: Mapping[str, Any]) -> ArticleResponse:
    """Map one ``articles`` row (column names as keys) to the entity."""
    return ArticleResponse(
        id=to_int(row["id"]),
        title=row["title"],
        content=row["content"],
        photo_url=row["photo_url"],
        created_at=to_utc_datetime(row["created_at"]),
        updated_at=to_utc_datetime(row["updated_at"]),
    )
