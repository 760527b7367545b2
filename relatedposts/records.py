"""
Content records shared by the ranking engine and its adapters.

A ContentRecord is immutable: scoring and listing derive new values and
never write back to the record.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from .logger import get_logger
from .normalize import normalize_category, normalize_tags, normalize_text

logger = get_logger()

# Substituted for unparsable publish timestamps: the post is treated as very old.
EPOCH_FALLBACK = datetime(1970, 1, 1, tzinfo=timezone.utc)

KNOWN_FIELDS = {
    "id",
    "title",
    "tags",
    "category",
    "published",
    "password",
    "restricted",
    "description",
    "pinned",
    "draft",
}


@dataclass(frozen=True)
class ContentRecord:
    id: str
    title: str
    published_at: datetime
    tags: frozenset = field(default_factory=frozenset)
    category: Optional[str] = None
    restricted: bool = False
    description: str = ""
    pinned: bool = False
    draft: bool = False


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_published(value: Any) -> Optional[datetime]:
    """
    Parse a publish timestamp.

    Accepts datetimes, dates, ISO-8601 strings and epoch milliseconds
    (the feed format). Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(s))
        except ValueError:
            return None
    return None


def record_from_dict(data: Dict[str, Any]) -> ContentRecord:
    """
    Build a ContentRecord from a raw mapping.

    Raises ValueError when `id` or `title` is missing. A bad `published`
    value falls back to EPOCH_FALLBACK and is logged, never raised.
    """
    record_id = data.get("id")
    if record_id is None or str(record_id).strip() == "":
        raise ValueError("Record is missing 'id'")
    title = data.get("title")
    if title is None:
        raise ValueError(f"Record {record_id!r} is missing 'title'")

    published_at = parse_published(data.get("published"))
    if published_at is None:
        logger.record_malformed_timestamp()
        logger.warning(
            "Unparsable publish timestamp, treating as oldest",
            id=normalize_text(str(record_id)),
            published=data.get("published"),
        )
        published_at = EPOCH_FALLBACK

    restricted = bool(data.get("restricted")) or bool(data.get("password"))

    return ContentRecord(
        id=normalize_text(str(record_id)),
        title=str(title),
        published_at=published_at,
        tags=normalize_tags(data.get("tags")),
        category=normalize_category(data.get("category")),
        restricted=restricted,
        description=normalize_text(str(data.get("description") or "")),
        pinned=bool(data.get("pinned")),
        draft=bool(data.get("draft")),
    )


def record_to_dict(record: ContentRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "title": record.title,
        "tags": sorted(record.tags),
        "category": record.category or "",
        "published": record.published_at.isoformat(),
        "restricted": record.restricted,
        "description": record.description,
        "pinned": record.pinned,
        "draft": record.draft,
    }
