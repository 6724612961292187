"""
Cursor pagination for the published feed.

The cursor is the ISO-8601 ``published_at`` of the last item on the previous
page, in UTC with microseconds.  A page is fetched as ``limit + 1`` rows in
descending ``published_at`` order; the extra row only signals that another
page exists and is never returned.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence, TypeVar

from app.config import settings
from app.errors import ValidationError

T = TypeVar("T")


def as_utc(value: datetime) -> datetime:
    """Normalise *value* to an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_limit(raw: str | int | None) -> int:
    """
    Parse a client-supplied page size.

    Absent, non-numeric or non-positive values fall back to
    ``settings.DEFAULT_PAGE_SIZE``; anything above ``settings.MAX_PAGE_SIZE``
    is clamped to it.
    """
    try:
        limit = int(raw) if raw is not None else 0
    except (TypeError, ValueError):
        limit = 0
    if limit < 1:
        limit = settings.DEFAULT_PAGE_SIZE
    return min(limit, settings.MAX_PAGE_SIZE)


def encode_cursor(published_at: datetime) -> str:
    return as_utc(published_at).isoformat(timespec="microseconds").replace("+00:00", "Z")


def decode_cursor(cursor: str | None) -> datetime | None:
    """
    Turn a cursor back into the exclusive upper bound for ``published_at``.

    Returns None (no bound, start from the newest article) for an absent or
    blank cursor.  Raises ``ValidationError`` if the text is not a timestamp.
    """
    if cursor is None or not cursor.strip():
        return None
    try:
        parsed = datetime.fromisoformat(cursor.strip())
    except ValueError:
        raise ValidationError("Invalid cursor") from None
    return as_utc(parsed)


@dataclass(frozen=True)
class PageWindow:
    before: datetime | None
    limit: int

    @property
    def fetch_limit(self) -> int:
        return self.limit + 1


def build_window(cursor: str | None, limit: str | int | None) -> PageWindow:
    return PageWindow(before=decode_cursor(cursor), limit=parse_limit(limit))


def split_page(rows: Sequence[T], limit: int) -> tuple[list[T], str | None]:
    """
    Trim an over-fetched result to *limit* items.

    A next cursor is produced only when more than *limit* rows came back; it
    encodes ``published_at`` of the last row that is kept.
    """
    if len(rows) > limit:
        items = list(rows[:limit])
        return items, encode_cursor(items[-1].published_at)
    return list(rows), None
