"""Date ordering for derived photo lists.

Photos sort newest first. Photos without a usable date go after every dated
photo and keep their relative order, as do photos sharing a date.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from loguru import logger

from core.models import Photo

_FALLBACK_FORMATS = ("%Y:%m:%d %H:%M:%S", "%Y/%m/%d", "%Y/%m/%d %H:%M:%S")


def parse_content_datetime(value: str | None) -> datetime | None:
    """Parse a shot date as written in a roll file.

    Accepts ISO 8601 dates and date-times (a trailing `Z` included) and
    EXIF-style `YYYY:MM:DD HH:MM:SS`. Aware values are normalized to naive
    UTC so they compare with naive ones. Returns None when the value is
    empty or unparseable.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        dt = None
        for fmt in _FALLBACK_FORMATS:
            try:
                dt = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


class SortService:
    """Provides ordering utilities for photo lists."""

    def sort_by_date(self, photos: Iterable[Photo]) -> list[Photo]:
        """Return photos newest first, undated photos last, stable otherwise."""
        dated: list[tuple[datetime, Photo]] = []
        undated: list[Photo] = []
        for photo in photos:
            when = parse_content_datetime(photo.date)
            if when is None:
                if photo.date:
                    logger.warning("Unparseable date {!r} on {}", photo.date, photo.src)
                undated.append(photo)
            else:
                dated.append((when, photo))

        # list.sort keeps equal keys in input order even with reverse=True
        dated.sort(key=lambda x: x[0], reverse=True)
        return [p for _, p in dated] + undated
