"""Link record construction and pure mutators.

Mutators never touch a Store; they return a new Link that the caller
commits under the same id.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from .models import Link, LinkCreate, LinkUpdate, coerce_timestamp

# Lowest possible timestamp; missing or malformed values compare as this.
EPOCH_MIN = datetime.min.replace(tzinfo=timezone.utc)


def _generate_id() -> str:
    return uuid.uuid4().hex[:12]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _ts(value: Optional[datetime]) -> datetime:
    return value if value is not None else EPOCH_MIN


def recency(link: Link) -> datetime:
    """Ranking key: last access, else creation."""
    return _ts(link.last_accessed_at or link.created_at)


def activity(link: Link) -> datetime:
    """Most recent meaningful timestamp, used for last-writer-wins."""
    return max(recency(link), _ts(link.deleted_at))


def create_link(url: str, description: str = "", now: Optional[datetime] = None) -> Link:
    """Create a fresh, never-accessed link."""
    data = LinkCreate(url=url, description=description or "")
    return Link(
        id=_generate_id(),
        url=data.url,
        description=data.description,
        created_at=now or utc_now(),
        last_accessed_at=None,
        num_accessed=0,
        deleted_at=None,
    )


def mark_accessed(link: Link, now: Optional[datetime] = None) -> Link:
    """Record one selection of ``link``."""
    now = coerce_timestamp(now) or utc_now()
    if link.created_at is not None and now < link.created_at:
        now = link.created_at
    return link.model_copy(
        update={"last_accessed_at": now, "num_accessed": link.num_accessed + 1}
    )


def mark_deleted(link: Link, now: Optional[datetime] = None) -> Link:
    """Tombstone ``link``. Deleting twice keeps the first deletion time."""
    if link.deleted_at is not None:
        return link
    return link.model_copy(update={"deleted_at": coerce_timestamp(now) or utc_now()})


def update_link(
    link: Link,
    url: Optional[str] = None,
    description: Optional[str] = None,
) -> Link:
    """Apply an edit of url and/or description."""
    changes = LinkUpdate(url=url, description=description)
    update = changes.model_dump(exclude_none=True)
    if not update:
        return link
    return link.model_copy(update=update)
