"""Access tracking: selections feed future ranking."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from .links import mark_accessed
from .models import Store

logger = logging.getLogger(__name__)


def record_access(store: Store, link_id: Optional[str], now: Optional[datetime] = None) -> Store:
    """Return a copy of ``store`` with ``link_id`` marked accessed.

    An unknown id is a no-op: a stale selection racing a deletion or merge
    is expected. The input store is returned unchanged in that case.
    """
    link = store.get(link_id) if link_id is not None else None
    if link is None:
        logger.debug("Ignoring access to unknown link %s", link_id)
        return store

    updated = dict(store)
    updated[link_id] = mark_accessed(link, now)
    return updated
