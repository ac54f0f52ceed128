"""The process-owned local link store and the flows that write to it.

Every mutation is committed to memory first and persisted second, so a
failed write (PersistFailed) never loses the user's change for the running
process.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from . import db
from .access import record_access
from .links import create_link, mark_deleted, update_link
from .models import Link, Store
from .ranking import resolve_query, visible

logger = logging.getLogger(__name__)


class LinkBook:
    def __init__(
        self,
        store: Optional[Store] = None,
        save: Optional[Callable[[Store], None]] = None,
    ):
        self._store: Store = dict(store or {})
        self._save = save if save is not None else db.save_local

    @classmethod
    def load(cls) -> "LinkBook":
        """Build from the persisted local store."""
        store = db.load_local()
        logger.info("Loaded %d links", len(store))
        return cls(store)

    @property
    def store(self) -> Store:
        """Snapshot of the current store."""
        return dict(self._store)

    def get(self, link_id: str) -> Optional[Link]:
        return self._store.get(link_id)

    def __len__(self) -> int:
        return len(self._store)

    def replace(self, store: Store) -> None:
        """Swap in a whole new store (a merge result) and persist it."""
        self._commit(dict(store))

    def _commit(self, store: Store) -> None:
        self._store = store
        self._save(self._store)

    def _put(self, link: Link) -> Link:
        store = dict(self._store)
        store[link.id] = link
        self._commit(store)
        return link

    # --- Flows ---

    def add(self, url: str, description: str = "", now: Optional[datetime] = None) -> Link:
        """The new-link flow."""
        link = create_link(url, description, now)
        logger.info("Added link %s -> %s", link.id, link.url)
        return self._put(link)

    def edit(
        self,
        link_id: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Link]:
        link = self._store.get(link_id)
        if link is None:
            logger.debug("Edit of unknown link %s ignored", link_id)
            return None
        return self._put(update_link(link, url=url, description=description))

    def delete(self, link_id: str, now: Optional[datetime] = None) -> Optional[Link]:
        link = self._store.get(link_id)
        if link is None:
            logger.debug("Delete of unknown link %s ignored", link_id)
            return None
        return self._put(mark_deleted(link, now))

    def access(self, link_id: Optional[str], now: Optional[datetime] = None) -> Optional[Link]:
        updated = record_access(self._store, link_id, now)
        if updated is self._store:
            return None
        self._commit(updated)
        return updated[link_id]

    # --- Queries ---

    def visible(self, query: Optional[str] = "", limit: Optional[int] = None) -> list[Link]:
        return visible(self._store, query, limit)

    def go(self, query: Optional[str], now: Optional[datetime] = None) -> Optional[Link]:
        """Follow the unique match for ``query``, recording the access."""
        link = resolve_query(self._store, query)
        if link is None:
            return None
        return self.access(link.id, now)

    def open(self, query: Optional[str], index: int = 0, now: Optional[datetime] = None) -> Optional[Link]:
        """Follow the ``index``-th visible match for ``query``."""
        found = self.visible(query)
        if not 0 <= index < len(found):
            return None
        return self.access(found[index].id, now)
