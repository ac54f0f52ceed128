"""Sync orchestrator: fetch -> merge -> persist -> notify (-> push).

The remote fetch is the only suspension point. Reads and edits keep going
against the local book while it is in flight, and the merge runs against
whatever the book holds when the fetch resolves. Each sync takes a
generation number before fetching; a result whose generation is no longer
the latest is discarded, so overlapping syncs never apply out of order.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .book import LinkBook
from .errors import SyncFailed
from .merge import merge
from .models import DiffReport, Store
from .notify import SyncNotifier

logger = logging.getLogger(__name__)

FetchRemote = Callable[[], Union[Awaitable[Store], Store]]
PushRemote = Callable[[Store], Union[Awaitable[None], None]]


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class SyncOrchestrator:
    def __init__(
        self,
        book: LinkBook,
        fetch_remote: FetchRemote,
        push_remote: Optional[PushRemote] = None,
        notifier: Optional[SyncNotifier] = None,
    ):
        self.book = book
        self._fetch_remote = fetch_remote
        self._push_remote = push_remote
        self.notifier = notifier if notifier is not None else SyncNotifier()
        self._generation = 0
        self._in_flight: Optional[int] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    def get_current_report(self) -> Optional[DiffReport]:
        return self.notifier.get_current_report()

    async def sync(self) -> Optional[tuple[Store, DiffReport]]:
        """Run one sync.

        Returns the merged store and its report, or None when a newer sync
        superseded this one. Raises SyncFailed if the fetch (or push) fails
        and PersistFailed if the merged store could not be written; in the
        latter case the merge is still committed in memory.
        """
        self._generation += 1
        generation = self._generation
        self._in_flight = generation
        self.notifier.clear()

        try:
            remote = await _resolve(self._fetch_remote())
        except Exception as e:
            if generation != self._generation:
                logger.info("Discarding failed sync %d, superseded by %d", generation, self._generation)
                return None
            if isinstance(e, SyncFailed):
                logger.warning("Sync %d failed while fetching", generation, exc_info=True)
                raise
            logger.warning("Sync %d failed while fetching: %s", generation, e)
            raise SyncFailed(f"Fetching remote links failed: {e}") from e
        finally:
            if self._in_flight == generation:
                self._in_flight = None

        if generation != self._generation:
            logger.info("Discarding sync %d, superseded by %d", generation, self._generation)
            return None

        merged, report = merge(self.book.store, remote)
        self.notifier.show(report)
        self.book.replace(merged)

        if self._push_remote is not None:
            try:
                await _resolve(self._push_remote(merged))
            except SyncFailed:
                raise
            except Exception as e:
                raise SyncFailed(f"Pushing links to remote failed: {e}") from e

        return merged, report
