"""Merge engine: reconcile the local and remote link stores.

Per id, last-writer-wins on ``activity()``; an exact tie keeps the local
copy. A winning tombstone replaces a live copy, so deletions propagate
instead of being resurrected by a stale remote. After per-id resolution,
live records sharing a normalized url are collapsed: the most used one
survives and the rest are tombstoned.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .links import EPOCH_MIN, activity, mark_deleted
from .models import DiffReport, Link, Store

logger = logging.getLogger(__name__)

LOCAL = "local"
REMOTE = "remote"


def normalize_url(url: str) -> str:
    return url.strip().lower()


def _usage_key(link: Link) -> tuple[int, datetime]:
    return (link.num_accessed, link.last_accessed_at or EPOCH_MIN)


def merge(local: Store, remote: Store) -> tuple[Store, DiffReport]:
    """Merge two stores into one. Neither input is modified.

    Output order is local order, followed by remote-only ids in remote order.
    """
    merged: Store = {}
    origin: dict[str, str] = {}
    counts = {"new_local": 0, "new_remote": 0, "dropped_local": 0, "dropped_remote": 0}

    for link_id, mine in local.items():
        theirs = remote.get(link_id)
        if theirs is None:
            merged[link_id] = mine
            origin[link_id] = LOCAL
            counts["new_local"] += 1
        elif mine.model_dump() == theirs.model_dump():
            merged[link_id] = mine
            origin[link_id] = LOCAL
        elif activity(theirs) > activity(mine):
            logger.debug("Conflict on %s: remote copy wins", link_id)
            merged[link_id] = theirs
            origin[link_id] = REMOTE
            counts["dropped_local"] += 1
        else:
            logger.debug("Conflict on %s: local copy wins", link_id)
            merged[link_id] = mine
            origin[link_id] = LOCAL
            counts["dropped_remote"] += 1

    for link_id, theirs in remote.items():
        if link_id in local:
            continue
        merged[link_id] = theirs
        origin[link_id] = REMOTE
        counts["new_remote"] += 1

    survivors: dict[str, str] = {}
    for link_id, link in list(merged.items()):
        if link.is_deleted:
            continue
        key = normalize_url(link.url)
        incumbent_id = survivors.get(key)
        if incumbent_id is None:
            survivors[key] = link_id
            continue

        incumbent = merged[incumbent_id]
        if _usage_key(link) > _usage_key(incumbent):
            winner, loser = link, incumbent
            survivors[key] = link_id
        else:
            winner, loser = incumbent, link

        logger.debug("Duplicate url %r: %s supersedes %s", key, winner.id, loser.id)
        merged[loser.id] = mark_deleted(loser, max(activity(winner), activity(loser)))
        if origin[loser.id] == LOCAL:
            counts["dropped_local"] += 1
        else:
            counts["dropped_remote"] += 1

    report = DiffReport(**counts)
    logger.info("Merged %d local + %d remote links: %s", len(local), len(remote), report.summary())
    return merged, report
