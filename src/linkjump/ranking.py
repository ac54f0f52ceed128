"""Filter and order the visible links for a search query."""

from __future__ import annotations

from typing import Optional

from .links import recency
from .models import Link, Store


def split_terms(query: Optional[str]) -> list[str]:
    """Lowercased whitespace-separated terms. Empty query -> no terms."""
    return [term.lower() for term in (query or "").split()]


def matches(link: Link, terms: list[str]) -> bool:
    """True iff every term is a substring of the url or the description."""
    url = link.url.lower()
    description = (link.description or "").lower()
    return all(term in url or term in description for term in terms)


def visible(store: Store, query: Optional[str] = "", limit: Optional[int] = None) -> list[Link]:
    """Live links matching ``query``, most recently used first.

    Never-accessed links rank by creation time. Equal keys keep store order.
    """
    terms = split_terms(query)
    found = [link for link in store.values() if not link.is_deleted and matches(link, terms)]
    # sorted() is stable under reverse=True, so ties keep store order
    found = sorted(found, key=recency, reverse=True)
    if limit is not None:
        found = found[:limit]
    return found


def resolve_query(store: Store, query: Optional[str]) -> Optional[Link]:
    """The single visible match for ``query``, or None if zero or several match."""
    found = visible(store, query, limit=2)
    if len(found) == 1:
        return found[0]
    return None
