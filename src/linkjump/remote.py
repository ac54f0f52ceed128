"""HTTP client for the remote copy of the link store.

The remote holds a JSON list of links with camelCase keys, either bare or
wrapped as ``{"links": [...]}``. Blocking calls go through requests; the
async wrappers hand them to a worker thread so the caller's loop keeps
serving reads and edits while a sync is in flight.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import requests
from pydantic import ValidationError

from . import config
from .errors import SyncFailed
from .models import Link, Store

logger = logging.getLogger(__name__)


def parse_remote_links(payload: Any) -> Store:
    """Build a Store from a remote payload, skipping records that fail validation."""
    if isinstance(payload, dict):
        payload = payload.get("links", [])
    if not isinstance(payload, list):
        raise SyncFailed(f"Unexpected remote payload type: {type(payload).__name__}")

    store: Store = {}
    for item in payload:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object remote record: %r", item)
            continue
        try:
            link = Link.model_validate(item)
        except ValidationError as e:
            logger.warning("Skipping invalid remote record %r: %s", item.get("id"), e)
            continue
        store[link.id] = link
    return store


def serialize_links(store: Store) -> list[dict]:
    return [link.to_wire() for link in store.values()]


class RemoteClient:
    """Fetches and pushes the full remote record set."""

    def __init__(self, base_url: str, token: str = "", timeout: float = config.REMOTE_HTTP_TIMEOUT):
        self.base_url = config.validate_remote_url(base_url).rstrip("/")
        self.token = token
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "RemoteClient":
        config.init()
        if not config.REMOTE_URL:
            raise SyncFailed("LINKJUMP_REMOTE_URL not set")
        return cls(config.REMOTE_URL, config.REMOTE_TOKEN, config.REMOTE_HTTP_TIMEOUT)

    @property
    def links_url(self) -> str:
        return f"{self.base_url}{config.REMOTE_LINKS_PATH}"

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def fetch(self) -> Store:
        """GET the remote store."""
        try:
            resp = requests.get(self.links_url, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise SyncFailed(f"Fetching remote links failed: {e}") from e
        except ValueError as e:
            raise SyncFailed(f"Remote returned invalid JSON: {e}") from e

        store = parse_remote_links(payload)
        logger.info("Fetched %d remote links from %s", len(store), self.base_url)
        return store

    def push(self, store: Store) -> None:
        """PUT the full merged store to the remote."""
        try:
            resp = requests.put(
                self.links_url,
                headers=self._headers(),
                json={"links": serialize_links(store)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise SyncFailed(f"Pushing links to remote failed: {e}") from e
        logger.info("Pushed %d links to %s", len(store), self.base_url)

    async def fetch_async(self) -> Store:
        return await asyncio.to_thread(self.fetch)

    async def push_async(self, store: Store) -> None:
        await asyncio.to_thread(self.push, store)


def get_client(base_url: Optional[str] = None) -> RemoteClient:
    """Client for ``base_url``, or the configured remote."""
    if base_url:
        config.init()
        return RemoteClient(base_url, config.REMOTE_TOKEN, config.REMOTE_HTTP_TIMEOUT)
    return RemoteClient.from_config()
