"""MCP server entry point - link launcher tools."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

from fastmcp import FastMCP

from .book import LinkBook
from .config import DEFAULT_SEARCH_LIMIT, ensure_data_dirs
from .db import init_db
from .models import Link
from .remote import get_client
from .sync import SyncOrchestrator

# Configure logging to stderr (stdout is reserved for MCP JSON-RPC)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("linkjump")

# Initialize data directories and database
ensure_data_dirs()
init_db()

# Create the MCP server
mcp = FastMCP(
    "linkjump",
    instructions=(
        "linkjump is a personal bookmark launcher. "
        "Search links by space-separated terms, follow a match to record the "
        "visit, and sync the local store with the remote copy."
    ),
)

_book: Optional[LinkBook] = None
_orchestrator: Optional[SyncOrchestrator] = None


def _get_book() -> LinkBook:
    global _book
    if _book is None:
        _book = LinkBook.load()
    return _book


def _get_orchestrator() -> SyncOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        client = get_client()
        _orchestrator = SyncOrchestrator(
            _get_book(), client.fetch_async, push_remote=client.push_async
        )
    return _orchestrator


def _link_dict(link: Link) -> dict:
    return {
        "id": link.id,
        "url": link.url,
        "description": link.description,
        "last_accessed_at": link.last_accessed_at.isoformat() if link.last_accessed_at else None,
        "num_accessed": link.num_accessed,
    }


# =============================================================================
# Search Tools (3)
# =============================================================================

@mcp.tool()
def search_links(query: str = "", limit: int = DEFAULT_SEARCH_LIMIT) -> str:
    """List links matching every space-separated term in url or description.

    Most recently used first; links never opened rank by creation time.
    """
    try:
        links = _get_book().visible(query, limit)
        return json.dumps({"count": len(links), "links": [_link_dict(link) for link in links]})
    except Exception as e:
        logger.error("search_links failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


@mcp.tool()
def go(query: str) -> str:
    """Jump straight to the link if exactly one matches the query."""
    try:
        link = _get_book().go(query)
        if link is None:
            return json.dumps({"status": "ambiguous_or_missing", "query": query})
        return json.dumps({"status": "opened", "url": link.url, "link": _link_dict(link)})
    except Exception as e:
        logger.error("go failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


@mcp.tool()
def open_link(query: str = "", index: int = 0) -> str:
    """Open the index-th match for the query (0 = top result) and record the visit."""
    try:
        link = _get_book().open(query, index)
        if link is None:
            return json.dumps({"error": f"No match at index {index}"})
        return json.dumps({"status": "opened", "url": link.url, "link": _link_dict(link)})
    except Exception as e:
        logger.error("open_link failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


# =============================================================================
# Edit Tools (3)
# =============================================================================

@mcp.tool()
def add_link(url: str, description: str = "") -> str:
    """Add a new link."""
    try:
        link = _get_book().add(url, description)
        return json.dumps({"status": "added", "link": _link_dict(link)})
    except Exception as e:
        logger.error("add_link failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


@mcp.tool()
def edit_link(link_id: str, url: str | None = None, description: str | None = None) -> str:
    """Change a link's url and/or description."""
    try:
        link = _get_book().edit(link_id, url=url, description=description)
        if link is None:
            return json.dumps({"error": f"Link {link_id} not found"})
        return json.dumps({"status": "updated", "link": _link_dict(link)})
    except Exception as e:
        logger.error("edit_link failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


@mcp.tool()
def delete_link(link_id: str) -> str:
    """Delete a link. The deletion syncs to the remote copy."""
    try:
        link = _get_book().delete(link_id)
        if link is None:
            return json.dumps({"error": f"Link {link_id} not found"})
        return json.dumps({"status": "deleted", "link_id": link.id})
    except Exception as e:
        logger.error("delete_link failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


# =============================================================================
# Sync Tools (2)
# =============================================================================

@mcp.tool()
async def sync_links() -> str:
    """Merge the local links with the remote copy and push the result."""
    try:
        result = await _get_orchestrator().sync()
        if result is None:
            return json.dumps({"status": "superseded"})
        _, report = result
        return json.dumps({"status": "synced", "report": report.model_dump(), "summary": report.summary()})
    except Exception as e:
        logger.error("sync_links failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


@mcp.tool()
def sync_status() -> str:
    """Link counts and the report of the last sync, while it is still on display."""
    try:
        store = _get_book().store
        deleted = sum(1 for link in store.values() if link.is_deleted)
        stats = {"links": len(store) - deleted, "deleted": deleted, "total": len(store)}
        report = _orchestrator.get_current_report() if _orchestrator is not None else None
        stats["report"] = report.model_dump() if report is not None else None
        stats["syncing"] = bool(_orchestrator and _orchestrator.in_flight)
        return json.dumps(stats)
    except Exception as e:
        logger.error("sync_status failed: %s", e, exc_info=True)
        return json.dumps({"error": str(e)})


# =============================================================================
# Server entry point
# =============================================================================

def main():
    """Run the MCP server."""
    logger.info("linkjump MCP server starting...")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
