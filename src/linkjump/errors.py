"""Exceptions surfaced by the sync and persistence layers."""


class LinkjumpError(Exception):
    """Base class for linkjump failures."""


class SyncFailed(LinkjumpError):
    """The remote copy could not be fetched or pushed. Local state is untouched."""


class PersistFailed(LinkjumpError):
    """Writing the local store to disk failed.

    The in-memory store stays authoritative for the running process; the
    change is durable only after a later successful write.
    """
