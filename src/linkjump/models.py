"""Pydantic data models for linkjump."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Epoch values above this are milliseconds (browser clients send Date.now()).
_EPOCH_MS_THRESHOLD = 1e11


def _from_epoch(value: float) -> Optional[datetime]:
    if not math.isfinite(value):
        return None
    if abs(value) > _EPOCH_MS_THRESHOLD:
        value = value / 1000.0
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """Parse a wire timestamp leniently.

    Accepts datetimes, ISO-8601 strings and epoch seconds/milliseconds.
    Anything unparseable becomes None, which sorts lowest everywhere.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        parsed = None
    elif isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = _from_epoch(float(value))
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = _from_epoch(float(text))
            except ValueError:
                parsed = None
    else:
        parsed = None

    if parsed is None:
        logger.warning("Ignoring malformed timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# --- Link Models ---

class Link(BaseModel):
    """A bookmark record. Immutable; mutators in links.py return new values."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    url: str
    description: str = ""
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    last_accessed_at: Optional[datetime] = Field(default=None, alias="lastAccessedAt")
    num_accessed: int = Field(default=0, ge=0, alias="numAccessed")
    deleted_at: Optional[datetime] = Field(default=None, alias="deletedAt")

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created_at", "last_accessed_at", "deleted_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> Optional[datetime]:
        return coerce_timestamp(value)

    @field_validator("num_accessed", mode="before")
    @classmethod
    def _clamp_count(cls, value: Any) -> int:
        if isinstance(value, bool):
            return 0
        try:
            count = int(value)
        except (TypeError, ValueError):
            return 0
        return max(count, 0)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_wire(self) -> dict:
        """Serialize with camelCase keys for the remote copy."""
        return self.model_dump(mode="json", by_alias=True)


# Full record set keyed by id. Insertion order is the store order.
Store = dict[str, Link]


class LinkCreate(BaseModel):
    url: str = Field(..., description="Destination URL")
    description: str = Field(default="", description="Free-text label")

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("url must not be blank")
        return value

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return value.strip()


class LinkUpdate(BaseModel):
    url: Optional[str] = None
    description: Optional[str] = None

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("url must not be blank")
        return value


# --- Sync Models ---

class DiffReport(BaseModel):
    """What the last merge changed, per side."""

    model_config = ConfigDict(frozen=True)

    new_local: int = Field(default=0, description="Local-only records to push")
    new_remote: int = Field(default=0, description="Remote-only records pulled in")
    dropped_local: int = Field(default=0, description="Local copies superseded or deduped")
    dropped_remote: int = Field(default=0, description="Remote copies superseded or deduped")

    @property
    def is_empty(self) -> bool:
        return not (self.new_local or self.new_remote or self.dropped_local or self.dropped_remote)

    def summary(self) -> str:
        return (
            f"new: {self.new_local} local, {self.new_remote} remote / "
            f"old: {self.dropped_local} local, {self.dropped_remote} remote"
        )


class NotifierState(str, Enum):
    IDLE = "idle"
    SHOWING = "showing"
