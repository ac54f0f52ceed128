"""Tests for the SQLite persistence collaborator."""

import sqlite3
from unittest.mock import patch

import pytest

from linkjump.db import (
    get_connection,
    init_db,
    load_local,
    read_links,
    save_local,
    write_links,
)
from linkjump.errors import PersistFailed
from linkjump.models import Link


def _store():
    return {
        "z": Link(id="z", url="z.com", description="last letter", created_at=10),
        "a": Link(id="a", url="a.com", created_at=20, last_accessed_at=30, num_accessed=2),
        "d": Link(id="d", url="d.com", created_at=5, deleted_at=40),
    }


class TestSchema:
    def test_init_creates_links_table(self, temp_data_dir):
        init_db()
        conn = get_connection()
        try:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
        finally:
            conn.close()
        assert "links" in tables

    def test_init_is_idempotent(self, temp_data_dir):
        init_db()
        init_db()


class TestSaveLoad:
    def test_roundtrip_preserves_records_and_order(self, temp_data_dir):
        store = _store()
        save_local(store)
        loaded = load_local()
        assert list(loaded) == ["z", "a", "d"]
        for link_id, link in store.items():
            assert loaded[link_id].model_dump() == link.model_dump()

    def test_tombstones_persisted(self, temp_data_dir):
        save_local(_store())
        assert load_local()["d"].is_deleted

    def test_save_replaces_previous(self, temp_data_dir):
        save_local(_store())
        save_local({"n": Link(id="n", url="n.com", created_at=1)})
        assert list(load_local()) == ["n"]

    def test_load_empty(self, temp_data_dir):
        assert load_local() == {}

    def test_write_and_read_on_connection(self, temp_data_dir):
        init_db()
        conn = get_connection()
        try:
            write_links(conn, _store())
            assert list(read_links(conn)) == ["z", "a", "d"]
        finally:
            conn.close()


class TestPersistFailures:
    def test_save_error_raises_persist_failed(self, temp_data_dir):
        with patch("linkjump.db.get_connection", side_effect=sqlite3.OperationalError("disk full")):
            with pytest.raises(PersistFailed, match="disk full"):
                save_local(_store())

    def test_load_error_raises_persist_failed(self, temp_data_dir):
        with patch("linkjump.db.init_db", side_effect=sqlite3.DatabaseError("corrupt")):
            with pytest.raises(PersistFailed):
                load_local()

    def test_failed_write_leaves_previous_rows(self, temp_data_dir):
        save_local(_store())
        bad = {"x": Link(id="x", url="x.com"), "y": Link(id="x", url="dup.com")}
        # Two rows with the same primary key abort the transaction
        with pytest.raises(PersistFailed):
            save_local(bad)
        assert list(load_local()) == ["z", "a", "d"]
