"""Shared test fixtures."""

import pytest


@pytest.fixture(autouse=True)
def temp_data_dir(monkeypatch, tmp_path):
    """Override data directories to use a temp dir for each test."""
    import linkjump.config as config

    data_dir = tmp_path / "data"
    data_dir.mkdir()

    monkeypatch.setattr(config, "DATA_DIR", data_dir)
    monkeypatch.setattr(config, "DB_PATH", data_dir / "linkjump.db")

    # Keep a developer's .env out of the tests
    monkeypatch.setattr(config, "_env_initialized", True)
    monkeypatch.setattr(config, "REMOTE_URL", "")
    monkeypatch.setattr(config, "REMOTE_TOKEN", "")

    # Also patch the db module's reference to DB_PATH
    import linkjump.db as db_module
    monkeypatch.setattr(db_module, "DB_PATH", data_dir / "linkjump.db")

    return data_dir
