"""Tests for the remote HTTP collaborator."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from linkjump.errors import SyncFailed
from linkjump.models import Link
from linkjump.remote import RemoteClient, get_client, parse_remote_links, serialize_links


def _response(payload=None, status_error=None):
    resp = MagicMock()
    resp.json.return_value = payload
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    return resp


class TestParseRemoteLinks:
    def test_bare_list(self):
        store = parse_remote_links([
            {"id": "1", "url": "a.com", "createdAt": 1_700_000_000_000},
            {"id": "2", "url": "b.com", "createdAt": 1_700_000_000_000, "deletedAt": 1_700_000_100_000},
        ])
        assert list(store) == ["1", "2"]
        assert store["2"].is_deleted

    def test_wrapped_list(self):
        store = parse_remote_links({"links": [{"id": "1", "url": "a.com"}]})
        assert list(store) == ["1"]

    def test_invalid_records_skipped(self):
        store = parse_remote_links([
            {"id": "1"},
            "nonsense",
            {"url": "no-id.com"},
            {"id": "ok", "url": "ok.com", "createdAt": "broken"},
        ])
        assert list(store) == ["ok"]
        assert store["ok"].created_at is None

    def test_unexpected_payload(self):
        with pytest.raises(SyncFailed):
            parse_remote_links("hello")

    def test_serialize_camel_case(self):
        wire = serialize_links({"1": Link(id="1", url="a.com", num_accessed=2)})
        assert wire[0]["numAccessed"] == 2


class TestRemoteClient:
    def test_rejects_non_http_url(self):
        with pytest.raises(ValueError):
            RemoteClient("ftp://example.com")

    def test_fetch(self):
        client = RemoteClient("https://sync.example.com/", token="secret")
        payload = [{"id": "1", "url": "a.com"}]
        with patch("linkjump.remote.requests.get", return_value=_response(payload)) as mock_get:
            store = client.fetch()
        assert list(store) == ["1"]
        args, kwargs = mock_get.call_args
        assert args[0] == "https://sync.example.com/links"
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

    def test_fetch_without_token_sends_no_auth(self):
        client = RemoteClient("https://sync.example.com")
        with patch("linkjump.remote.requests.get", return_value=_response([])) as mock_get:
            client.fetch()
        assert "Authorization" not in mock_get.call_args.kwargs["headers"]

    def test_fetch_network_error(self):
        client = RemoteClient("https://sync.example.com")
        with patch("linkjump.remote.requests.get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(SyncFailed, match="down"):
                client.fetch()

    def test_fetch_http_error(self):
        client = RemoteClient("https://sync.example.com")
        resp = _response(status_error=requests.HTTPError("401 Unauthorized"))
        with patch("linkjump.remote.requests.get", return_value=resp):
            with pytest.raises(SyncFailed):
                client.fetch()

    def test_fetch_bad_json(self):
        client = RemoteClient("https://sync.example.com")
        resp = _response()
        resp.json.side_effect = ValueError("Expecting value")
        with patch("linkjump.remote.requests.get", return_value=resp):
            with pytest.raises(SyncFailed):
                client.fetch()

    def test_push(self):
        client = RemoteClient("https://sync.example.com")
        store = {"1": Link(id="1", url="a.com", created_at=10)}
        with patch("linkjump.remote.requests.put", return_value=_response()) as mock_put:
            client.push(store)
        body = mock_put.call_args.kwargs["json"]
        assert body["links"][0]["id"] == "1"
        assert "createdAt" in body["links"][0]

    def test_push_error(self):
        client = RemoteClient("https://sync.example.com")
        with patch("linkjump.remote.requests.put", side_effect=requests.Timeout("slow")):
            with pytest.raises(SyncFailed):
                client.push({})

    def test_fetch_async(self):
        client = RemoteClient("https://sync.example.com")
        with patch("linkjump.remote.requests.get", return_value=_response([{"id": "1", "url": "a.com"}])):
            store = asyncio.run(client.fetch_async())
        assert list(store) == ["1"]


class TestClientFromConfig:
    def test_missing_remote_url(self):
        with pytest.raises(SyncFailed, match="LINKJUMP_REMOTE_URL"):
            RemoteClient.from_config()

    def test_configured(self, monkeypatch):
        import linkjump.config as config

        monkeypatch.setattr(config, "REMOTE_URL", "https://sync.example.com")
        monkeypatch.setattr(config, "REMOTE_TOKEN", "tok")
        client = get_client()
        assert client.links_url == "https://sync.example.com/links"
        assert client.token == "tok"

    def test_explicit_url(self):
        assert get_client("http://localhost:8080").base_url == "http://localhost:8080"
