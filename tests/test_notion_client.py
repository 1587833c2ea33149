from __future__ import annotations

import asyncio
import json as json_lib
from typing import Any

import httpx
import pytest

import notion_quests.notion_client as nc
from notion_quests.config import Settings
from notion_quests.notion_client import NotionRecordStore
from notion_quests.record_store import RecordStoreError


class _Resp:
    def __init__(self, status_code: int, data: dict[str, Any], headers: dict[str, str] | None = None) -> None:
        self.status_code = status_code
        self._data = data
        self.text = str(data)
        self.headers = headers or {}

    def json(self) -> dict[str, Any]:
        return self._data


class _Client:
    def __init__(self, responses: list[_Resp]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, str, dict[str, str], Any]] = []
        self.closed = False

    async def request(self, method: str, url: str, headers: dict[str, str], json: Any = None) -> _Resp:
        self.calls.append((method, url, headers, json))
        if not self.responses:
            raise AssertionError("unexpected request")
        return self.responses.pop(0)

    async def aclose(self) -> None:
        self.closed = True


def _settings() -> Settings:
    return Settings(
        record_store_base_url="https://api.notion.com/v1/",
        auth_token="secret",
        tracker_collection_id="tracker",
        catalog_collection_id="master",
        log_collection_id="log",
    )


def test_query_follows_pagination_cursor() -> None:
    client = _Client(
        [
            _Resp(200, {"results": [{"id": "a"}], "has_more": True, "next_cursor": "cur-1"}),
            _Resp(200, {"results": [{"id": "b"}], "has_more": False, "next_cursor": None}),
        ]
    )
    store = NotionRecordStore(_settings(), client=client)
    pages = asyncio.run(store.query("master", {"property": "Completed", "checkbox": {"equals": True}}))

    assert [p["id"] for p in pages] == ["a", "b"]
    method, url, headers, body = client.calls[0]
    assert (method, url) == ("POST", "https://api.notion.com/v1/data_sources/master/query")
    assert headers["Authorization"] == "Bearer secret"
    assert headers["Notion-Version"] == "2025-09-03"
    assert body["filter"]["checkbox"] == {"equals": True}
    assert "start_cursor" not in body
    assert client.calls[1][3]["start_cursor"] == "cur-1"


def test_create_update_archive_payloads() -> None:
    client = _Client([_Resp(200, {"id": "new"}), _Resp(200, {"id": "p1"}), _Resp(200, {"id": "p1"})])
    store = NotionRecordStore(_settings(), client=client)

    async def _run() -> None:
        created = await store.create("tracker", {"Completed": {"checkbox": False}})
        assert created["id"] == "new"
        await store.update("p1", {"Times Completed": {"number": 2}})
        await store.archive("p1")

    asyncio.run(_run())
    create_call, update_call, archive_call = client.calls
    assert create_call[1].endswith("/v1/pages")
    assert create_call[3]["parent"] == {"type": "data_source_id", "data_source_id": "tracker"}
    assert update_call[:2] == ("PATCH", "https://api.notion.com/v1/pages/p1")
    assert update_call[3] == {"properties": {"Times Completed": {"number": 2}}}
    assert archive_call[3] == {"archived": True}


def test_error_status_raises_record_store_error() -> None:
    client = _Client([_Resp(404, {"code": "object_not_found"})])
    store = NotionRecordStore(_settings(), client=client)
    with pytest.raises(RecordStoreError) as info:
        asyncio.run(store.get("missing"))
    assert info.value.status_code == 404
    assert info.value.operation == "get"
    assert client.calls[0][3] is None


def test_rate_limit_is_retried_once(monkeypatch) -> None:
    waits: list[float] = []

    async def _sleep(seconds: float) -> None:
        waits.append(seconds)

    monkeypatch.setattr(nc.asyncio, "sleep", _sleep)
    client = _Client([_Resp(429, {}, {"Retry-After": "30"}), _Resp(200, {"id": "p1"})])
    store = NotionRecordStore(_settings(), client=client)

    page = asyncio.run(store.get("p1"))
    assert page["id"] == "p1"
    assert waits == [5]
    assert len(client.calls) == 2


def test_transport_error_is_wrapped() -> None:
    class _Broken(_Client):
        async def request(self, method: str, url: str, headers: dict[str, str], json: Any = None) -> _Resp:
            raise httpx.ConnectError("connection refused")

    store = NotionRecordStore(_settings(), client=_Broken([]))
    with pytest.raises(RecordStoreError) as info:
        asyncio.run(store.archive("p1"))
    assert info.value.status_code is None
    assert "connection refused" in str(info.value)


def test_context_manager_owns_its_client(monkeypatch) -> None:
    created: list[_Client] = []

    def _factory(*args, **kwargs) -> _Client:
        client = _Client([_Resp(200, {"results": [], "has_more": False})])
        created.append(client)
        return client

    monkeypatch.setattr(nc.httpx, "AsyncClient", _factory)

    async def _run() -> list[dict[str, Any]]:
        async with NotionRecordStore(_settings()) as store:
            return await store.query("log")

    assert asyncio.run(_run()) == []
    assert created[0].closed is True


def test_non_json_success_body_raises_record_store_error() -> None:
    class _HtmlResp(_Resp):
        def json(self) -> dict[str, Any]:
            raise json_lib.JSONDecodeError("Expecting value", "<html>gateway</html>", 0)

    client = _Client([_HtmlResp(200, {})])
    store = NotionRecordStore(_settings(), client=client)
    with pytest.raises(RecordStoreError) as info:
        asyncio.run(store.get("p1"))
    assert info.value.status_code == 200
    assert info.value.operation == "get"
    assert "invalid JSON body" in str(info.value)
