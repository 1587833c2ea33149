from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from notion_quests.config import Settings
from notion_quests.record_store import Page, RecordStoreError

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
MAX_RETRY_AFTER_SECONDS = 5


def notion_headers(api_key: str, notion_version: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Notion-Version": notion_version,
        "Content-Type": "application/json",
    }


def _retry_after_seconds(resp: httpx.Response) -> int:
    retry_after = resp.headers.get("Retry-After")
    try:
        wait_seconds = max(1, int(retry_after)) if retry_after else 2
    except ValueError:
        wait_seconds = 2
    return min(wait_seconds, MAX_RETRY_AFTER_SECONDS)


class NotionRecordStore:
    """Record store backed by Notion data sources and pages.

    Use as an async context manager so the underlying ``httpx.AsyncClient``
    is closed when the phase finishes.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.base_url = settings.record_store_base_url.rstrip("/")
        self.headers = notion_headers(settings.auth_token, settings.notion_version)
        self.timeout = settings.http_timeout_seconds
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> NotionRecordStore:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.aclose()
        return False

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, url: str, payload: dict[str, Any] | None) -> httpx.Response:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        if payload is None:
            return await self._client.request(method, url, headers=self.headers)
        return await self._client.request(method, url, headers=self.headers, json=payload)

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = await self._send(method, url, payload)
            if resp.status_code == 429:
                wait_seconds = _retry_after_seconds(resp)
                logger.warning("notion rate limited op=%s, retrying in %ss", operation, wait_seconds)
                await asyncio.sleep(wait_seconds)
                resp = await self._send(method, url, payload)
        except httpx.HTTPError as exc:
            raise RecordStoreError(operation, None, str(exc)) from exc

        if resp.status_code >= 400:
            text = resp.text[:400].replace("\n", " ")
            raise RecordStoreError(operation, resp.status_code, text)
        try:
            data = resp.json()
        except ValueError as exc:
            raise RecordStoreError(operation, resp.status_code, "invalid JSON body") from exc
        return data if isinstance(data, dict) else {}

    async def query(self, data_source_id: str, filter: dict[str, Any] | None = None) -> list[Page]:
        results: list[Page] = []
        cursor: str | None = None
        while True:
            body: dict[str, Any] = {"page_size": PAGE_SIZE}
            if filter:
                body["filter"] = filter
            if cursor:
                body["start_cursor"] = cursor
            data = await self._request("query", "POST", f"/data_sources/{data_source_id}/query", body)
            results.extend(r for r in data.get("results") or [] if isinstance(r, dict))
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return results

    async def create(self, data_source_id: str, properties: dict[str, Any]) -> Page:
        payload = {
            "parent": {"type": "data_source_id", "data_source_id": data_source_id},
            "properties": properties,
        }
        return await self._request("create", "POST", "/pages", payload)

    async def update(self, page_id: str, properties: dict[str, Any]) -> Page:
        return await self._request("update", "PATCH", f"/pages/{page_id}", {"properties": properties})

    async def archive(self, page_id: str) -> Page:
        return await self._request("archive", "PATCH", f"/pages/{page_id}", {"archived": True})

    async def get(self, page_id: str) -> Page:
        return await self._request("get", "GET", f"/pages/{page_id}")
