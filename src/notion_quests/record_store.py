from __future__ import annotations

from typing import Any, Protocol

Page = dict[str, Any]


class RecordStoreError(Exception):
    """A record store call failed: non-success response or unreachable service."""

    def __init__(self, operation: str, status_code: int | None, message: str = "") -> None:
        self.operation = operation
        self.status_code = status_code
        self.message = message
        status = status_code if status_code is not None else "n/a"
        text = f"{operation} failed (status {status})"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class RecordStore(Protocol):
    async def query(self, data_source_id: str, filter: dict[str, Any] | None = None) -> list[Page]:
        ...

    async def create(self, data_source_id: str, properties: dict[str, Any]) -> Page:
        ...

    async def update(self, page_id: str, properties: dict[str, Any]) -> Page:
        ...

    async def archive(self, page_id: str) -> Page:
        ...

    async def get(self, page_id: str) -> Page:
        ...
