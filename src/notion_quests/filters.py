"""Builders for the filter payloads accepted by the data source query endpoint."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any


def relation_contains(prop: str, page_id: str) -> dict[str, Any]:
    return {"property": prop, "relation": {"contains": page_id}}


def date_on_or_after(prop: str, value: date | datetime) -> dict[str, Any]:
    return {"property": prop, "date": {"on_or_after": value.isoformat()}}


def all_of(*conditions: dict[str, Any]) -> dict[str, Any]:
    return {"and": list(conditions)}
