from __future__ import annotations

from datetime import datetime
from typing import Any

from notion_quests.models import LogEntry, QuestDefinition, TrackerRow
from notion_quests.record_store import Page
from notion_quests.time_utils import parse_iso

# Quest Master
QUEST_TITLE_PROPS = ("Quest Name", "Name")
TIMES_COMPLETED = "Times Completed"
LAST_COMPLETED = "Last Completed"
XP_VALUE = "XP Value"
SKILL = "Skill"

# Daily Tracker / Quest Log
NAME = "Name"
COMPLETED = "Completed"
QUEST_MASTER = "Quest Master"
XP_EARNED = "XP Earned"
COMPLETED_ON = "Completed On"

DEFAULT_QUEST_NAME = "Untitled"
DEFAULT_TRACKER_NAME = "Unnamed Quest"
DEFAULT_SKILL = "General"


def _props(page: Page) -> dict[str, Any]:
    props = page.get("properties")
    return props if isinstance(props, dict) else {}


def _plain_text(items: Any) -> str:
    if not isinstance(items, list) or not items:
        return ""
    first = items[0]
    if not isinstance(first, dict):
        return ""
    text = first.get("text")
    if isinstance(text, dict) and text.get("content"):
        return str(text["content"])
    return str(first.get("plain_text") or "")


def _title(props: dict[str, Any], keys: tuple[str, ...], default: str) -> str:
    for key in keys:
        prop = props.get(key)
        if isinstance(prop, dict):
            value = _plain_text(prop.get("title"))
            if value:
                return value
    return default


def _number(props: dict[str, Any], key: str) -> int:
    prop = props.get(key)
    if not isinstance(prop, dict):
        return 0
    value = prop.get("number")
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


def _date(props: dict[str, Any], key: str) -> datetime | None:
    prop = props.get(key)
    if not isinstance(prop, dict) or not isinstance(prop.get("date"), dict):
        return None
    return parse_iso(prop["date"].get("start"))


def _first_relation(props: dict[str, Any], key: str) -> str | None:
    prop = props.get(key)
    if not isinstance(prop, dict):
        return None
    relation = prop.get("relation")
    if not isinstance(relation, list) or not relation:
        return None
    first = relation[0]
    if isinstance(first, dict) and first.get("id"):
        return str(first["id"])
    return None


def _skill(props: dict[str, Any]) -> str:
    prop = props.get(SKILL)
    if not isinstance(prop, dict):
        return DEFAULT_SKILL
    select = prop.get("select")
    if isinstance(select, dict) and select.get("name"):
        return str(select["name"])
    return _plain_text(prop.get("rich_text")) or DEFAULT_SKILL


def page_to_quest(page: Page) -> QuestDefinition:
    props = _props(page)
    return QuestDefinition(
        id=str(page.get("id") or ""),
        name=_title(props, QUEST_TITLE_PROPS, DEFAULT_QUEST_NAME),
        xp_value=max(0, _number(props, XP_VALUE)),
        skill=_skill(props),
        times_completed=max(0, _number(props, TIMES_COMPLETED)),
        last_completed=_date(props, LAST_COMPLETED),
    )


def page_to_tracker_row(page: Page) -> TrackerRow:
    props = _props(page)
    checkbox = props.get(COMPLETED)
    completed = bool(checkbox.get("checkbox")) if isinstance(checkbox, dict) else False
    return TrackerRow(
        id=str(page.get("id") or ""),
        name=_title(props, (NAME,), DEFAULT_TRACKER_NAME),
        quest_id=_first_relation(props, QUEST_MASTER),
        completed=completed,
    )


def page_to_log_entry(page: Page) -> LogEntry:
    props = _props(page)
    return LogEntry(
        id=str(page.get("id") or ""),
        name=_title(props, (NAME,), DEFAULT_TRACKER_NAME),
        xp_earned=_number(props, XP_EARNED),
        skill=_skill(props),
        quest_id=_first_relation(props, QUEST_MASTER),
        completed_on=_date(props, COMPLETED_ON),
    )


def _title_value(text: str) -> dict[str, Any]:
    return {"title": [{"text": {"content": text}}]}


def tracker_row_properties(quest: QuestDefinition) -> dict[str, Any]:
    return {
        NAME: _title_value(quest.name),
        COMPLETED: {"checkbox": False},
        QUEST_MASTER: {"relation": [{"id": quest.id}]},
    }


def log_entry_properties(name: str, xp: int, skill: str, quest_id: str, now: datetime) -> dict[str, Any]:
    return {
        NAME: _title_value(name),
        XP_EARNED: {"number": xp},
        SKILL: {"rich_text": [{"text": {"content": skill}}]},
        QUEST_MASTER: {"relation": [{"id": quest_id}]},
        COMPLETED_ON: {"date": {"start": now.isoformat()}},
    }


def quest_completion_properties(times_completed: int, now: datetime) -> dict[str, Any]:
    return {
        TIMES_COMPLETED: {"number": times_completed},
        LAST_COMPLETED: {"date": {"start": now.isoformat()}},
    }
