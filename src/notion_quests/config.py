from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_NOTION_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2025-09-03"
DEFAULT_DAILY_QUEST_COUNT = 5
DEFAULT_COOLDOWN_DAYS = 3


@dataclass(frozen=True)
class Settings:
    record_store_base_url: str
    auth_token: str
    tracker_collection_id: str
    catalog_collection_id: str
    log_collection_id: str
    daily_quest_count: int = DEFAULT_DAILY_QUEST_COUNT
    cooldown_days: int = DEFAULT_COOLDOWN_DAYS
    tz: str = "Europe/London"
    notion_version: str = DEFAULT_NOTION_VERSION
    schedule_path: Path = Path("./schedule.yaml")
    http_timeout_seconds: float = 30.0


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        raw = line.strip()
        if not raw or raw.startswith("#") or "=" not in raw:
            continue
        key, value = raw.split("=", maxsplit=1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _parse_int(value: str | None, default: int, minimum: int = 0) -> int:
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _parse_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(f"{name} is required")
    return value


def load_settings(env_path: Path = Path(".env")) -> Settings:
    _load_env_file(env_path)

    return Settings(
        record_store_base_url=os.getenv("NOTION_BASE_URL", DEFAULT_NOTION_BASE_URL).rstrip("/"),
        auth_token=_require("NOTION_API_KEY"),
        tracker_collection_id=_require("QUEST_TRACKER_DS"),
        catalog_collection_id=_require("QUEST_MASTER_DS"),
        log_collection_id=_require("QUEST_LOG_DS"),
        daily_quest_count=_parse_int(os.getenv("DAILY_QUEST_COUNT"), DEFAULT_DAILY_QUEST_COUNT),
        cooldown_days=_parse_int(os.getenv("QUEST_COOLDOWN_DAYS"), DEFAULT_COOLDOWN_DAYS),
        tz=os.getenv("TZ", "Europe/London"),
        notion_version=os.getenv("NOTION_VERSION", DEFAULT_NOTION_VERSION),
        schedule_path=Path(os.getenv("QUEST_SCHEDULE_CONFIG", "./schedule.yaml")),
        http_timeout_seconds=_parse_float(os.getenv("HTTP_TIMEOUT_SECONDS"), 30.0),
    )
