from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from notion_quests.quests import PHASE_RECONCILER, PHASE_RESET, PHASE_SELECTOR


@dataclass(frozen=True)
class Schedule:
    reset_hour: int = 0
    selector_hour: int = 9
    reconciler_start_hour: int = 10
    reconciler_end_hour: int = 23


def _hour(raw: dict[str, Any], key: str, default: int) -> int:
    try:
        value = int(raw.get(key, default))
    except (TypeError, ValueError):
        return default
    return value if 0 <= value <= 23 else default


def load_schedule(path: Path) -> Schedule:
    if not path.exists():
        return Schedule()

    raw = yaml.safe_load(path.read_text()) or {}
    if not isinstance(raw, dict):
        return Schedule()
    defaults = Schedule()
    return Schedule(
        reset_hour=_hour(raw, "reset_hour", defaults.reset_hour),
        selector_hour=_hour(raw, "selector_hour", defaults.selector_hour),
        reconciler_start_hour=_hour(raw, "reconciler_start_hour", defaults.reconciler_start_hour),
        reconciler_end_hour=_hour(raw, "reconciler_end_hour", defaults.reconciler_end_hour),
    )


def due_phases(now: datetime, schedule: Schedule) -> list[str]:
    """Phases to run for the hourly tick at ``now``, in execution order."""
    hour = now.hour
    phases: list[str] = []
    if hour == schedule.reset_hour:
        phases.append(PHASE_RESET)
    if hour == schedule.selector_hour:
        phases.append(PHASE_SELECTOR)
    if schedule.reconciler_start_hour <= hour <= schedule.reconciler_end_hour:
        phases.append(PHASE_RECONCILER)
    return phases
