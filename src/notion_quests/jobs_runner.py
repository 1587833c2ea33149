from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from notion_quests.config import Settings
from notion_quests.models import PhaseSummary
from notion_quests.notion_client import NotionRecordStore
from notion_quests.quests import (
    PHASE_RECONCILER,
    PHASE_RESET,
    PHASE_SELECTOR,
    run_reconciler,
    run_reset,
    run_selector,
)
from notion_quests.record_store import RecordStore
from notion_quests.schedule import Schedule, due_phases, load_schedule
from notion_quests.time_utils import now_local

logger = logging.getLogger(__name__)

PHASES = {
    PHASE_RESET: run_reset,
    PHASE_SELECTOR: run_selector,
    PHASE_RECONCILER: run_reconciler,
}
JOB_NAMES = (*PHASES, "tick")


async def run_phases(
    store: RecordStore,
    phases: list[str],
    settings: Settings,
    now: datetime,
) -> list[PhaseSummary]:
    summaries: list[PhaseSummary] = []
    for phase in phases:
        logger.info("running %s", phase)
        summary = await PHASES[phase](store, settings, now)
        logger.info("finished %s", summary.describe())
        summaries.append(summary)
    return summaries


async def _run_with_notion(phases: list[str], settings: Settings, now: datetime) -> list[PhaseSummary]:
    async with NotionRecordStore(settings) as store:
        return await run_phases(store, phases, settings, now)


def run_due_jobs(settings: Settings, schedule: Schedule | None = None, now: datetime | None = None) -> list[PhaseSummary]:
    now = now or now_local(settings.tz)
    schedule = schedule or load_schedule(settings.schedule_path)
    phases = due_phases(now, schedule)
    if not phases:
        logger.info("nothing due at %02d:00", now.hour)
        return []
    return asyncio.run(_run_with_notion(phases, settings, now))


def run_job(job_name: str, settings: Settings, now: datetime | None = None) -> list[PhaseSummary]:
    if job_name == "tick":
        return run_due_jobs(settings, now=now)
    if job_name not in PHASES:
        raise SystemExit(f"Unknown job '{job_name}'. Expected one of: {', '.join(JOB_NAMES)}")
    return asyncio.run(_run_with_notion([job_name], settings, now or now_local(settings.tz)))
