"""Daily quest cycle: tracker reset, quest selection and completion reconciliation.

Each phase rebuilds its worklist from the record store, processes rows one at a
time and returns a :class:`PhaseSummary`. Only the initial query of a phase is
allowed to raise; per-row store failures are recorded as ``failed`` outcomes.
"""
from __future__ import annotations

import logging
from datetime import date, datetime

from notion_quests import filters
from notion_quests.config import Settings
from notion_quests.models import (
    OUTCOME_FAILED,
    OUTCOME_OK,
    OUTCOME_SKIPPED,
    PhaseSummary,
    QuestDefinition,
    RowOutcome,
    TrackerRow,
)
from notion_quests.properties import (
    COMPLETED_ON,
    QUEST_MASTER,
    log_entry_properties,
    page_to_log_entry,
    page_to_quest,
    page_to_tracker_row,
    quest_completion_properties,
    tracker_row_properties,
)
from notion_quests.record_store import RecordStore, RecordStoreError
from notion_quests.time_utils import DEFAULT_TZ, days_since, ensure_aware, local_date, local_day_start

logger = logging.getLogger(__name__)

PHASE_RESET = "reset"
PHASE_SELECTOR = "selector"
PHASE_RECONCILER = "reconciler"


def is_eligible(quest: QuestDefinition, today: date, cooldown_days: int, tz_name: str = DEFAULT_TZ) -> bool:
    if quest.last_completed is None:
        return True
    return days_since(quest.last_completed, today, tz_name) >= cooldown_days


def choose_daily_quests(
    quests: list[QuestDefinition],
    count: int,
    cooldown_days: int,
    today: date,
    tz_name: str = DEFAULT_TZ,
) -> list[QuestDefinition]:
    eligible = [q for q in quests if is_eligible(q, today, cooldown_days, tz_name)]
    # sorted() is stable, ties keep catalog order.
    ranked = sorted(eligible, key=lambda q: q.times_completed)
    return ranked[: max(0, count)]


async def run_reset(store: RecordStore, settings: Settings, now: datetime) -> PhaseSummary:
    summary = PhaseSummary(phase=PHASE_RESET)
    pages = await store.query(settings.tracker_collection_id)
    if not pages:
        logger.info("daily quest tracker already empty")
        return summary

    for page in pages:
        row = page_to_tracker_row(page)
        try:
            await store.archive(row.id)
        except RecordStoreError as exc:
            logger.error("failed to archive tracker row %s: %s", row.id, exc)
            summary.add(RowOutcome(OUTCOME_FAILED, row.id, row.name, str(exc)))
            continue
        summary.add(RowOutcome(OUTCOME_OK, row.id, row.name))

    logger.info("daily quest tracker reset: archived=%s failed=%s", summary.succeeded, summary.failed)
    return summary


async def run_selector(store: RecordStore, settings: Settings, now: datetime) -> PhaseSummary:
    summary = PhaseSummary(phase=PHASE_SELECTOR)
    now = ensure_aware(now, settings.tz)
    logger.info("fetching quests from quest master")
    quests = [page_to_quest(p) for p in await store.query(settings.catalog_collection_id)]
    if not quests:
        logger.info("no quests found in quest master")
        return summary

    today = local_date(now, settings.tz)
    chosen = choose_daily_quests(quests, settings.daily_quest_count, settings.cooldown_days, today, settings.tz)
    if not chosen:
        logger.info("all %s quests are in cooldown, nothing scheduled", len(quests))
        return summary

    for quest in chosen:
        try:
            page = await store.create(settings.tracker_collection_id, tracker_row_properties(quest))
        except RecordStoreError as exc:
            logger.error("failed to create tracker row for %s: %s", quest.name, exc)
            summary.add(RowOutcome(OUTCOME_FAILED, quest.id, quest.name, str(exc)))
            continue
        logger.info("created daily quest row: %s", quest.name)
        summary.add(RowOutcome(OUTCOME_OK, page.get("id"), quest.name))

    logger.info("created %s daily quests (%s failed)", summary.succeeded, summary.failed)
    return summary


async def _granted_today(store: RecordStore, settings: Settings, quest_id: str, now: datetime) -> bool:
    query_filter = filters.all_of(
        filters.relation_contains(QUEST_MASTER, quest_id),
        filters.date_on_or_after(COMPLETED_ON, local_day_start(now, settings.tz)),
    )
    pages = await store.query(settings.log_collection_id, query_filter)
    return any(page_to_log_entry(p).quest_id == quest_id for p in pages)


async def _reconcile_row(store: RecordStore, settings: Settings, row: TrackerRow, now: datetime) -> RowOutcome:
    if not row.quest_id:
        logger.warning("skipping %s: no quest master relation", row.name)
        return RowOutcome(OUTCOME_SKIPPED, row.id, row.name, "missing quest master relation")

    quest = page_to_quest(await store.get(row.quest_id))
    already_granted = await _granted_today(store, settings, row.quest_id, now)
    xp = 0 if already_granted else quest.xp_value

    await store.create(
        settings.log_collection_id,
        log_entry_properties(row.name, xp, quest.skill, row.quest_id, now),
    )
    if already_granted:
        logger.info("quest %s already logged today, no xp granted", row.name)
        return RowOutcome(OUTCOME_OK, row.id, row.name, "already granted today")

    times_completed = quest.times_completed + 1
    await store.update(row.quest_id, quest_completion_properties(times_completed, now))
    logger.info("logged quest %s (%s xp), times completed = %s", row.name, xp, times_completed)
    return RowOutcome(OUTCOME_OK, row.id, row.name, "reward granted", xp_earned=xp)


async def run_reconciler(store: RecordStore, settings: Settings, now: datetime) -> PhaseSummary:
    summary = PhaseSummary(phase=PHASE_RECONCILER)
    now = ensure_aware(now, settings.tz)
    logger.info("checking completed quests")
    rows = [page_to_tracker_row(p) for p in await store.query(settings.tracker_collection_id)]
    completed = [r for r in rows if r.completed]
    if not completed:
        logger.info("no completed quests")
        return summary

    for row in completed:
        try:
            outcome = await _reconcile_row(store, settings, row, now)
        except RecordStoreError as exc:
            logger.error("failed to reconcile %s: %s", row.name, exc)
            outcome = RowOutcome(OUTCOME_FAILED, row.id, row.name, str(exc))
        summary.add(outcome)

    logger.info("quest log pass done: %s", summary.describe())
    return summary
