from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

OUTCOME_OK = "ok"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


@dataclass(frozen=True)
class QuestDefinition:
    id: str
    name: str
    xp_value: int
    skill: str
    times_completed: int
    last_completed: datetime | None


@dataclass(frozen=True)
class TrackerRow:
    id: str
    name: str
    quest_id: str | None
    completed: bool


@dataclass(frozen=True)
class LogEntry:
    id: str
    name: str
    xp_earned: int
    skill: str
    quest_id: str | None
    completed_on: datetime | None


@dataclass(frozen=True)
class RowOutcome:
    status: str
    record_id: str | None
    name: str
    message: str = ""
    xp_earned: int = 0


@dataclass
class PhaseSummary:
    phase: str
    outcomes: list[RowOutcome] = field(default_factory=list)

    def add(self, outcome: RowOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(OUTCOME_OK)

    @property
    def skipped(self) -> int:
        return self._count(OUTCOME_SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OUTCOME_FAILED)

    @property
    def xp_awarded(self) -> int:
        return sum(o.xp_earned for o in self.outcomes if o.status == OUTCOME_OK)

    def describe(self) -> str:
        return (
            f"{self.phase}: ok={self.succeeded} skipped={self.skipped} "
            f"failed={self.failed} xp={self.xp_awarded}"
        )
