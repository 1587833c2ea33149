from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from notion_quests.config import load_settings
from notion_quests.jobs_runner import JOB_NAMES, run_job
from notion_quests.logging_setup import setup_logging


def main() -> None:
    if len(sys.argv) != 2:
        raise SystemExit(f"Usage: python jobs.py <{'|'.join(JOB_NAMES)}>")

    setup_logging()
    settings = load_settings()
    summaries = run_job(sys.argv[1], settings)
    if any(s.failed for s in summaries):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
