"""Demo runner: generate an exam timetable from the sample catalog.

This is meant for quick validation and for demos.

Usage (PowerShell):
    python scripts\run_exam_demo.py

"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
import sys

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scheduling import ExamSchedulingSettings, SchedulingError, generate_exam_schedule, load_catalog_from_json
from scheduling.exam_scheduler import compute_metrics
from reports import df_to_markdown, exam_timetable_df


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    catalog = load_catalog_from_json(str(ROOT / "data" / "sample_catalog.json"))

    # Every batch sits its own subjects plus the common ones.
    selected = {b.batch_id: list(b.subject_ids) for b in catalog.batches}

    settings = ExamSchedulingSettings.from_rules(
        "Sunday is a holiday",
        duration_hours=3,
        forenoon_start="09:30",
        afternoon_start="14:00",
        seed=7,
    )

    try:
        entries = generate_exam_schedule(
            date(2026, 11, 2),
            date(2026, 11, 14),
            catalog.batches,
            catalog.subjects,
            selected,
            catalog.common_subject_ids,
            settings,
        )
    except SchedulingError as exc:
        print(f"Scheduling failed: {exc.message}")
        raise SystemExit(1)

    df = exam_timetable_df(entries, catalog.batches)

    print("\n=== Exam Timetable ===")
    print(df_to_markdown(df))

    print("=== Metrics ===")
    for k, v in compute_metrics(entries).items():
        print(f"{k}: {v}")


if __name__ == "__main__":
    main()
