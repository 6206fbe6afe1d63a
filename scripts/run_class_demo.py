"""Demo runner: weekly class timetables from the sample catalog.

Generates one single-batch timetable and one combined timetable for all
batches, then prints them as Markdown tables.

Usage (PowerShell):
    python scripts\run_class_demo.py
    python scripts\run_class_demo.py --png out\timetables

"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scheduling import (
    ClassSchedulingSettings,
    SchedulingError,
    TimeGrid,
    generate_combined_schedule,
    generate_single_group_schedule,
    load_catalog_from_json,
)
from scheduling.class_scheduler import compute_metrics
from reports import TimetableImageOptions, batch_timetable_df, df_to_markdown, timetable_png_bytes


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate demo class timetables from the sample catalog.")
    parser.add_argument("--png", metavar="DIR", help="also write one PNG timetable per batch into DIR")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    catalog = load_catalog_from_json(str(ROOT / "data" / "sample_catalog.json"))
    grid = TimeGrid.from_day_plan()
    settings = ClassSchedulingSettings.from_rules("Avoid consecutive classes of the same subject", seed=11)

    try:
        batch = catalog.batches[0]
        single = generate_single_group_schedule(
            batch,
            catalog.subjects,
            catalog.faculty,
            catalog.classrooms,
            catalog.common_subject_ids,
            grid,
            settings,
        )
        combined = generate_combined_schedule(
            catalog.batches,
            catalog.subjects,
            catalog.faculty,
            catalog.classrooms,
            catalog.common_subject_ids,
            grid,
            settings,
        )
    except SchedulingError as exc:
        print(f"Scheduling failed: {exc.message}")
        raise SystemExit(1)

    print(f"\n=== {batch.name} (single batch) ===")
    print(df_to_markdown(batch_timetable_df(entries=single, time_grid=grid)))

    for b in catalog.batches:
        print(f"=== {b.name} (combined) ===")
        print(df_to_markdown(batch_timetable_df(entries=combined, time_grid=grid, batch_id=b.batch_id)))

    if args.png:
        out_dir = Path(args.png)
        out_dir.mkdir(parents=True, exist_ok=True)
        for b in catalog.batches:
            df = batch_timetable_df(entries=combined, time_grid=grid, batch_id=b.batch_id)
            png = timetable_png_bytes(df, time_grid=grid, options=TimetableImageOptions(title=b.name))
            (out_dir / f"{b.batch_id}.png").write_bytes(png)
        print(f"PNG timetables written to {out_dir}\n")

    print("=== Combined metrics ===")
    for k, v in compute_metrics(combined, catalog.faculty).items():
        print(f"{k}: {v}")


if __name__ == "__main__":
    main()
