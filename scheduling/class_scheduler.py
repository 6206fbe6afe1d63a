"""Weekly class timetable generation for a single batch.

The batch gets a private (day x period) grid and every placeable cell is
filled: the subjects' weekly hours are first normalized to the grid size (see
`scheduling.workload`), then each teaching hour becomes one class instance.

Placement is a randomized greedy pass:
- class instances are shuffled once
- for each instance, periods are tried in a fresh random order and, inside each
  period, days in a fresh random order; the first free cell that satisfies the
  rules wins
- the faculty member is a random expert for the subject, or any random faculty
  member when nobody lists the subject; the classroom is any random room

There is no backtracking. If an instance finds no cell the whole call fails with
`PlacementExhaustedError`.

This module also holds the settings shared with the combined scheduler plus the
metrics and table formatters used by consumers of class schedules.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import PlacementExhaustedError
from .models import Batch, ClassInstance, Classroom, Faculty, ScheduleEntry, Subject, TimeGrid
from .random_source import resolve_rng, shuffled
from .rules import parse_rules
from .slot_grid import SlotGrid
from .workload import expand_class_instances, normalize_workload, resolve_batch_subjects

logger = logging.getLogger(__name__)


# ----------------------------
# Settings
# ----------------------------


@dataclass(frozen=True)
class ClassSchedulingSettings:
    # Skip a cell when the period right before it (same day, no break in
    # between) already holds the same subject for the same batch.
    avoid_consecutive_same_subject: bool = False

    # None => unseeded randomness
    seed: Optional[int] = None

    @classmethod
    def from_rules(cls, text: Optional[str], **overrides) -> "ClassSchedulingSettings":
        rules = parse_rules(text)
        base = cls(avoid_consecutive_same_subject=rules.avoid_repeating_subject_in_adjacent_periods())
        return replace(base, **overrides)

    def with_rules(self, text: Optional[str]) -> "ClassSchedulingSettings":
        """Switch on whatever the rule text asks for; never switches anything off."""

        rules = parse_rules(text)
        if rules.avoid_repeating_subject_in_adjacent_periods() and not self.avoid_consecutive_same_subject:
            return replace(self, avoid_consecutive_same_subject=True)
        return self


# ----------------------------
# Helpers (repeats_previous_period and make_entry are also used by the
# combined scheduler)
# ----------------------------


def _pick_faculty(faculty: Sequence[Faculty], subject_id: str, rng: random.Random) -> Optional[Faculty]:
    experts = [f for f in faculty if f.is_expert_in(subject_id)]
    if experts:
        return rng.choice(experts)
    if faculty:
        return rng.choice(list(faculty))
    return None


def repeats_previous_period(
    grid: SlotGrid,
    day_idx: int,
    period_idx: int,
    subject_id: str,
    batch_id: Optional[str] = None,
) -> bool:
    """True when the period just before (same day, no break between) already
    holds `subject_id`. On multi-occupant grids only `batch_id`'s class counts.
    """

    prev = grid.previous_period(period_idx)
    if prev is None:
        return False
    if grid.multi_occupant:
        before = grid.batch_occupant(day_idx, prev, batch_id)
    else:
        before = grid.occupant(day_idx, prev)
    return before is not None and before.subject_id == subject_id


def make_entry(
    grid: SlotGrid,
    day_idx: int,
    period_idx: int,
    inst: ClassInstance,
    fac: Faculty,
    room: Classroom,
) -> ScheduleEntry:
    return ScheduleEntry(
        day=grid.day_labels[day_idx],
        period=grid.period_labels[period_idx],
        subject_id=inst.subject_id,
        subject_name=inst.subject_name,
        faculty_id=fac.faculty_id,
        faculty_name=fac.name,
        classroom_id=room.classroom_id,
        classroom_name=room.name,
        batch_id=inst.batch_id,
        batch_name=inst.batch_name,
    )


# ----------------------------
# Placement
# ----------------------------


def _place_instance(
    grid: SlotGrid,
    inst: ClassInstance,
    faculty: Sequence[Faculty],
    classrooms: Sequence[Classroom],
    settings: ClassSchedulingSettings,
    rng: random.Random,
) -> bool:
    period_order = shuffled(grid.placeable_period_indices(), rng)
    day_order = shuffled(range(grid.day_count), rng)

    for p in period_order:
        for d in day_order:
            if not grid.is_free(d, p):
                continue

            if settings.avoid_consecutive_same_subject and repeats_previous_period(grid, d, p, inst.subject_id):
                continue

            fac = _pick_faculty(faculty, inst.subject_id, rng)
            room = rng.choice(list(classrooms)) if classrooms else None
            if fac is None or room is None:
                continue

            grid.occupy(d, p, make_entry(grid, d, p, inst, fac, room))
            return True

    return False


def generate_single_group_schedule(
    batch: Batch,
    subjects: Sequence[Subject],
    faculty: Sequence[Faculty],
    classrooms: Sequence[Classroom],
    common_subject_ids: Iterable[str],
    time_grid: TimeGrid,
    settings: ClassSchedulingSettings = ClassSchedulingSettings(),
    *,
    rules: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[ScheduleEntry]:
    """Fill one batch's weekly grid.

    Args:
        rules: Optional free-text rules, merged into `settings`.
        rng: Random source. Defaults to `random.Random(settings.seed)`.

    Returns:
        Entries in placement order. `batch_id`/`batch_name` are left unset: the
        caller already knows which batch the timetable belongs to.

    Raises:
        CapacityExceededError: required hours exceed the placeable cells.
        PlacementExhaustedError: a class instance found no admissible cell.
    """

    if rules is not None:
        settings = settings.with_rules(rules)
    rng = resolve_rng(rng, settings.seed)

    grid = SlotGrid(time_grid)
    batch_subjects = resolve_batch_subjects(batch, subjects, common_subject_ids)
    adjusted = normalize_workload(batch_subjects, grid.placeable_cell_count, batch.name)

    instances = shuffled(expand_class_instances(adjusted), rng)

    for inst in instances:
        if not _place_instance(grid, inst, faculty, classrooms, settings, rng):
            raise PlacementExhaustedError(
                f"Could not place subject {inst.subject_name} for batch {batch.name}. "
                "This usually happens if required hours exceed available slots.",
                subject=inst.subject_name,
                batch=batch.name,
            )

    entries = grid.entries()
    logger.info(
        "Scheduled %d classes for %s over %d days x %d periods",
        len(entries),
        batch.name,
        grid.day_count,
        len(grid.placeable_period_indices()),
    )
    return entries


# ----------------------------
# Metrics
# ----------------------------


def compute_metrics(entries: Sequence[ScheduleEntry], faculty: Sequence[Faculty] = ()) -> Dict[str, float]:
    """Conflict counts and faculty load for a generated class schedule.

    Conflicts count surplus entries per key, so a clean schedule reports 0.0.
    `batch_conflicts` groups by (day, period, batch); in single-group output the
    batch is None for every entry, which makes it a plain per-cell check.
    """

    batch_occ: Dict[Tuple[str, str, Optional[str]], int] = {}
    faculty_occ: Dict[Tuple[str, str, str], int] = {}
    room_occ: Dict[Tuple[str, str, str], int] = {}
    faculty_load: Dict[str, int] = {f.faculty_id: 0 for f in faculty}

    expertise = {f.faculty_id: set(f.expertise) for f in faculty}
    expert_assignments = 0

    for e in entries:
        k_batch = (e.day, e.period, e.batch_id)
        k_fac = (e.day, e.period, e.faculty_id)
        k_room = (e.day, e.period, e.classroom_id)
        batch_occ[k_batch] = batch_occ.get(k_batch, 0) + 1
        faculty_occ[k_fac] = faculty_occ.get(k_fac, 0) + 1
        room_occ[k_room] = room_occ.get(k_room, 0) + 1
        faculty_load[e.faculty_id] = faculty_load.get(e.faculty_id, 0) + 1
        if e.subject_id in expertise.get(e.faculty_id, set()):
            expert_assignments += 1

    def _surplus(counts: Dict) -> int:
        return sum(c - 1 for c in counts.values() if c > 1)

    loads = list(faculty_load.values()) or [0]
    return {
        "total_entries": float(len(entries)),
        "batch_conflicts": float(_surplus(batch_occ)),
        "faculty_conflicts": float(_surplus(faculty_occ)),
        "classroom_conflicts": float(_surplus(room_occ)),
        "expert_assignments": float(expert_assignments),
        "faculty_load_min": float(min(loads)),
        "faculty_load_max": float(max(loads)),
        "faculty_load_avg": float(sum(loads) / len(loads)),
    }


# ----------------------------
# Formatting helpers
# ----------------------------


def _empty_table(time_grid: TimeGrid) -> Tuple[List[List[str]], Dict[str, int], Dict[str, int]]:
    teaching = [p.label for p in time_grid.teaching_periods]
    table = [["" for _ in teaching] for _ in time_grid.days]
    day_col = {d: i for i, d in enumerate(time_grid.days)}
    period_col = {label: i for i, label in enumerate(teaching)}
    return table, day_col, period_col


def _fill(table: List[List[str]], row: int, col: int, label: str) -> None:
    table[row][col] = label if not table[row][col] else f"{table[row][col]} / {label}"


def format_batch_timetable(
    entries: Sequence[ScheduleEntry],
    time_grid: TimeGrid,
    batch_id: Optional[str] = None,
) -> List[List[str]]:
    """Return a table (rows=days, cols=teaching periods) with 'SUBJECT (FAC)' or ''.

    With `batch_id=None` every entry is shown, which is what single-group output
    needs. Combined output should pass the batch to render.
    """

    table, day_col, period_col = _empty_table(time_grid)
    for e in entries:
        if batch_id is not None and e.batch_id != batch_id:
            continue
        row = day_col.get(e.day)
        col = period_col.get(e.period)
        if row is None or col is None:
            continue
        _fill(table, row, col, f"{e.subject_id} ({e.faculty_id})")
    return table


def format_faculty_timetable(
    entries: Sequence[ScheduleEntry],
    time_grid: TimeGrid,
    faculty_id: str,
) -> List[List[str]]:
    table, day_col, period_col = _empty_table(time_grid)
    for e in entries:
        if e.faculty_id != faculty_id:
            continue
        row = day_col.get(e.day)
        col = period_col.get(e.period)
        if row is None or col is None:
            continue
        where = e.batch_id if e.batch_id is not None else e.classroom_id
        _fill(table, row, col, f"{e.subject_id} ({where})")
    return table
