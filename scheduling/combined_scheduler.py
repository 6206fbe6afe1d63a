"""Combined weekly timetable for several batches sharing one resource pool.

All batches are placed into one shared (day x period) grid. A cell may hold
several classes at once, one per batch, provided no faculty member and no
classroom appears twice in that cell.

Every batch is normalized (and may fail with `CapacityExceededError`) before
anything is placed. The class instances of all batches are then pooled and
shuffled together, so no batch gets systematic first pick of the resources.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence

from .class_scheduler import ClassSchedulingSettings, make_entry, repeats_previous_period
from .errors import PlacementExhaustedError
from .models import Batch, ClassInstance, Classroom, Faculty, ScheduleEntry, Subject, TimeGrid
from .random_source import resolve_rng, shuffled
from .slot_grid import SlotGrid
from .workload import expand_class_instances, normalize_workload, resolve_batch_subjects

logger = logging.getLogger(__name__)


def _available_faculty(
    faculty: Sequence[Faculty],
    subject_id: str,
    busy: set,
    rng: random.Random,
) -> List[Faculty]:
    """Free experts first, then free non-experts, each group in random order."""

    experts = [f for f in faculty if f.is_expert_in(subject_id) and f.faculty_id not in busy]
    others = [f for f in faculty if not f.is_expert_in(subject_id) and f.faculty_id not in busy]
    return shuffled(experts, rng) + shuffled(others, rng)


def _place_instance(
    grid: SlotGrid,
    inst: ClassInstance,
    faculty: Sequence[Faculty],
    classrooms: Sequence[Classroom],
    settings: ClassSchedulingSettings,
    rng: random.Random,
) -> bool:
    day_order = shuffled(range(grid.day_count), rng)
    period_order = shuffled(grid.placeable_period_indices(), rng)

    for d in day_order:
        for p in period_order:
            # One batch per slot: a batch never sits two classes in the same cell.
            if grid.batch_occupant(d, p, inst.batch_id) is not None:
                continue

            if settings.avoid_consecutive_same_subject and repeats_previous_period(
                grid, d, p, inst.subject_id, batch_id=inst.batch_id
            ):
                continue

            free_faculty = _available_faculty(faculty, inst.subject_id, grid.busy_faculty(d, p), rng)
            if not free_faculty:
                continue

            busy_rooms = grid.busy_classrooms(d, p)
            free_rooms = shuffled([c for c in classrooms if c.classroom_id not in busy_rooms], rng)
            if not free_rooms:
                continue

            grid.add_occupant(d, p, make_entry(grid, d, p, inst, free_faculty[0], free_rooms[0]))
            return True

    return False


def generate_combined_schedule(
    batches: Sequence[Batch],
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
    """Place every batch's weekly classes into one shared grid.

    Returns:
        Batch-tagged entries in placement order.

    Raises:
        CapacityExceededError: some batch needs more hours than the grid has cells.
        PlacementExhaustedError: a class instance found no cell with a free
            faculty member and a free classroom.
    """

    if rules is not None:
        settings = settings.with_rules(rules)
    rng = resolve_rng(rng, settings.seed)

    common = list(common_subject_ids or ())
    grid = SlotGrid(time_grid, multi_occupant=True)

    pool: List[ClassInstance] = []
    for batch in batches:
        batch_subjects = resolve_batch_subjects(batch, subjects, common)
        adjusted = normalize_workload(batch_subjects, grid.placeable_cell_count, batch.name)
        pool.extend(expand_class_instances(adjusted, batch))

    pool = shuffled(pool, rng)

    for inst in pool:
        if not _place_instance(grid, inst, faculty, classrooms, settings, rng):
            raise PlacementExhaustedError(
                f"Could not place subject {inst.subject_name} for batch {inst.batch_name}. "
                "There are likely not enough unique faculties or classrooms to handle all batches "
                "simultaneously. Try reducing the number of batches or adding more resources.",
                subject=inst.subject_name or "",
                batch=inst.batch_name or "",
            )

    entries = grid.entries()
    logger.info("Scheduled %d classes for %d batches in a combined grid", len(entries), len(batches))
    return entries
