"""Weekly workload normalization.

A batch's weekly timetable has no free periods: every placeable (day, period)
cell is filled. When the subjects' required hours fall short of the grid, the
missing hours are handed out one at a time, cycling through the subjects from
the lightest to the heaviest, so filler load is spread rather than piled on a
single subject. When they exceed the grid the batch cannot be scheduled at all.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from .errors import CapacityExceededError
from .models import Batch, ClassInstance, Subject

logger = logging.getLogger(__name__)


def effective_subject_ids(batch_subject_ids: Iterable[str], common_subject_ids: Iterable[str]) -> List[str]:
    """Common subjects first, then batch-specific ones, without duplicates."""

    out: List[str] = []
    seen = set()
    for sid in list(common_subject_ids or ()) + list(batch_subject_ids or ()):
        if sid in seen:
            continue
        seen.add(sid)
        out.append(sid)
    return out


def resolve_batch_subjects(
    batch: Batch,
    subjects: Sequence[Subject],
    common_subject_ids: Iterable[str] = (),
) -> List[Subject]:
    """Catalog subjects relevant to `batch`, in catalog order.

    Ids that have no catalog record are ignored.
    """

    wanted = set(effective_subject_ids(batch.subject_ids, common_subject_ids))
    return [s for s in subjects if s.subject_id in wanted]


def total_hours(subjects: Iterable[Subject]) -> int:
    return sum(int(s.hours_per_week) for s in subjects)


def normalize_workload(subjects: Sequence[Subject], available: int, batch_name: str) -> List[Subject]:
    """Return copies of `subjects` whose hours add up to `available`.

    Raises:
        CapacityExceededError: if the required hours exceed `available`.
    """

    required = total_hours(subjects)
    if required > available:
        raise CapacityExceededError(batch=batch_name, required=required, available=available)

    if required == available or not subjects:
        return list(subjects)

    deficit = available - required
    working = sorted(subjects, key=lambda s: int(s.hours_per_week))
    hours = [int(s.hours_per_week) for s in working]

    i = 0
    while deficit > 0:
        hours[i % len(working)] += 1
        i += 1
        deficit -= 1

    logger.debug(
        "Filled %d free cells for %s across %d subjects (required=%d, available=%d)",
        available - required,
        batch_name,
        len(working),
        required,
        available,
    )
    return [replace(s, hours_per_week=h) for s, h in zip(working, hours)]


def expand_class_instances(subjects: Iterable[Subject], batch: Optional[Batch] = None) -> List[ClassInstance]:
    """One placement unit per weekly hour."""

    out: List[ClassInstance] = []
    for s in subjects:
        for _k in range(int(s.hours_per_week)):
            out.append(
                ClassInstance(
                    subject_id=s.subject_id,
                    subject_name=s.name,
                    batch_id=batch.batch_id if batch is not None else None,
                    batch_name=batch.name if batch is not None else None,
                )
            )
    return out
