"""Exam timetable generation.

Exams are placed into (date, session) slots over an inclusive date range. Each
date offers two sessions, Forenoon and Afternoon, unless it falls on the weekly
rest day when that rule is active.

Every batch sits exactly one exam per subject (common subjects plus the batch's
own selection). Unlike weekly classes, exams are not repeated per weekly hour.

Placement is greedy:
- the (batch, subject) exam units are shuffled once
- each unit takes the first slot, in date then session order, whose date the
  batch has not used yet

Slots have no capacity: several batches may sit exams in the same session. There
is no room or invigilator modelling here.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .errors import PlacementExhaustedError
from .models import Batch, ExamScheduleEntry, ExamSlot, ExamUnit, Session, Subject, parse_clock
from .random_source import resolve_rng, shuffled
from .rules import parse_rules
from .workload import effective_subject_ids

logger = logging.getLogger(__name__)

DateLike = Union[date, str]


# ----------------------------
# Settings
# ----------------------------


@dataclass(frozen=True)
class ExamSchedulingSettings:
    """Exam session configuration.

    `rest_weekday` uses Python's weekday numbering (Monday == 0, Sunday == 6);
    None means every date in the range is usable.
    """

    duration_hours: float = 3.0
    forenoon_start: str = "09:30"
    afternoon_start: str = "14:00"
    rest_weekday: Optional[int] = None

    # None => unseeded randomness
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.duration_hours < 0:
            raise ValueError("duration_hours must be >= 0")
        if self.rest_weekday is not None and not 0 <= int(self.rest_weekday) <= 6:
            raise ValueError("rest_weekday must be between 0 (Monday) and 6 (Sunday)")
        parse_clock(self.forenoon_start)
        parse_clock(self.afternoon_start)

    @classmethod
    def from_rules(cls, text: Optional[str], **overrides) -> "ExamSchedulingSettings":
        base = cls(rest_weekday=parse_rules(text).rest_weekday())
        return replace(base, **overrides)

    def with_rules(self, text: Optional[str]) -> "ExamSchedulingSettings":
        rest = parse_rules(text).rest_weekday()
        if rest is not None and self.rest_weekday is None:
            return replace(self, rest_weekday=rest)
        return self

    def start_time(self, session: Session) -> str:
        return self.forenoon_start if session is Session.FORENOON else self.afternoon_start


# ----------------------------
# Slots and clock arithmetic
# ----------------------------


def _as_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid date {value!r}; expected YYYY-MM-DD") from exc


def build_exam_slots(start_date: DateLike, end_date: DateLike, rest_weekday: Optional[int] = None) -> List[ExamSlot]:
    """Two sessions per usable date, date-ascending, Forenoon before Afternoon."""

    start = _as_date(start_date)
    end = _as_date(end_date)

    slots: List[ExamSlot] = []
    d = start
    while d <= end:
        if rest_weekday is None or d.weekday() != rest_weekday:
            slots.append(ExamSlot(date=d, session=Session.FORENOON))
            slots.append(ExamSlot(date=d, session=Session.AFTERNOON))
        d += timedelta(days=1)
    return slots


def session_end_time(start_time: str, duration_hours: float) -> str:
    """`start_time` plus `duration_hours` on a 24h clock.

    Only the clock reading is kept: a session running past midnight simply
    wraps around.
    """

    end = parse_clock(start_time) + timedelta(hours=float(duration_hours))
    return f"{end:%H:%M}"


# ----------------------------
# Exam units
# ----------------------------


def build_exam_units(
    batches: Sequence[Batch],
    subjects: Sequence[Subject],
    selected_subjects: Mapping[str, Iterable[str]],
    common_subject_ids: Iterable[str] = (),
) -> List[ExamUnit]:
    """One (batch, subject) unit per distinct exam subject of each batch.

    Raises:
        PlacementExhaustedError: a subject id has no catalog record, so its
            exam can never be placed.
    """

    by_id: Dict[str, Subject] = {s.subject_id: s for s in subjects}
    common = list(common_subject_ids or ())

    units: List[ExamUnit] = []
    for batch in batches:
        selection = list(selected_subjects.get(batch.batch_id, ()) or ())
        for sid in effective_subject_ids(selection, common):
            subj = by_id.get(sid)
            if subj is None:
                raise PlacementExhaustedError(
                    f'Could not find a valid slot for exam "{sid}" for batch "{batch.name}". '
                    "The subject is not in the catalog.",
                    subject=sid,
                    batch=batch.name,
                )
            units.append(ExamUnit(batch=batch, subject=subj))
    return units


# ----------------------------
# Solve
# ----------------------------


def generate_exam_schedule(
    start_date: DateLike,
    end_date: DateLike,
    batches: Sequence[Batch],
    subjects: Sequence[Subject],
    selected_subjects: Mapping[str, Iterable[str]],
    common_subject_ids: Iterable[str] = (),
    settings: ExamSchedulingSettings = ExamSchedulingSettings(),
    *,
    rules: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[ExamScheduleEntry]:
    """Schedule one exam per (batch, subject) with at most one exam per batch per date.

    Args:
        selected_subjects: batch_id -> subject ids chosen for that batch.
            Batches missing from the mapping only sit the common subjects.
        rules: Optional free-text rules, merged into `settings`.
        rng: Random source. Defaults to `random.Random(settings.seed)`.

    Raises:
        PlacementExhaustedError: some exam has no date left for its batch.
    """

    if rules is not None:
        settings = settings.with_rules(rules)
    rng = resolve_rng(rng, settings.seed)

    slots = build_exam_slots(start_date, end_date, settings.rest_weekday)
    units = shuffled(build_exam_units(batches, subjects, selected_subjects, common_subject_ids), rng)

    end_times = {s: session_end_time(settings.start_time(s), settings.duration_hours) for s in Session}

    schedule: List[ExamScheduleEntry] = []
    used_dates: Dict[str, Set[date]] = {}

    for unit in units:
        taken = used_dates.setdefault(unit.batch.batch_id, set())
        slot = next((s for s in slots if s.date not in taken), None)
        if slot is None:
            raise PlacementExhaustedError(
                f'Could not find a valid slot for exam "{unit.subject.name}" for batch "{unit.batch.name}". '
                "Try extending the date range or relaxing rules.",
                subject=unit.subject.name,
                batch=unit.batch.name,
            )

        schedule.append(
            ExamScheduleEntry(
                date=slot.date,
                session=slot.session,
                start_time=settings.start_time(slot.session),
                end_time=end_times[slot.session],
                subject_id=unit.subject.subject_id,
                subject_name=unit.subject.name,
                batch_id=unit.batch.batch_id,
                batch_name=unit.batch.name,
            )
        )
        taken.add(slot.date)

    logger.info(
        "Scheduled %d exams for %d batches across %d slots",
        len(schedule),
        len(batches),
        len(slots),
    )
    return schedule


# ----------------------------
# Metrics / formatting
# ----------------------------


def compute_metrics(entries: Sequence[ExamScheduleEntry]) -> Dict[str, float]:
    by_batch_day: Dict[Tuple[str, date], int] = {}
    by_slot: Dict[Tuple[date, Session], int] = {}
    for e in entries:
        by_batch_day[(e.batch_id, e.date)] = by_batch_day.get((e.batch_id, e.date), 0) + 1
        by_slot[(e.date, e.session)] = by_slot.get((e.date, e.session), 0) + 1

    return {
        "total_exams": float(len(entries)),
        "batch_day_conflicts": float(sum(c - 1 for c in by_batch_day.values() if c > 1)),
        "dates_used": float(len({e.date for e in entries})),
        "max_parallel_exams": float(max(by_slot.values()) if by_slot else 0),
    }


def format_schedule_as_rows(entries: Sequence[ExamScheduleEntry]) -> List[Dict[str, str]]:
    """Rows sorted by date, session and batch, suitable for tables/CSV."""

    order = {Session.FORENOON: 0, Session.AFTERNOON: 1}
    ordered = sorted(entries, key=lambda e: (e.date, order[e.session], e.batch_id))
    return [e.as_row() for e in ordered]


def batch_column_labels(batches: Sequence[Batch]) -> Dict[str, str]:
    """batch_id -> column header. Shared display names get the id appended."""

    name_counts: Dict[str, int] = {}
    for b in batches:
        name_counts[b.name] = name_counts.get(b.name, 0) + 1
    return {b.batch_id: (b.name if name_counts[b.name] == 1 else f"{b.name} ({b.batch_id})") for b in batches}


def format_exam_timetable(entries: Sequence[ExamScheduleEntry], batches: Sequence[Batch]) -> List[Dict[str, str]]:
    """One row per (date, session) with a column per batch.

    Columns are keyed by batch id and headed by `batch_column_labels`. Batch
    columns hold the subject name sat in that session, or '' when the batch is
    free. Entries for batches not listed in `batches` are left out.
    """

    labels = batch_column_labels(batches)
    order = {Session.FORENOON: 0, Session.AFTERNOON: 1}
    grouped: Dict[Tuple[date, Session], Dict[str, str]] = {}
    for e in entries:
        column = labels.get(e.batch_id)
        if column is None:
            continue
        key = (e.date, e.session)
        if key not in grouped:
            grouped[key] = {
                "date": e.date.isoformat(),
                "session": e.session.value,
                "time": f"{e.start_time}-{e.end_time}",
            }
            for label in labels.values():
                grouped[key][label] = ""
        grouped[key][column] = e.subject_name

    return [grouped[k] for k in sorted(grouped, key=lambda k: (k[0], order[k[1]]))]
