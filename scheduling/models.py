"""Resource catalog and schedule output models.

All catalog records are supplied by the caller and treated as read-only. The
only value the scheduling core ever adjusts is `Subject.hours_per_week`, and it
does so on copies (see `scheduling.workload`).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple


# ----------------------------
# Resource catalog
# ----------------------------


@dataclass(frozen=True)
class Subject:
    subject_id: str
    name: str
    hours_per_week: int


@dataclass(frozen=True)
class Faculty:
    faculty_id: str
    name: str
    # subject ids this faculty member can teach
    expertise: Tuple[str, ...] = ()

    def is_expert_in(self, subject_id: str) -> bool:
        return subject_id in self.expertise


@dataclass(frozen=True)
class Classroom:
    classroom_id: str
    name: str


@dataclass(frozen=True)
class Batch:
    batch_id: str
    name: str
    # batch-specific subjects; common subjects are layered on top per run
    subject_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Catalog:
    subjects: Tuple[Subject, ...] = ()
    faculty: Tuple[Faculty, ...] = ()
    classrooms: Tuple[Classroom, ...] = ()
    batches: Tuple[Batch, ...] = ()
    common_subject_ids: Tuple[str, ...] = ()

    def subject(self, subject_id: str) -> Optional[Subject]:
        for s in self.subjects:
            if s.subject_id == subject_id:
                return s
        return None

    def batch(self, batch_id: str) -> Optional[Batch]:
        for b in self.batches:
            if b.batch_id == batch_id:
                return b
        return None


# ----------------------------
# Time grid
# ----------------------------


@dataclass(frozen=True)
class Period:
    label: str
    is_break: bool = False

    @classmethod
    def from_label(cls, label: str) -> "Period":
        """Any label mentioning "break" (any case) is a layout spacer, not a teaching period."""

        return cls(label=str(label), is_break="break" in str(label).lower())


@dataclass(frozen=True)
class BreakSpec:
    # 1-indexed teaching period the break follows
    after_period: int
    name: str = "Break"
    minutes: int = 15


DEFAULT_DAYS: Tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

DEFAULT_BREAKS: Tuple[BreakSpec, ...] = (
    BreakSpec(after_period=2, name="Short Break", minutes=20),
    BreakSpec(after_period=4, name="Lunch Break", minutes=50),
    BreakSpec(after_period=6, name="Short Break", minutes=20),
)


def parse_clock(value: str) -> datetime:
    """Parse "HH:MM" into a datetime on an arbitrary fixed day."""

    try:
        return datetime.strptime(str(value).strip(), "%H:%M")
    except ValueError as exc:
        raise ValueError(f"Invalid clock time {value!r}; expected HH:MM") from exc


@dataclass(frozen=True)
class TimeGrid:
    days: Tuple[str, ...]
    periods: Tuple[Period, ...]

    @classmethod
    def from_labels(cls, days: Iterable[str], period_labels: Iterable[str]) -> "TimeGrid":
        return cls(days=tuple(str(d) for d in days), periods=tuple(Period.from_label(p) for p in period_labels))

    @classmethod
    def from_day_plan(
        cls,
        days: Sequence[str] = DEFAULT_DAYS,
        *,
        start_time: str = "09:00",
        periods_per_day: int = 8,
        period_minutes: int = 50,
        breaks: Sequence[BreakSpec] = DEFAULT_BREAKS,
    ) -> "TimeGrid":
        """Generate "HH:MM-HH:MM" period labels with named breaks in between.

        Breaks are inserted after the teaching period they reference and push the
        clock forward by their duration. A break pointing past the last period is
        ignored.
        """

        if periods_per_day < 0:
            raise ValueError("periods_per_day must be >= 0")
        if period_minutes <= 0:
            raise ValueError("period_minutes must be > 0")

        by_period: Dict[int, BreakSpec] = {}
        for b in sorted(breaks, key=lambda b: b.after_period):
            by_period.setdefault(int(b.after_period), b)

        current = parse_clock(start_time)
        periods: List[Period] = []
        for i in range(1, int(periods_per_day) + 1):
            end = current + timedelta(minutes=int(period_minutes))
            periods.append(Period(label=f"{current:%H:%M}-{end:%H:%M}"))
            current = end

            brk = by_period.get(i)
            if brk is not None and i < periods_per_day:
                periods.append(Period(label=brk.name, is_break=True))
                current = current + timedelta(minutes=int(brk.minutes))

        return cls(days=tuple(days), periods=tuple(periods))

    @property
    def teaching_periods(self) -> Tuple[Period, ...]:
        return tuple(p for p in self.periods if not p.is_break)

    @property
    def placeable_cell_count(self) -> int:
        return len(self.days) * len(self.teaching_periods)


# ----------------------------
# Schedule outputs
# ----------------------------


@dataclass(frozen=True)
class ScheduleEntry:
    day: str
    period: str
    subject_id: str
    subject_name: str
    faculty_id: str
    faculty_name: str
    classroom_id: str
    classroom_name: str
    # only set by the combined scheduler
    batch_id: Optional[str] = None
    batch_name: Optional[str] = None

    def as_row(self) -> Dict[str, Optional[str]]:
        return {
            "day": self.day,
            "period": self.period,
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "faculty_id": self.faculty_id,
            "faculty_name": self.faculty_name,
            "classroom_id": self.classroom_id,
            "classroom_name": self.classroom_name,
            "batch_id": self.batch_id,
            "batch_name": self.batch_name,
        }


class Session(str, Enum):
    FORENOON = "Forenoon"
    AFTERNOON = "Afternoon"


@dataclass(frozen=True)
class ExamScheduleEntry:
    date: date
    session: Session
    start_time: str
    end_time: str
    subject_id: str
    subject_name: str
    batch_id: str
    batch_name: str = ""

    def as_row(self) -> Dict[str, str]:
        return {
            "date": self.date.isoformat(),
            "session": self.session.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "batch_id": self.batch_id,
            "batch_name": self.batch_name,
        }


@dataclass(frozen=True)
class ClassInstance:
    """One teaching hour of a subject that still needs a cell."""

    subject_id: str
    subject_name: str
    batch_id: Optional[str] = None
    batch_name: Optional[str] = None


@dataclass(frozen=True)
class ExamUnit:
    batch: Batch
    subject: Subject


@dataclass(frozen=True)
class ExamSlot:
    date: date
    session: Session


__all__ = [
    "Batch",
    "BreakSpec",
    "Catalog",
    "ClassInstance",
    "Classroom",
    "DEFAULT_BREAKS",
    "DEFAULT_DAYS",
    "ExamScheduleEntry",
    "ExamSlot",
    "ExamUnit",
    "Faculty",
    "Period",
    "ScheduleEntry",
    "Session",
    "Subject",
    "TimeGrid",
    "parse_clock",
]
