"""Occupancy grid over (day, period) cells.

Each day and each period (breaks included) gets a stable integer index once;
occupancy lives in a flat `days x periods` list indexed by those integers, so
the placement loops never hash labels.

Break periods are kept in the index space so that period adjacency can be
answered against the real sequence, but they are never placeable.

Two occupancy modes are supported on the same structure:
- single-occupant (one batch's private grid): a cell holds one entry or None
- multi-occupant (combined grid): a cell holds a list of entries, one per batch
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set, Tuple

from .models import ScheduleEntry, TimeGrid


class SlotGrid:
    def __init__(self, time_grid: TimeGrid, *, multi_occupant: bool = False):
        self.time_grid = time_grid
        self.multi_occupant = multi_occupant

        self.day_labels: Tuple[str, ...] = tuple(time_grid.days)
        self.period_labels: Tuple[str, ...] = tuple(p.label for p in time_grid.periods)
        self._is_break: Tuple[bool, ...] = tuple(bool(p.is_break) for p in time_grid.periods)

        self.day_index: Dict[str, int] = {d: i for i, d in enumerate(self.day_labels)}
        self.period_index: Dict[str, int] = {}
        for i, label in enumerate(self.period_labels):
            # duplicate labels: first occurrence wins for lookups
            self.period_index.setdefault(label, i)

        self._placeable_periods: Tuple[int, ...] = tuple(i for i, b in enumerate(self._is_break) if not b)

        n_days = len(self.day_labels)
        n_periods = len(self.period_labels)
        if multi_occupant:
            self._cells: List[List[object]] = [[[] for _ in range(n_periods)] for _ in range(n_days)]
        else:
            self._cells = [[None for _ in range(n_periods)] for _ in range(n_days)]

        self._entries: List[ScheduleEntry] = []

    # ----------------------------
    # Shape
    # ----------------------------

    @property
    def day_count(self) -> int:
        return len(self.day_labels)

    def placeable_period_indices(self) -> Tuple[int, ...]:
        return self._placeable_periods

    def is_break(self, period_idx: int) -> bool:
        return self._is_break[period_idx]

    def placeable_cells(self) -> Iterator[Tuple[int, int]]:
        """(day_idx, period_idx) for every non-break cell, day-major."""

        for d in range(self.day_count):
            for p in self._placeable_periods:
                yield (d, p)

    @property
    def placeable_cell_count(self) -> int:
        return self.day_count * len(self._placeable_periods)

    def previous_period(self, period_idx: int) -> Optional[int]:
        """Index of the period right before `period_idx`, or None.

        None when `period_idx` is the first period of the day or directly follows
        a break: a break separates the two periods, so they are not adjacent.
        """

        prev = period_idx - 1
        if prev < 0 or self._is_break[prev]:
            return None
        return prev

    # ----------------------------
    # Single-occupant mode
    # ----------------------------

    def occupant(self, day_idx: int, period_idx: int) -> Optional[ScheduleEntry]:
        if self.multi_occupant:
            raise TypeError("occupant() is only available on single-occupant grids")
        return self._cells[day_idx][period_idx]  # type: ignore[return-value]

    def is_free(self, day_idx: int, period_idx: int) -> bool:
        if self._is_break[period_idx]:
            return False
        if self.multi_occupant:
            return not self._cells[day_idx][period_idx]
        return self._cells[day_idx][period_idx] is None

    def occupy(self, day_idx: int, period_idx: int, entry: ScheduleEntry) -> None:
        if self.multi_occupant:
            raise TypeError("occupy() is only available on single-occupant grids")
        if self._is_break[period_idx]:
            raise ValueError(f"Period {self.period_labels[period_idx]!r} is a break")
        if self._cells[day_idx][period_idx] is not None:
            raise ValueError(
                f"Cell ({self.day_labels[day_idx]}, {self.period_labels[period_idx]}) is already occupied"
            )
        self._cells[day_idx][period_idx] = entry
        self._entries.append(entry)

    # ----------------------------
    # Multi-occupant mode
    # ----------------------------

    def occupants(self, day_idx: int, period_idx: int) -> List[ScheduleEntry]:
        if not self.multi_occupant:
            e = self._cells[day_idx][period_idx]
            return [e] if e is not None else []  # type: ignore[list-item]
        return list(self._cells[day_idx][period_idx])  # type: ignore[arg-type]

    def add_occupant(self, day_idx: int, period_idx: int, entry: ScheduleEntry) -> None:
        if not self.multi_occupant:
            raise TypeError("add_occupant() is only available on multi-occupant grids")
        if self._is_break[period_idx]:
            raise ValueError(f"Period {self.period_labels[period_idx]!r} is a break")
        cell = self._cells[day_idx][period_idx]
        for other in cell:  # type: ignore[union-attr]
            if other.faculty_id == entry.faculty_id:
                raise ValueError(f"Faculty {entry.faculty_id} already teaches in this cell")
            if other.classroom_id == entry.classroom_id:
                raise ValueError(f"Classroom {entry.classroom_id} is already used in this cell")
        cell.append(entry)  # type: ignore[union-attr]
        self._entries.append(entry)

    def busy_faculty(self, day_idx: int, period_idx: int) -> Set[str]:
        return {e.faculty_id for e in self.occupants(day_idx, period_idx)}

    def busy_classrooms(self, day_idx: int, period_idx: int) -> Set[str]:
        return {e.classroom_id for e in self.occupants(day_idx, period_idx)}

    def batch_occupant(self, day_idx: int, period_idx: int, batch_id: Optional[str]) -> Optional[ScheduleEntry]:
        for e in self.occupants(day_idx, period_idx):
            if e.batch_id == batch_id:
                return e
        return None

    # ----------------------------
    # Output
    # ----------------------------

    def entries(self) -> List[ScheduleEntry]:
        """Placed entries in placement order."""

        return list(self._entries)
