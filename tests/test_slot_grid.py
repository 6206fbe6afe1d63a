import sys
from pathlib import Path

import pytest

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scheduling.models import BreakSpec, Period, ScheduleEntry, TimeGrid
from scheduling.slot_grid import SlotGrid


def _grid() -> TimeGrid:
    return TimeGrid.from_labels(("Mon", "Tue"), ("P1", "P2", "Lunch Break", "P3"))


def _entry(subject="S1", faculty="F1", room="R1", batch=None) -> ScheduleEntry:
    return ScheduleEntry(
        day="Mon",
        period="P1",
        subject_id=subject,
        subject_name=subject,
        faculty_id=faculty,
        faculty_name=faculty,
        classroom_id=room,
        classroom_name=room,
        batch_id=batch,
    )


def test_break_labels_are_detected():
    assert Period.from_label("LUNCH BREAK").is_break
    assert Period.from_label("Short break").is_break
    assert not Period.from_label("09:00-09:50").is_break


def test_placeable_cells_skip_breaks():
    grid = SlotGrid(_grid())
    assert grid.placeable_period_indices() == (0, 1, 3)
    assert grid.placeable_cell_count == 6
    assert list(grid.placeable_cells()) == [(0, 0), (0, 1), (0, 3), (1, 0), (1, 1), (1, 3)]
    assert _grid().placeable_cell_count == 6


def test_previous_period_respects_breaks():
    grid = SlotGrid(_grid())
    assert grid.previous_period(0) is None
    assert grid.previous_period(1) == 0
    # P3 follows the lunch break, so it has no adjacent predecessor
    assert grid.previous_period(3) is None


def test_single_occupant_cells():
    grid = SlotGrid(_grid())
    e = _entry()
    assert grid.is_free(0, 0)
    grid.occupy(0, 0, e)
    assert not grid.is_free(0, 0)
    assert grid.occupant(0, 0) == e
    assert grid.entries() == [e]

    with pytest.raises(ValueError):
        grid.occupy(0, 0, _entry(subject="S2"))
    with pytest.raises(ValueError):
        grid.occupy(1, 2, e)
    assert not grid.is_free(1, 2)


def test_multi_occupant_cells_track_faculty_and_rooms():
    grid = SlotGrid(_grid(), multi_occupant=True)
    grid.add_occupant(0, 0, _entry(faculty="F1", room="R1", batch="B1"))
    grid.add_occupant(0, 0, _entry(faculty="F2", room="R2", batch="B2"))

    assert grid.busy_faculty(0, 0) == {"F1", "F2"}
    assert grid.busy_classrooms(0, 0) == {"R1", "R2"}
    assert grid.batch_occupant(0, 0, "B2").faculty_id == "F2"
    assert grid.batch_occupant(0, 0, "B3") is None

    with pytest.raises(ValueError):
        grid.add_occupant(0, 0, _entry(faculty="F1", room="R3", batch="B3"))
    with pytest.raises(ValueError):
        grid.add_occupant(0, 0, _entry(faculty="F3", room="R2", batch="B3"))
    with pytest.raises(TypeError):
        grid.occupy(0, 1, _entry())


def test_day_plan_generates_clock_labels_and_breaks():
    tg = TimeGrid.from_day_plan()
    labels = [p.label for p in tg.periods]

    assert len(tg.periods) == 11
    assert tg.placeable_cell_count == 40
    assert labels[0] == "09:00-09:50"
    assert labels[1] == "09:50-10:40"
    assert labels[2] == "Short Break"
    assert labels[3] == "11:00-11:50"
    assert tg.periods[5].label == "Lunch Break" and tg.periods[5].is_break


def test_day_plan_ignores_break_after_last_period():
    tg = TimeGrid.from_day_plan(
        ("Mon",),
        start_time="08:00",
        periods_per_day=2,
        period_minutes=60,
        breaks=(BreakSpec(after_period=2, name="Tea Break", minutes=10),),
    )
    assert [p.label for p in tg.periods] == ["08:00-09:00", "09:00-10:00"]


def test_day_plan_rejects_bad_start_time():
    with pytest.raises(ValueError):
        TimeGrid.from_day_plan(start_time="9 o'clock")
