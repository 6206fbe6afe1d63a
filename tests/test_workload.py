import sys
from pathlib import Path

import pytest

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scheduling.errors import CapacityExceededError, SchedulingError
from scheduling.models import Batch, Subject
from scheduling.workload import (
    effective_subject_ids,
    expand_class_instances,
    normalize_workload,
    resolve_batch_subjects,
    total_hours,
)


def _subjects():
    return [
        Subject(subject_id="A", name="Alpha", hours_per_week=1),
        Subject(subject_id="B", name="Beta", hours_per_week=3),
        Subject(subject_id="C", name="Gamma", hours_per_week=2),
    ]


def test_deficit_goes_to_lightest_subjects_first():
    adjusted = normalize_workload(_subjects(), available=10, batch_name="G1")

    # sorted A(1), C(2), B(3); 4 extra hours => A, C, B, A
    assert [s.subject_id for s in adjusted] == ["A", "C", "B"]
    assert [s.hours_per_week for s in adjusted] == [3, 3, 4]
    assert total_hours(adjusted) == 10


@pytest.mark.parametrize("available", [6, 7, 11, 40])
def test_adjusted_sum_matches_available(available):
    assert total_hours(normalize_workload(_subjects(), available, "G1")) == available


def test_canonical_subjects_are_not_mutated():
    original = _subjects()
    normalize_workload(original, available=20, batch_name="G1")
    assert [s.hours_per_week for s in original] == [1, 3, 2]


def test_exact_fit_is_left_alone():
    subjects = _subjects()
    assert normalize_workload(subjects, available=6, batch_name="G1") == subjects


def test_overflow_raises_capacity_error():
    with pytest.raises(CapacityExceededError) as excinfo:
        normalize_workload(_subjects(), available=5, batch_name="CSE Year 1")

    err = excinfo.value
    assert isinstance(err, SchedulingError)
    assert err.required == 6
    assert err.available == 5
    assert err.details == {"batch": "CSE Year 1", "required": 6, "available": 5}
    assert "CSE Year 1" in err.message and "(6)" in err.message and "(5)" in err.message


def test_no_subjects_is_returned_unchanged():
    assert normalize_workload([], available=12, batch_name="G1") == []


def test_resolve_batch_subjects_unions_and_deduplicates():
    catalog = _subjects() + [Subject(subject_id="D", name="Delta", hours_per_week=2)]
    batch = Batch(batch_id="G1", name="G1", subject_ids=("C", "A", "ZZZ"))

    resolved = resolve_batch_subjects(batch, catalog, common_subject_ids=("A", "D"))
    # catalog order, unknown ids dropped
    assert [s.subject_id for s in resolved] == ["A", "C", "D"]
    assert effective_subject_ids(batch.subject_ids, ("A", "D")) == ["A", "D", "C", "ZZZ"]


def test_expand_class_instances_one_per_hour():
    batch = Batch(batch_id="G1", name="Group 1")
    instances = expand_class_instances(_subjects(), batch)
    assert len(instances) == 6
    assert sum(1 for i in instances if i.subject_id == "B") == 3
    assert all(i.batch_id == "G1" and i.batch_name == "Group 1" for i in instances)
    assert all(i.batch_id is None for i in expand_class_instances(_subjects()))
