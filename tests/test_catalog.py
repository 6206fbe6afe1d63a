import sys
from collections import Counter
from pathlib import Path

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scheduling import ClassSchedulingSettings, TimeGrid, catalog_from_dict, generate_combined_schedule
from scheduling.catalog import load_catalog_from_json

SAMPLE = ROOT / "data" / "sample_catalog.json"


def test_sample_catalog_loads():
    catalog = load_catalog_from_json(str(SAMPLE))

    assert len(catalog.subjects) == 29
    assert len(catalog.faculty) == 25
    assert len(catalog.classrooms) == 10
    assert len(catalog.batches) == 5
    assert catalog.common_subject_ids == ("MA101", "PH101", "CH101", "HU101", "CS102", "ME102")

    assert catalog.subject("CS101").name == "Intro to Programming"
    assert catalog.batch("B_CSE_Y1").subject_ids == ("CS101", "CS201", "CS202", "CS301")
    assert catalog.subject("NOPE") is None


def test_catalog_from_dict_defaults_optional_keys():
    catalog = catalog_from_dict(
        {
            "subjects": [{"id": "S1", "hours_per_week": "3"}],
            "faculty": [{"id": "F1", "name": "Ada"}],
            "batches": [{"id": "B1"}],
        }
    )

    assert catalog.subjects[0].name == "S1"
    assert catalog.subjects[0].hours_per_week == 3
    assert catalog.faculty[0].expertise == ()
    assert catalog.batches[0].name == "B1"
    assert catalog.classrooms == ()
    assert catalog.common_subject_ids == ()


def test_sample_catalog_combined_week_has_no_clashes():
    catalog = load_catalog_from_json(str(SAMPLE))
    tg = TimeGrid.from_day_plan()

    entries = generate_combined_schedule(
        catalog.batches,
        catalog.subjects,
        catalog.faculty,
        catalog.classrooms,
        catalog.common_subject_ids,
        tg,
        ClassSchedulingSettings(seed=11),
    )

    assert len(entries) == 5 * tg.placeable_cell_count
    assert max(Counter((e.day, e.period, e.faculty_id) for e in entries).values()) == 1
    assert max(Counter((e.day, e.period, e.classroom_id) for e in entries).values()) == 1
    assert max(Counter((e.day, e.period, e.batch_id) for e in entries).values()) == 1
