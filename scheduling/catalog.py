"""Loading resource catalogs from JSON.

Expected shape (optional keys may be omitted):

    {
      "subjects":   [{"id": "CS101", "name": "Intro to Programming", "hours_per_week": 4}],
      "faculty":    [{"id": "F001", "name": "Dr. Alan Turing", "expertise": ["CS101"]}],
      "classrooms": [{"id": "C101", "name": "Room 101"}],
      "batches":    [{"id": "B_CSE_Y1", "name": "CSE Year 1", "subject_ids": ["CS101"]}],
      "common_subject_ids": ["MA101"]
    }
"""

from __future__ import annotations

import json
from typing import Any, Dict

from .models import Batch, Catalog, Classroom, Faculty, Subject


def catalog_from_dict(raw: Dict[str, Any]) -> Catalog:
    subjects = tuple(
        Subject(
            subject_id=str(s["id"]),
            name=str(s.get("name", s["id"])),
            hours_per_week=int(s.get("hours_per_week", 0)),
        )
        for s in raw.get("subjects", [])
    )

    faculty = tuple(
        Faculty(
            faculty_id=str(f["id"]),
            name=str(f.get("name", f["id"])),
            expertise=tuple(str(x) for x in f.get("expertise", [])),
        )
        for f in raw.get("faculty", [])
    )

    classrooms = tuple(
        Classroom(classroom_id=str(c["id"]), name=str(c.get("name", c["id"])))
        for c in raw.get("classrooms", [])
    )

    batches = tuple(
        Batch(
            batch_id=str(b["id"]),
            name=str(b.get("name", b["id"])),
            subject_ids=tuple(str(x) for x in b.get("subject_ids", [])),
        )
        for b in raw.get("batches", [])
    )

    return Catalog(
        subjects=subjects,
        faculty=faculty,
        classrooms=classrooms,
        batches=batches,
        common_subject_ids=tuple(str(x) for x in raw.get("common_subject_ids", [])),
    )


def load_catalog_from_json(path: str) -> Catalog:
    """Load a `Catalog` from a JSON file."""

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return catalog_from_dict(raw)
