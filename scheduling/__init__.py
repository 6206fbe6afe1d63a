"""Scheduling core (weekly classes, combined classes, exams)."""

from .catalog import catalog_from_dict, load_catalog_from_json
from .class_scheduler import (
	ClassSchedulingSettings,
	format_batch_timetable,
	format_faculty_timetable,
	generate_single_group_schedule,
)
from .combined_scheduler import generate_combined_schedule
from .errors import CapacityExceededError, PlacementExhaustedError, SchedulingError
from .exam_scheduler import (
	ExamSchedulingSettings,
	build_exam_slots,
	format_exam_timetable,
	generate_exam_schedule,
	session_end_time,
)
from .models import (
	Batch,
	BreakSpec,
	Catalog,
	Classroom,
	ExamScheduleEntry,
	Faculty,
	Period,
	ScheduleEntry,
	Session,
	Subject,
	TimeGrid,
)
from .rules import RuleSet, parse_rules
from .slot_grid import SlotGrid
from .workload import normalize_workload, resolve_batch_subjects

__all__ = [
	"Batch",
	"BreakSpec",
	"CapacityExceededError",
	"Catalog",
	"ClassSchedulingSettings",
	"Classroom",
	"ExamScheduleEntry",
	"ExamSchedulingSettings",
	"Faculty",
	"Period",
	"PlacementExhaustedError",
	"RuleSet",
	"ScheduleEntry",
	"SchedulingError",
	"Session",
	"SlotGrid",
	"Subject",
	"TimeGrid",
	"build_exam_slots",
	"catalog_from_dict",
	"format_batch_timetable",
	"format_exam_timetable",
	"format_faculty_timetable",
	"generate_combined_schedule",
	"generate_exam_schedule",
	"generate_single_group_schedule",
	"load_catalog_from_json",
	"normalize_workload",
	"parse_rules",
	"resolve_batch_subjects",
	"session_end_time",
]
