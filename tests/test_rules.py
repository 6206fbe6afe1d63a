import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scheduling.class_scheduler import ClassSchedulingSettings
from scheduling.exam_scheduler import ExamSchedulingSettings
from scheduling.rules import SUNDAY, RuleSet, parse_rules


def test_triggers_are_case_insensitive_substrings():
    rules = RuleSet("No exams on SUNDAY. Please Avoid Consecutive periods of one subject.")
    assert rules.holidays_exclude_weekly_rest_day()
    assert rules.avoid_repeating_subject_in_adjacent_periods()
    assert rules.rest_weekday() == SUNDAY


def test_empty_text_enables_nothing():
    rules = parse_rules(None)
    assert not rules.holidays_exclude_weekly_rest_day()
    assert not rules.avoid_repeating_subject_in_adjacent_periods()
    assert rules.rest_weekday() is None


def test_negation_is_not_understood():
    # literal matching only
    assert parse_rules("do not avoid consecutive classes").avoid_repeating_subject_in_adjacent_periods()


def test_class_settings_from_rules_keeps_overrides():
    settings = ClassSchedulingSettings.from_rules("avoid consecutive", seed=3)
    assert settings.avoid_consecutive_same_subject is True
    assert settings.seed == 3


def test_with_rules_never_switches_a_flag_off():
    settings = ClassSchedulingSettings(avoid_consecutive_same_subject=True)
    assert settings.with_rules("").avoid_consecutive_same_subject is True
    assert ClassSchedulingSettings().with_rules("avoid consecutive").avoid_consecutive_same_subject is True


def test_exam_settings_from_rules_sets_rest_day():
    assert ExamSchedulingSettings.from_rules("Sunday holiday").rest_weekday == SUNDAY
    assert ExamSchedulingSettings.from_rules("").rest_weekday is None
    # an explicit rest day is not replaced by the text shim
    assert ExamSchedulingSettings(rest_weekday=5).with_rules("sunday").rest_weekday == 5
