"""Free-text scheduling rules.

Users type rules such as "Sunday is a holiday" or "avoid consecutive classes of
the same subject". We only recognise a handful of literal trigger phrases
(case-insensitive substring match). There is no tokenisation and no negation
handling: "do not avoid consecutive" still switches the rule on.

The structured settings dataclasses are the real contract; `RuleSet` is only a
convenience for turning rule text into them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


WEEKLY_REST_DAY_TRIGGERS: Tuple[str, ...] = ("sunday",)
AVOID_CONSECUTIVE_TRIGGERS: Tuple[str, ...] = ("avoid consecutive",)

# Python weekday index of the weekly rest day (Monday == 0)
SUNDAY = 6


@dataclass(frozen=True)
class RuleSet:
    text: str = ""

    def _mentions(self, triggers: Tuple[str, ...]) -> bool:
        lowered = (self.text or "").lower()
        return any(t in lowered for t in triggers)

    def holidays_exclude_weekly_rest_day(self) -> bool:
        return self._mentions(WEEKLY_REST_DAY_TRIGGERS)

    def avoid_repeating_subject_in_adjacent_periods(self) -> bool:
        return self._mentions(AVOID_CONSECUTIVE_TRIGGERS)

    def rest_weekday(self) -> Optional[int]:
        return SUNDAY if self.holidays_exclude_weekly_rest_day() else None


def parse_rules(text: Optional[str]) -> RuleSet:
    return RuleSet(text=str(text or ""))
