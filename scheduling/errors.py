"""Errors raised by the scheduling core.

Both placement failures are fatal: the scheduling call aborts and nothing
partial is returned. Callers surface `message` to the user and retry with
adjusted inputs.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SchedulingError(ValueError):
    """Base class for all scheduling failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CapacityExceededError(SchedulingError):
    """Required weekly hours for a batch exceed the placeable cells of the grid."""

    def __init__(self, batch: str, required: int, available: int):
        super().__init__(
            f"The total required class hours ({required}) for {batch} exceeds the available slots "
            f"({available}). Please reduce the number of subjects or hours per week.",
            details={"batch": batch, "required": required, "available": available},
        )
        self.batch = batch
        self.required = required
        self.available = available


class PlacementExhaustedError(SchedulingError):
    """No admissible (slot, resource) combination is left for a class or exam."""

    def __init__(self, message: str, subject: str, batch: str):
        super().__init__(
            message,
            details={"subject": subject, "batch": batch},
        )
        self.subject = subject
        self.batch = batch
