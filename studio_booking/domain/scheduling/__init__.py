"""Scheduling domain - working hours and slot availability"""

from .availability_service import (
    AvailabilityCalculator,
    Slot,
    SlotSequence,
    WorkingHours,
    get_clock,
    resolve_working_hours,
)

__all__ = [
    "AvailabilityCalculator",
    "Slot",
    "SlotSequence",
    "WorkingHours",
    "get_clock",
    "resolve_working_hours",
]
