"""
Availability calculator - bookable slots for a service on a date.

Slots are laid out on a fixed grid: the first starts when the working window
opens, each following one starts ``service.duration`` minutes later, and the
last ends at or before the window closes. A candidate is dropped when it
overlaps an active booking, when the day has already reached the service's
``max_bookings_per_day``, or when it starts before "now" on the current day.

The calculator is a pure function of its arguments plus the injected clock,
so calling it twice with the same inputs yields the same slots.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Iterable, Iterator, Optional, Union

from ...errors import InvalidDateError, InvalidServiceError
from ...models import ACTIVE_BOOKING_STATUSES
from ...shared.validators import parse_date, parse_time
from .time_calculator import from_minutes, intervals_overlap, to_minutes

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def get_clock() -> Clock:
    """Dependency injection for the "current time" source"""
    return datetime.now


@dataclass(frozen=True)
class Slot:
    start_time: time
    end_time: time

    def as_dict(self) -> dict:
        return {
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
        }


@dataclass(frozen=True)
class WorkingHours:
    open_time: time
    close_time: time

    @classmethod
    def parse(cls, open_time: Union[str, time], close_time: Union[str, time]) -> "WorkingHours":
        return cls(parse_time(open_time), parse_time(close_time))

    def as_dict(self) -> dict:
        return {
            "start": self.open_time.strftime("%H:%M"),
            "end": self.close_time.strftime("%H:%M"),
        }


def resolve_working_hours(setting, default: WorkingHours) -> Optional[WorkingHours]:
    """Window for a day: its weekday setting if one exists, else the default.

    Returns None when the weekday is explicitly marked unavailable.
    """
    if setting is None:
        return default
    if not setting.is_available:
        return None
    return WorkingHours.parse(setting.start_time, setting.end_time)


class SlotSequence:
    """Finite, restartable, lazily generated sequence of slots.

    Every iteration walks the grid again from the window open; inputs are
    frozen at construction so repeated iteration yields identical slots.
    """

    def __init__(
        self,
        open_minutes: int,
        close_minutes: int,
        duration: int,
        busy: tuple[tuple[int, int], ...] = (),
        earliest_start_seconds: Optional[int] = None,
    ):
        self.open_minutes = open_minutes
        self.close_minutes = close_minutes
        self.duration = duration
        self.busy = busy
        self.earliest_start_seconds = earliest_start_seconds

    @classmethod
    def empty(cls) -> "SlotSequence":
        return cls(0, 0, 1)

    def __iter__(self) -> Iterator[Slot]:
        start = self.open_minutes
        while start + self.duration <= self.close_minutes:
            end = start + self.duration
            if self._is_open(start, end):
                yield Slot(from_minutes(start), from_minutes(end))
            start = end

    def _is_open(self, start: int, end: int) -> bool:
        if self.earliest_start_seconds is not None and start * 60 < self.earliest_start_seconds:
            return False
        return not any(intervals_overlap(start, end, b_start, b_end) for b_start, b_end in self.busy)

    def find(self, start_time: Union[str, time]) -> Optional[Slot]:
        """The slot starting at start_time, if this sequence offers it"""
        wanted = parse_time(start_time)
        for slot in self:
            if slot.start_time == wanted:
                return slot
            if slot.start_time > wanted:
                break
        return None

    def __repr__(self) -> str:
        return f"<SlotSequence {[s.as_dict() for s in self]}>"


class AvailabilityCalculator:
    """Computes bookable slots; receives its clock at construction"""

    def __init__(self, clock: Clock = datetime.now):
        self.clock = clock

    def validate_service(self, service) -> int:
        duration = getattr(service, "duration_minutes", None)
        if duration is None or duration <= 0:
            raise InvalidServiceError(
                f"Service duration must be a positive number of minutes (got {duration})"
            )
        return int(duration)

    def validate_date(self, target_date: Union[str, date]) -> date:
        try:
            day = parse_date(target_date)
        except ValueError as e:
            raise InvalidDateError(str(e)) from None
        if day < self.clock().date():
            raise InvalidDateError(f"Date {day.isoformat()} is in the past")
        return day

    def candidate_slots(
        self,
        service,
        target_date: Union[str, date],
        working_hours: Optional[WorkingHours],
    ) -> SlotSequence:
        """The full slot grid for the day, ignoring bookings, capacity and the clock"""
        duration = self.validate_service(service)
        self.validate_date(target_date)
        if working_hours is None:
            return SlotSequence.empty()
        return SlotSequence(
            to_minutes(working_hours.open_time),
            _window_close_minutes(working_hours),
            duration,
        )

    def available_slots(
        self,
        service,
        target_date: Union[str, date],
        working_hours: Optional[WorkingHours],
        bookings: Iterable = (),
    ) -> SlotSequence:
        """
        Bookable slots for service on target_date.

        Args:
            service: object with duration_minutes and max_bookings_per_day
            target_date: date or YYYY-MM-DD string
            working_hours: the day's window, or None when the studio is closed
            bookings: existing bookings for this service and date; only
                pending/confirmed ones are considered

        Raises:
            InvalidServiceError: duration is not positive
            InvalidDateError: date unparseable or before today
        """
        duration = self.validate_service(service)
        day = self.validate_date(target_date)

        if working_hours is None:
            return SlotSequence.empty()

        active = [b for b in bookings if b.status in ACTIVE_BOOKING_STATUSES]

        capacity = getattr(service, "max_bookings_per_day", None)
        if capacity is not None and len(active) >= capacity:
            logger.debug(
                f"Service {getattr(service, 'id', '?')} is at capacity on {day}: "
                f"{len(active)}/{capacity}"
            )
            return SlotSequence.empty()

        busy = tuple(sorted((to_minutes(b.start_time), to_minutes(b.end_time)) for b in active))

        earliest = None
        now = self.clock()
        if day == now.date():
            earliest = now.hour * 3600 + now.minute * 60 + now.second

        return SlotSequence(
            to_minutes(working_hours.open_time),
            _window_close_minutes(working_hours),
            duration,
            busy=busy,
            earliest_start_seconds=earliest,
        )


def _window_close_minutes(working_hours: WorkingHours) -> int:
    close = to_minutes(working_hours.close_time)
    if close <= to_minutes(working_hours.open_time):
        # Windows do not wrap past midnight; an inverted window has no slots
        return 0
    return close
