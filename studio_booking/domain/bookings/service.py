"""Booking service - submission, status transitions and reminders"""

import logging
from datetime import date, datetime, timedelta
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ... import config
from ...errors import (
    InvalidTransitionError,
    NotFoundError,
    SlotUnavailableError,
    StorageError,
    ValidationError,
)
from ...models import ACTIVE_BOOKING_STATUSES, Booking, BookingReminder, Client, Service
from ...shared.validators import parse_time
from ..catalog.repository import ServiceRepository
from ..clients.service import ClientService, validate_contact
from ..scheduling.availability_service import (
    AvailabilityCalculator,
    Clock,
    WorkingHours,
    resolve_working_hours,
)
from ..scheduling.repository import AvailabilitySettingsRepository
from ..scheduling.time_calculator import combine
from .repository import BookingRepository
from .schemas import BookingCreate

logger = logging.getLogger(__name__)

# Called with (booking, event) where event is "created", "confirmed" or "cancelled"
BookingNotifier = Callable[[Booking, str], None]
# Sends one reminder; raises on failure
ReminderSender = Callable[[BookingReminder, Booking], Awaitable[None]]

# action -> (target status, statuses it may be applied from)
TRANSITIONS = {
    "confirm": ("confirmed", ("pending",)),
    "cancel": ("cancelled", ("pending", "confirmed")),
    "complete": ("completed", ("confirmed",)),
}


def default_working_hours() -> WorkingHours:
    return WorkingHours.parse(config.WORKING_HOURS_START, config.WORKING_HOURS_END)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(
        self,
        db: Session,
        clock: Clock = datetime.now,
        notifier: Optional[BookingNotifier] = None,
        reminder_days_before: Optional[list[int]] = None,
        default_hours: Optional[WorkingHours] = None,
    ):
        self.db = db
        self.clock = clock
        self.notifier = notifier
        self.reminder_days_before = (
            config.REMINDER_DAYS_BEFORE if reminder_days_before is None else reminder_days_before
        )
        self.default_hours = default_hours or default_working_hours()
        self.repo = BookingRepository()
        self.services = ServiceRepository()
        self.settings_repo = AvailabilitySettingsRepository()
        self.calculator = AvailabilityCalculator(clock)
        self.clients = ClientService(db)

    # ------------------------------------------------------------------
    # Queries

    def get_service(self, service_id: int) -> Service:
        service = self.services.get_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    def working_hours_for(self, day: date) -> Optional[WorkingHours]:
        setting = self.settings_repo.get_setting_for_date(self.db, day)
        return resolve_working_hours(setting, self.default_hours)

    def get_availability(self, service_id: int, target_date: str):
        """Bookable slots for a service on a date, with the window they were cut from.

        Inactive services cannot be booked, so they are reported as not found.
        """
        service = self.get_service(service_id)
        if not service.is_active:
            raise NotFoundError(f"Service {service_id} is not available for booking")
        day = self.calculator.validate_date(target_date)
        hours = self.working_hours_for(day)
        existing = self.repo.get_active_bookings(self.db, service.id, day)
        return self.calculator.available_slots(service, day, hours, existing), hours

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def list_bookings(self, **filters) -> list[Booking]:
        status = filters.get("status")
        if status and status != "all" and status not in ("pending", "confirmed", "completed", "cancelled"):
            raise ValidationError(f"Unknown booking status '{status}'", ["status"])
        return self.repo.search_bookings(self.db, **filters)

    # ------------------------------------------------------------------
    # Submission

    def submit_booking(self, data: BookingCreate) -> Booking:
        """
        Validate and persist a new booking request in pending status.

        The service row is locked and the requested slot re-checked against
        fresh availability inside the same transaction as the insert. The lock
        queues concurrent submissions for the service, so the daily capacity
        holds; the partial unique index on (service_id, booking_date, start_time)
        also rejects a duplicate active slot on its own.

        Raises:
            ValidationError: bad service, client details or start time
            InvalidServiceError / InvalidDateError: bad availability query
            SlotUnavailableError: slot taken or day at capacity
            StorageError: database failure
        """
        service = self._get_bookable_service(data.serviceId)
        client, contact = self._resolve_client_input(data)

        day = self.calculator.validate_date(data.date)
        try:
            start = parse_time(data.startTime)
        except ValueError as e:
            raise ValidationError(str(e), ["startTime"]) from None

        hours = self.working_hours_for(day)
        slot = self.calculator.candidate_slots(service, day, hours).find(start)
        if slot is None:
            raise ValidationError(
                f"{data.startTime} is not a bookable start time for {service.name} on {day.isoformat()}",
                ["startTime"],
            )
        now = self.clock()
        if combine(day, slot.start_time) < now.replace(microsecond=0):
            raise ValidationError(f"{data.startTime} on {day.isoformat()} has already passed", ["startTime"])

        try:
            self.services.lock_service(self.db, service.id)
            existing = self.repo.get_active_bookings(self.db, service.id, day)
            available = self.calculator.available_slots(service, day, hours, existing)
            if available.find(start) is None:
                raise SlotUnavailableError(
                    f"{service.name} at {data.startTime} on {day.isoformat()} is no longer available"
                )

            if client is None:
                try:
                    client = self.clients.find_or_create_client(contact)
                except IntegrityError as e:
                    raise StorageError(
                        f"Client {contact['email']} was created concurrently; retry the request"
                    ) from e

            booking = Booking(
                client_id=client.id,
                service_id=service.id,
                booking_date=day,
                start_time=slot.start_time.strftime("%H:%M"),
                end_time=slot.end_time.strftime("%H:%M"),
                status="pending",
                notes=data.notes,
            )
            self.db.add(booking)
            self.db.flush()

            self._enforce_capacity(service, day, booking)
            self.repo.add_reminders(self.db, booking, self._reminder_rows(day, slot.start_time, now))
            self.db.commit()
        except (SlotUnavailableError, StorageError):
            self.db.rollback()
            logger.warning(
                f"⚠️ Booking rejected for service {service.id} on {day} at {data.startTime}"
            )
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"⚠️ Lost booking race for service {service.id} on {day} at {data.startTime}"
            )
            raise SlotUnavailableError(
                f"{service.name} at {data.startTime} on {day.isoformat()} was just booked by someone else"
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save booking for service {service.id}: {e}")
            raise StorageError("Failed to save booking") from e

        self.db.refresh(booking)
        logger.info(
            f"📅 Booking {booking.id} created: service {service.id}, client {booking.client_id}, "
            f"{booking.booking_date} {booking.start_time}-{booking.end_time}"
        )
        self._notify(booking, "created")
        return booking

    def _get_bookable_service(self, service_id: int) -> Service:
        service = self.services.get_service_by_id(self.db, service_id)
        if not service or not service.is_active:
            raise ValidationError(f"Service {service_id} not found", ["serviceId"])
        return service

    def _resolve_client_input(self, data: BookingCreate) -> tuple[Optional[Client], Optional[dict]]:
        """Existing client for clientId, or validated contact details for a new one"""
        if data.clientId is not None and data.client is not None:
            raise ValidationError(
                "Provide either clientId or client contact details, not both", ["clientId", "client"]
            )
        if data.clientId is None and data.client is None:
            raise ValidationError(
                "clientId or client contact details are required", ["clientId", "client"]
            )

        if data.clientId is not None:
            client = self.clients.repo.get_client_by_id(self.db, data.clientId)
            if not client:
                raise ValidationError(f"Client {data.clientId} not found", ["clientId"])
            return client, None

        contact = validate_contact(
            data.client.name, data.client.email, data.client.phone, field_prefix="client."
        )
        return None, contact

    def _enforce_capacity(self, service: Service, day: date, booking: Booking) -> None:
        """First come, first served: only the earliest max_bookings_per_day active bookings stand"""
        capacity = service.max_bookings_per_day
        if capacity is None:
            return
        active_ids = [b.id for b in self.repo.get_active_bookings(self.db, service.id, day)]
        if booking.id not in active_ids[:capacity]:
            raise SlotUnavailableError(
                f"{service.name} is fully booked on {day.isoformat()} ({capacity} per day)"
            )

    def _reminder_rows(self, day: date, start, now: datetime) -> list[dict]:
        starts_at = combine(day, start)
        rows = []
        for days_before in sorted(set(self.reminder_days_before), reverse=True):
            scheduled_for = starts_at - timedelta(days=days_before)
            if scheduled_for > now:
                rows.append(
                    {
                        "reminder_type": config.REMINDER_TYPE,
                        "scheduled_for": scheduled_for,
                        "status": "pending",
                    }
                )
        return rows

    # ------------------------------------------------------------------
    # Status transitions

    def confirm(self, booking_id: int) -> Booking:
        return self._transition(booking_id, "confirm")

    def cancel(self, booking_id: int) -> Booking:
        return self._transition(booking_id, "cancel")

    def complete(self, booking_id: int) -> Booking:
        return self._transition(booking_id, "complete")

    def _transition(self, booking_id: int, action: str) -> Booking:
        target, allowed_from = TRANSITIONS[action]
        booking = self.get_booking(booking_id)
        current = booking.status

        if current not in allowed_from:
            raise InvalidTransitionError(
                f"Cannot {action} booking {booking_id}: status is {current}"
            )

        try:
            changed = self.repo.transition_status(self.db, booking_id, current, target)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action} booking {booking_id}: {e}")
            raise StorageError(f"Failed to {action} booking") from e

        self.db.refresh(booking)
        if not changed:
            raise InvalidTransitionError(
                f"Cannot {action} booking {booking_id}: status changed to {booking.status}"
            )

        logger.info(f"✅ Booking {booking_id} transitioned: {current} → {target}")
        if target in ("confirmed", "cancelled"):
            self._notify(booking, target)
        return booking

    def complete_elapsed_bookings(self) -> dict:
        """Move confirmed bookings whose end time has passed to completed"""
        now = self.clock()
        summary = {"confirmed_to_completed": 0, "total_updated": 0}

        for booking in self.repo.get_elapsed_confirmed_bookings(self.db, now.date()):
            if combine(booking.booking_date, booking.end_time) > now:
                continue
            try:
                changed = self.repo.transition_status(self.db, booking.id, "confirmed", "completed")
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Failed to complete booking {booking.id}: {e}")
                raise StorageError("Failed to complete elapsed bookings") from e
            if changed:
                summary["confirmed_to_completed"] += 1
                logger.info(f"✅ Booking {booking.id} transitioned: confirmed → completed")

        summary["total_updated"] = summary["confirmed_to_completed"]
        logger.info(f"📊 Status automation completed: {summary}")
        return summary

    # ------------------------------------------------------------------
    # Reminders

    def get_reminders(self, booking_id: int) -> list[BookingReminder]:
        self.get_booking(booking_id)
        return self.repo.get_reminders(self.db, booking_id)

    def mark_reminder_sent(self, reminder_id: int) -> BookingReminder:
        reminder = self.repo.get_reminder_by_id(self.db, reminder_id)
        if not reminder:
            raise NotFoundError(f"Reminder {reminder_id} not found")
        self._record_reminder(reminder, "sent", sent_at=self.clock())
        self.db.refresh(reminder)
        return reminder

    async def send_due_reminders(self, sender: ReminderSender) -> dict:
        """
        Send every pending reminder that is due; reminders of inactive bookings fail.

        Each result is committed before the next reminder is sent, so a crash
        mid-run never leaves a delivered reminder marked pending.
        """
        now = self.clock()
        summary = {"sent": 0, "failed": 0, "skipped": 0}

        for reminder in self.repo.get_due_reminders(self.db, now):
            reminder_id = reminder.id
            booking = reminder.booking
            if booking.status not in ACTIVE_BOOKING_STATUSES:
                logger.info(
                    f"ℹ️ Reminder {reminder_id} skipped: booking {booking.id} is {booking.status}"
                )
                self._record_reminder(reminder, "failed")
                summary["skipped"] += 1
                continue
            try:
                await sender(reminder, booking)
            except Exception as e:
                logger.error(f"❌ Failed to send reminder {reminder_id} for booking {booking.id}: {e}")
                self._record_reminder(reminder, "failed")
                summary["failed"] += 1
                continue
            self._record_reminder(reminder, "sent", sent_at=now)
            summary["sent"] += 1

        logger.info(f"📊 Reminder run completed: {summary}")
        return summary

    def _record_reminder(
        self, reminder: BookingReminder, status: str, sent_at: Optional[datetime] = None
    ) -> None:
        reminder_id = reminder.id
        reminder.status = status
        reminder.sent_at = sent_at
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record reminder {reminder_id} as {status}: {e}")
            raise StorageError("Failed to record reminder result") from e

    # ------------------------------------------------------------------

    def _notify(self, booking: Booking, event: str) -> None:
        """Fire-and-forget; failures are logged and never reach the caller"""
        if self.notifier is None:
            return
        try:
            self.notifier(booking, event)
        except Exception as e:
            logger.error(f"❌ Failed to dispatch {event} notification for booking {booking.id}: {e}")
