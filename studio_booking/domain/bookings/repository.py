"""Booking repository - Database operations for bookings and reminders"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from ...models import ACTIVE_BOOKING_STATUSES, Booking, BookingReminder


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.client), joinedload(Booking.service))
            .filter(Booking.id == booking_id)
            .first()
        )

    @staticmethod
    def get_active_bookings(db: Session, service_id: int, day: date) -> list[Booking]:
        """Pending/confirmed bookings for a service on a date, in arrival order"""
        return (
            db.query(Booking)
            .filter(
                Booking.service_id == service_id,
                Booking.booking_date == day,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
            .order_by(Booking.id.asc())
            .all()
        )

    @staticmethod
    def search_bookings(
        db: Session,
        status: Optional[str] = None,
        service_id: Optional[int] = None,
        client_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Booking]:
        """Search and filter bookings, newest date first"""
        query = db.query(Booking).options(joinedload(Booking.client), joinedload(Booking.service))

        if status and status != "all":
            query = query.filter(Booking.status == status)
        if service_id:
            query = query.filter(Booking.service_id == service_id)
        if client_id:
            query = query.filter(Booking.client_id == client_id)
        if start_date:
            query = query.filter(Booking.booking_date >= start_date)
        if end_date:
            query = query.filter(Booking.booking_date <= end_date)

        return query.order_by(Booking.booking_date.desc(), Booking.start_time.asc()).all()

    @staticmethod
    def transition_status(db: Session, booking_id: int, from_status: str, to_status: str) -> bool:
        """
        Conditionally move a booking between statuses.

        The UPDATE only matches while the row still holds from_status, so two
        racing transitions cannot both apply. Returns True if the row changed.
        """
        result = db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == from_status)
            .values(status=to_status, updated_at=datetime.utcnow())
        )
        db.commit()
        return result.rowcount == 1

    @staticmethod
    def get_elapsed_confirmed_bookings(db: Session, today: date) -> list[Booking]:
        """Confirmed bookings on or before today (caller checks the end time)"""
        return (
            db.query(Booking)
            .filter(Booking.status == "confirmed", Booking.booking_date <= today)
            .all()
        )

    # Reminder Methods
    @staticmethod
    def add_reminders(db: Session, booking: Booking, reminders: list[dict]) -> None:
        for data in reminders:
            db.add(BookingReminder(booking_id=booking.id, **data))

    @staticmethod
    def get_reminders(db: Session, booking_id: int) -> list[BookingReminder]:
        return (
            db.query(BookingReminder)
            .filter(BookingReminder.booking_id == booking_id)
            .order_by(BookingReminder.scheduled_for.asc())
            .all()
        )

    @staticmethod
    def get_reminder_by_id(db: Session, reminder_id: int) -> Optional[BookingReminder]:
        return db.query(BookingReminder).filter(BookingReminder.id == reminder_id).first()

    @staticmethod
    def get_due_reminders(db: Session, now: datetime) -> list[BookingReminder]:
        return (
            db.query(BookingReminder)
            .options(joinedload(BookingReminder.booking))
            .filter(BookingReminder.status == "pending", BookingReminder.scheduled_for <= now)
            .order_by(BookingReminder.scheduled_for.asc())
            .all()
        )
