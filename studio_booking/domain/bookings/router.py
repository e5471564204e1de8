"""Booking router - FastAPI endpoints for booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...errors import ValidationError
from ...models import Booking, BookingReminder
from ...rate_limiter import booking_rate_limit
from ...services.notification_service import EmailBookingNotifier
from ...shared.validators import parse_date
from ..scheduling.availability_service import Clock, get_clock
from .schemas import AutomationResult, BookingCreate, BookingResponse, ReminderResponse
from .service import BookingNotifier, BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
reminders_router = APIRouter(prefix="/reminders", tags=["Bookings"])


def get_booking_notifier(background_tasks: BackgroundTasks) -> BookingNotifier:
    """Dependency injection for the booking notifier (e-mails sent after the response)"""
    return EmailBookingNotifier(background_tasks.add_task)


def get_booking_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: BookingNotifier = Depends(get_booking_notifier),
) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db, clock=clock, notifier=notifier)


def to_booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        clientId=booking.client_id,
        serviceId=booking.service_id,
        date=booking.booking_date.isoformat(),
        startTime=booking.start_time,
        endTime=booking.end_time,
        status=booking.status,
        notes=booking.notes,
        clientName=booking.client.name if booking.client else None,
        serviceName=booking.service.name if booking.service else None,
        createdAt=booking.created_at,
    )


def to_reminder_response(reminder: BookingReminder) -> ReminderResponse:
    return ReminderResponse(
        id=reminder.id,
        bookingId=reminder.booking_id,
        reminderType=reminder.reminder_type,
        scheduledFor=reminder.scheduled_for,
        sentAt=reminder.sent_at,
        status=reminder.status,
    )


def _optional_date(value: Optional[str], field: str):
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        raise ValidationError(str(e), [field]) from None


# ============================================================================
# PUBLIC SUBMISSION
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    _: None = Depends(booking_rate_limit),
    service: BookingService = Depends(get_booking_service),
):
    """Submit a booking request; it starts out pending"""
    booking = service.submit_booking(data)
    return to_booking_response(booking)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("", response_model=list[BookingResponse])
async def get_bookings(
    status: Optional[str] = Query(None),
    serviceId: Optional[int] = Query(None),
    clientId: Optional[int] = Query(None),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """List bookings with optional status, service, client and date range filters"""
    bookings = service.list_bookings(
        status=status,
        service_id=serviceId,
        client_id=clientId,
        start_date=_optional_date(startDate, "startDate"),
        end_date=_optional_date(endDate, "endDate"),
    )
    return [to_booking_response(b) for b in bookings]


@router.post("/automation/complete-elapsed", response_model=AutomationResult)
async def complete_elapsed_bookings(
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Manually trigger completion of confirmed bookings that have ended"""
    return service.complete_elapsed_bookings()


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return to_booking_response(service.get_booking(booking_id))


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: int,
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return to_booking_response(service.confirm(booking_id))


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return to_booking_response(service.cancel(booking_id))


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking_id: int,
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return to_booking_response(service.complete(booking_id))


@router.get("/{booking_id}/reminders", response_model=list[ReminderResponse])
async def get_booking_reminders(
    booking_id: int,
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return [to_reminder_response(r) for r in service.get_reminders(booking_id)]


@reminders_router.post("/{reminder_id}/sent", response_model=ReminderResponse)
async def mark_reminder_sent(
    reminder_id: int,
    _admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Mark a reminder as sent (for reminders delivered outside the worker)"""
    return to_reminder_response(service.mark_reminder_sent(reminder_id))
