"""Scheduling router - slot availability and studio working hours"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...errors import StorageError
from ..bookings.service import BookingService
from .availability_service import Clock, get_clock
from .repository import AvailabilitySettingsRepository
from .schemas import (
    AvailabilityResponse,
    AvailabilitySettingItem,
    AvailabilitySettingsUpdate,
    SlotResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def to_setting_item(setting) -> AvailabilitySettingItem:
    return AvailabilitySettingItem(
        dayOfWeek=setting.day_of_week,
        startTime=setting.start_time,
        endTime=setting.end_time,
        isAvailable=setting.is_available,
    )


@router.get("", response_model=AvailabilityResponse)
async def get_availability(
    serviceId: int = Query(...),
    date: str = Query(..., description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Bookable slots for a service on a date (public, used by the booking widget)"""
    slots, hours = BookingService(db, clock=clock).get_availability(serviceId, date)
    return AvailabilityResponse(
        serviceId=serviceId,
        date=date,
        workingHours=hours.as_dict() if hours else None,
        slots=[SlotResponse(**slot.as_dict()) for slot in slots],
    )


@router.get("/settings", response_model=list[AvailabilitySettingItem])
async def get_availability_settings(db: Session = Depends(get_db)):
    """Per-weekday working hours; weekdays without a row use the default window"""
    return [to_setting_item(s) for s in AvailabilitySettingsRepository.get_settings(db)]


@router.put("/settings", response_model=list[AvailabilitySettingItem])
async def update_availability_settings(
    data: AvailabilitySettingsUpdate,
    _admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Replace the weekly working hours"""
    rows = [
        {
            "day_of_week": item.dayOfWeek,
            "start_time": item.startTime,
            "end_time": item.endTime,
            "is_available": item.isAvailable,
        }
        for item in data.settings
    ]
    try:
        settings = AvailabilitySettingsRepository.replace_settings(db, rows)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to update availability settings: {e}")
        raise StorageError("Failed to save availability settings") from e

    logger.info(f"🗓️ Availability settings updated for {len(settings)} weekdays")
    return [to_setting_item(s) for s in settings]
