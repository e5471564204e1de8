"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..clients.schemas import ClientCreate


class BookingCreate(BaseModel):
    """
    Schema for a booking request.
    Either clientId (existing client) or client (inline contact details) is required.
    """

    clientId: Optional[int] = None
    client: Optional[ClientCreate] = None
    serviceId: int
    date: str  # YYYY-MM-DD
    startTime: str  # HH:MM
    notes: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    clientId: int
    serviceId: int
    date: str
    startTime: str
    endTime: str
    status: str
    notes: Optional[str] = None
    clientName: Optional[str] = None
    serviceName: Optional[str] = None
    createdAt: Optional[datetime] = None


class ReminderResponse(BaseModel):
    id: int
    bookingId: int
    reminderType: str
    scheduledFor: datetime
    sentAt: Optional[datetime] = None
    status: str


class AutomationResult(BaseModel):
    confirmed_to_completed: int
    total_updated: int
