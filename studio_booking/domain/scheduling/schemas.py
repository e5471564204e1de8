"""Scheduling domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from .time_calculator import format_time


class SlotResponse(BaseModel):
    startTime: str
    endTime: str


class AvailabilityResponse(BaseModel):
    serviceId: int
    date: str
    workingHours: Optional[dict] = None
    slots: list[SlotResponse]


class AvailabilitySettingItem(BaseModel):
    """Working hours for one weekday (0 = Monday ... 6 = Sunday)"""

    dayOfWeek: int
    startTime: str
    endTime: str
    isAvailable: bool = True

    @field_validator("dayOfWeek")
    @classmethod
    def validate_day(cls, v):
        if not 0 <= v <= 6:
            raise ValueError("dayOfWeek must be between 0 (Monday) and 6 (Sunday)")
        return v

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        return format_time(v)

    @model_validator(mode="after")
    def validate_window(self):
        if self.isAvailable and self.startTime >= self.endTime:
            raise ValueError("startTime must be before endTime")
        return self


class AvailabilitySettingsUpdate(BaseModel):
    settings: list[AvailabilitySettingItem]

    @field_validator("settings")
    @classmethod
    def validate_unique_days(cls, v):
        days = [item.dayOfWeek for item in v]
        if len(days) != len(set(days)):
            raise ValueError("Each dayOfWeek may appear only once")
        return v
