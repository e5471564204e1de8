"""Catalog schemas - Pydantic models for studio services"""

from typing import Optional

from pydantic import BaseModel, field_validator


class ServiceCreate(BaseModel):
    name: str
    description: Optional[str] = None
    duration: int  # minutes
    price: float = 0.0
    maxBookingsPerDay: Optional[int] = None
    isActive: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Service name is required")
        return v.strip()

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v):
        if v <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if v < 0:
            raise ValueError("Price cannot be negative")
        return v

    @field_validator("maxBookingsPerDay")
    @classmethod
    def validate_capacity(cls, v):
        if v is not None and v <= 0:
            raise ValueError("maxBookingsPerDay must be a positive integer")
        return v


class ServiceUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""

    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    price: Optional[float] = None
    maxBookingsPerDay: Optional[int] = None
    isActive: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Service name cannot be empty")
        return v.strip() if v else v

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative")
        return v

    @field_validator("maxBookingsPerDay")
    @classmethod
    def validate_capacity(cls, v):
        if v is not None and v <= 0:
            raise ValueError("maxBookingsPerDay must be a positive integer")
        return v


class ServiceResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration: int
    price: float
    maxBookingsPerDay: Optional[int] = None
    isActive: bool
