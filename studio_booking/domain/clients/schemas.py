"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ClientCreate(BaseModel):
    """Schema for creating a new client (also used inline in booking requests)"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: int
    name: str
    email: str
    phone: str
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True
