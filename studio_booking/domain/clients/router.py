"""Client router - FastAPI endpoints for client operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Client
from ..bookings.router import to_booking_response
from ..bookings.schemas import BookingResponse
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"], dependencies=[Depends(get_current_admin)])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


def to_client_response(client: Client) -> ClientResponse:
    return ClientResponse(
        id=client.id,
        name=client.name,
        email=client.email,
        phone=client.phone,
        notes=client.notes,
        createdAt=client.created_at,
    )


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    search: Optional[str] = Query(None),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients, optionally searching name and email"""
    return [to_client_response(c) for c in service.get_clients(search)]


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    service: ClientService = Depends(get_client_service),
):
    client = service.create_client(data)
    logger.info(f"✅ Client {client.id} created")
    return to_client_response(client)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.get_client(client_id))


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.update_client(client_id, data))


@router.get("/{client_id}/bookings", response_model=list[BookingResponse])
async def get_client_bookings(
    client_id: int,
    service: ClientService = Depends(get_client_service),
):
    """Booking history for a client"""
    return [to_booking_response(b) for b in service.get_client_bookings(client_id)]
