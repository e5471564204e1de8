"""Catalog router - FastAPI endpoints for studio services"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Service
from .schemas import ServiceCreate, ServiceResponse, ServiceUpdate
from .service import CatalogService

router = APIRouter(prefix="/services", tags=["Services"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def to_service_response(service: Service) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        name=service.name,
        description=service.description,
        duration=service.duration_minutes,
        price=service.price,
        maxBookingsPerDay=service.max_bookings_per_day,
        isActive=service.is_active,
    )


@router.get("", response_model=list[ServiceResponse])
async def get_services(
    includeInactive: bool = Query(False),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Services offered by the studio (public)"""
    return [to_service_response(s) for s in catalog.get_services(includeInactive)]


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    _admin: str = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return to_service_response(catalog.create_service(data))


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    _admin: str = Depends(get_current_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return to_service_response(catalog.update_service(service_id, data))
