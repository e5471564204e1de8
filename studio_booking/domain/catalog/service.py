"""Catalog service - Business logic for studio services"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, StorageError
from ...models import Service
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

# API field -> model column
FIELD_MAP = {
    "name": "name",
    "description": "description",
    "duration": "duration_minutes",
    "price": "price",
    "maxBookingsPerDay": "max_bookings_per_day",
    "isActive": "is_active",
}


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def get_services(self, include_inactive: bool = False) -> list[Service]:
        return self.repo.get_services(self.db, include_inactive)

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    def create_service(self, data: ServiceCreate) -> Service:
        values = {FIELD_MAP[k]: v for k, v in data.model_dump().items()}
        try:
            service = self.repo.create_service(self.db, **values)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create service {data.name}: {e}")
            raise StorageError("Failed to save service") from e
        logger.info(f"✅ Service {service.id} created: {service.name} ({service.duration_minutes} min)")
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        """
        Apply a partial update. Explicit nulls are only meaningful for
        maxBookingsPerDay (removes the daily cap) and description.
        """
        service = self.get_service(service_id)
        updates = {}
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key not in ("maxBookingsPerDay", "description"):
                continue
            updates[FIELD_MAP[key]] = value

        try:
            service = self.repo.update_service(self.db, service, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update service {service_id}: {e}")
            raise StorageError("Failed to update service") from e
        logger.info(f"✅ Service {service_id} updated: {sorted(updates)}")
        return service
