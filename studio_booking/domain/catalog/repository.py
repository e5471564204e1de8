"""Catalog repository - Database operations for studio services"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Service


class ServiceRepository:
    @staticmethod
    def get_services(db: Session, include_inactive: bool = False) -> list[Service]:
        query = db.query(Service)
        if not include_inactive:
            query = query.filter(Service.is_active.is_(True))
        return query.order_by(Service.name.asc()).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def lock_service(db: Session, service_id: int) -> Service:
        """SELECT ... FOR UPDATE on the service row, held until commit or rollback.

        Concurrent submissions for the same service queue here, so each one
        counts the bookings the others committed. SQLite ignores FOR UPDATE;
        it already serializes writers.
        """
        return db.query(Service).filter(Service.id == service_id).with_for_update().one()
