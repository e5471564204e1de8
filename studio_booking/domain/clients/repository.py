"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Client


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session, search: Optional[str] = None) -> list[Client]:
        """Get all clients, optionally filtered by name or email"""
        query = db.query(Client)

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                (func.lower(Client.name).like(search_term)) | (Client.email.like(search_term))
            )

        return query.order_by(Client.created_at.desc(), Client.id.desc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def get_client_by_email(db: Session, email: str) -> Optional[Client]:
        return db.query(Client).filter(Client.email == email.lower()).first()

    @staticmethod
    def create_client(db: Session, commit: bool = True, **client_data) -> Client:
        """Create a new client; with commit=False it is only flushed into the open transaction"""
        client = Client(**client_data)
        db.add(client)
        if commit:
            db.commit()
            db.refresh(client)
        else:
            db.flush()
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def get_client_bookings(db: Session, client_id: int) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.client_id == client_id)
            .order_by(Booking.booking_date.desc(), Booking.start_time.asc())
            .all()
        )
