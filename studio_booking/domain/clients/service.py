"""Client service - Business logic for client operations"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, StorageError, ValidationError
from ...models import Booking, Client
from ...shared.validators import validate_email, validate_phone
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


def validate_contact(
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    field_prefix: str = "",
    partial: bool = False,
) -> dict:
    """
    Check and normalize client contact fields.

    Every field must be non-empty unless partial=True, in which case None
    means "leave unchanged". All faulty fields are reported together.

    Returns:
        dict of normalized name/email/phone (omitting None values when partial)

    Raises:
        ValidationError: naming each faulty field
    """
    bad_fields = []
    problems = []
    cleaned = {}

    if name is not None or not partial:
        if not name or not name.strip():
            bad_fields.append(f"{field_prefix}name")
            problems.append("name is required")
        else:
            cleaned["name"] = name.strip()

    if email is not None or not partial:
        if not email or not email.strip():
            bad_fields.append(f"{field_prefix}email")
            problems.append("email is required")
        else:
            try:
                cleaned["email"] = validate_email(email)
            except ValueError as e:
                bad_fields.append(f"{field_prefix}email")
                problems.append(str(e))

    if phone is not None or not partial:
        if not phone or not phone.strip():
            bad_fields.append(f"{field_prefix}phone")
            problems.append("phone is required")
        else:
            try:
                cleaned["phone"] = validate_phone(phone)
            except ValueError as e:
                bad_fields.append(f"{field_prefix}phone")
                problems.append(str(e))

    if bad_fields:
        raise ValidationError("Invalid client details: " + "; ".join(problems), bad_fields)

    return cleaned


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, search: Optional[str] = None) -> list[Client]:
        return self.repo.get_clients(self.db, search)

    def get_client(self, client_id: int) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    def create_client(self, data: ClientCreate) -> Client:
        """Create a new client with validation"""
        contact = validate_contact(data.name, data.email, data.phone)

        if self.repo.get_client_by_email(self.db, contact["email"]):
            raise ValidationError(
                f"A client with email {contact['email']} already exists", ["email"]
            )

        logger.info(f"📥 Creating client {contact['email']}")
        try:
            return self.repo.create_client(self.db, notes=data.notes, **contact)
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(
                f"A client with email {contact['email']} already exists", ["email"]
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create client {contact['email']}: {e}")
            raise StorageError("Failed to save client") from e

    def find_or_create_client(self, contact: dict) -> Client:
        """Reuse the client with this email, or add a new one to the open transaction"""
        client = self.repo.get_client_by_email(self.db, contact["email"])
        if client:
            logger.info(f"♻️ Reusing client {client.id} for {contact['email']}")
            return client
        logger.info(f"📥 Creating client {contact['email']} from booking request")
        return self.repo.create_client(self.db, commit=False, **contact)

    def update_client(self, client_id: int, data: ClientUpdate) -> Client:
        client = self.get_client(client_id)
        updates = validate_contact(data.name, data.email, data.phone, partial=True)
        if data.notes is not None:
            updates["notes"] = data.notes

        if "email" in updates and updates["email"] != client.email:
            if self.repo.get_client_by_email(self.db, updates["email"]):
                raise ValidationError(
                    f"A client with email {updates['email']} already exists", ["email"]
                )

        try:
            return self.repo.update_client(self.db, client, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update client {client_id}: {e}")
            raise StorageError("Failed to update client") from e

    def get_client_bookings(self, client_id: int) -> list[Booking]:
        self.get_client(client_id)
        return self.repo.get_client_bookings(self.db, client_id)
