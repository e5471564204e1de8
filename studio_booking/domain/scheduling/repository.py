"""Scheduling repository - working-hours settings queries"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import AvailabilitySetting


class AvailabilitySettingsRepository:
    """Repository for per-weekday working hours"""

    @staticmethod
    def get_settings(db: Session) -> list[AvailabilitySetting]:
        return db.query(AvailabilitySetting).order_by(AvailabilitySetting.day_of_week).all()

    @staticmethod
    def get_setting_for_date(db: Session, day: date) -> Optional[AvailabilitySetting]:
        return (
            db.query(AvailabilitySetting)
            .filter(AvailabilitySetting.day_of_week == day.weekday())
            .first()
        )

    @staticmethod
    def replace_settings(db: Session, settings: list[dict]) -> list[AvailabilitySetting]:
        """Replace all weekday settings in one transaction"""
        db.query(AvailabilitySetting).delete(synchronize_session=False)
        for data in settings:
            db.add(AvailabilitySetting(**data))
        db.commit()
        return AvailabilitySettingsRepository.get_settings(db)
