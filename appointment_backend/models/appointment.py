"""Appointment model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, String
from appointment_backend.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(Base):
    """Represents a dated appointment keyed by a caller-assigned ID."""
    __tablename__ = "appointments"

    appointment_id = Column(String(10), primary_key=True)
    appointment_date = Column(Date, nullable=False)
    description = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self) -> dict:
        return {
            "appointmentId": self.appointment_id,
            "appointmentDate": self.appointment_date.isoformat(),
            "description": self.description,
        }
