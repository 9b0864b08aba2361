"""User model definitions."""

from sqlalchemy import Column, Integer, String
from appointment_backend.database import Base


class User(Base):
    """Represents a registered account allowed to change appointments."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
