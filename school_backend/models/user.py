"""User model definitions."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from school_backend.database import Base

ROLES = ('admin', 'student')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Represents a student or admin account."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'student')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)  # student/admin
    name = Column(String)
    number = Column(String)
    class_name = Column("class", String, index=True)
    address = Column(String)
    father_name = Column(String)
    mother_name = Column(String)
    age = Column(Integer)
    birthdate = Column(String)
    gender = Column(String)
    passport_image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
