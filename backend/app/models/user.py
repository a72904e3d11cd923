"""User model: an authenticated identity and its RoleRecord."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from app.database import Base

ROLES = ("student", "teacher", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # null for federated identities
    provider = Column(String(20), nullable=False, default="password")  # password | federated
    display_name = Column(String(255), nullable=False)
    mobile = Column(String(32), nullable=True)

    # RoleRecord: at most one active role per identity
    role = Column(String(20), nullable=True)  # student | teacher | admin
    role_updated_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    teacher_profile = relationship("TeacherProfile", back_populates="user", uselist=False)
    admin_profile = relationship("AdminProfile", back_populates="user", uselist=False)
    registrations = relationship("StudentRegistration", back_populates="user")
