"""Teacher and admin profile models."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base


class TeacherProfile(Base):
    __tablename__ = "teacher_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)

    teacher_id = Column(String(64), nullable=True)        # staff identifier; set once the profile is completed
    display_name = Column(String(255), nullable=False)
    department = Column(String(255), nullable=True)
    subjects = Column(Text, nullable=True)
    courses = Column(Text, nullable=True)                  # one completed course per line
    research_papers = Column(Text, nullable=True)
    college_code = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="teacher_profile")

    @property
    def is_complete(self) -> bool:
        return bool(self.teacher_id)


class AdminProfile(Base):
    __tablename__ = "admin_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)

    staff_id = Column(String(64), nullable=True)
    college_code = Column(String(64), nullable=True)
    department = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="admin_profile")
