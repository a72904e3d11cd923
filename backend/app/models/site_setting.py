"""Key/value settings managed by admins."""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime

from app.database import Base

STUDENT_CODE_PREFIX = "student_code_prefix"


class SiteSetting(Base):
    __tablename__ = "site_settings"

    key = Column(String(64), primary_key=True)
    value = Column(String(255), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
