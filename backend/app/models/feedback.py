"""FeedbackEntry model: one student's rating of one teacher."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, String, DateTime, Integer, Text, ForeignKey, UniqueConstraint

from app.database import Base


class FeedbackEntry(Base):
    __tablename__ = "feedback"
    __table_args__ = (
        UniqueConstraint("student_id", "teacher_name", name="uq_feedback_student_teacher"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    student_name = Column(String(255), nullable=False)
    teacher_name = Column(String(255), nullable=False, index=True)
    teacher_uid = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    college_code = Column(String(64), nullable=True)

    rating = Column(Integer, nullable=False)
    teaching_quality = Column(String(20), nullable=True)     # Excellent | Good | Average | Poor | Very Poor
    effective_methods = Column(Boolean, nullable=False, default=False)
    approachable = Column(Boolean, nullable=False, default=False)
    explanation_clarity = Column(String(20), nullable=True)  # Never | Rarely | Sometimes | Often | Always
    suggested_changes = Column(Text, nullable=True)

    submitted_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
