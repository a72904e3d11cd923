"""Feedback service: validation and the one-entry-per-teacher rule."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import StoreError
from app.models.feedback import FeedbackEntry
from app.models.student_registration import StudentRegistration
from app.models.user import User
from app.schemas.feedback import FeedbackCreate

logger = logging.getLogger(__name__)

RATING_REQUIRED = "Please provide a rating before submitting"
ALREADY_SUBMITTED = "You have already submitted feedback for this teacher."
SUBMIT_FAILED = "Failed to submit feedback. Please try again."


class FeedbackRejected(Exception):
    """Raised when a submission is refused; carries the user-facing message."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def validate_rating(rating, rating_min: int = 1, rating_max: int = 10) -> int:
    """A rating is required (zero counts as absent) and must fall within range."""
    if not rating:
        raise FeedbackRejected(RATING_REQUIRED)
    if rating < rating_min or rating > rating_max:
        raise FeedbackRejected(f"Rating must be between {rating_min} and {rating_max}")
    return rating


def already_submitted(db: Session, student_id: str, teacher_name: str) -> bool:
    return (
        db.query(FeedbackEntry.id)
        .filter(FeedbackEntry.student_id == student_id, FeedbackEntry.teacher_name == teacher_name)
        .first()
        is not None
    )


def submit_feedback(
    db: Session,
    student: User,
    registration: StudentRegistration,
    req: FeedbackCreate,
    rating_min: int = 1,
    rating_max: int = 10,
) -> FeedbackEntry:
    """Write one immutable feedback entry for (student, teacher)."""
    teacher_name = req.teacher_name.strip()
    if not teacher_name:
        raise FeedbackRejected("Please select a teacher")
    rating = validate_rating(req.rating, rating_min, rating_max)

    try:
        duplicate = already_submitted(db, student.id, teacher_name)
    except SQLAlchemyError as exc:
        raise StoreError.from_exception(exc) from exc
    if duplicate:
        logger.info("Duplicate feedback from %s for %s rejected", student.id, teacher_name)
        raise FeedbackRejected(ALREADY_SUBMITTED, status_code=409)

    entry = FeedbackEntry(
        student_id=student.id,
        student_name=registration.name,
        teacher_name=teacher_name,
        teacher_uid=req.teacher_uid or None,
        college_code=registration.college_code,
        rating=rating,
        teaching_quality=req.teaching_quality,
        effective_methods=req.effective_methods,
        approachable=req.approachable,
        explanation_clarity=req.explanation_clarity,
        suggested_changes=(req.suggested_changes or "").strip() or None,
    )
    db.add(entry)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # Unique constraint caught a submission racing the check above
        if "unique" in str(exc.orig).lower():
            raise FeedbackRejected(ALREADY_SUBMITTED, status_code=409) from exc
        raise StoreError.from_exception(exc, SUBMIT_FAILED) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Feedback write failed: %s", exc)
        raise StoreError.from_exception(exc) from exc
    db.refresh(entry)
    return entry
