"""Feedback router: students rate their teachers."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.backend import Backend, get_backend
from app.database import get_db
from app.middleware.auth import require_student
from app.models.feedback import FeedbackEntry
from app.models.user import User
from app.routers.students import DETAILS_REQUIRED, current_registration
from app.schemas.feedback import FeedbackCreate, FeedbackListResponse, FeedbackResponse
from app.services.feedback_service import FeedbackRejected, submit_feedback

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


def feedback_response(e: FeedbackEntry) -> FeedbackResponse:
    return FeedbackResponse(
        id=e.id,
        student_id=e.student_id,
        student_name=e.student_name,
        teacher_name=e.teacher_name,
        teacher_uid=e.teacher_uid,
        rating=e.rating,
        teaching_quality=e.teaching_quality,
        effective_methods=e.effective_methods,
        approachable=e.approachable,
        explanation_clarity=e.explanation_clarity,
        suggested_changes=e.suggested_changes,
        college_code=e.college_code,
        submitted_at=e.submitted_at.isoformat(),
    )


@router.post("", response_model=FeedbackResponse, status_code=201)
def create_feedback(
    req: FeedbackCreate,
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
    current_user: User = Depends(require_student),
):
    """Submit feedback for one teacher. Each teacher can be reviewed once."""
    reg = current_registration(db, current_user.id)
    if not reg:
        raise HTTPException(status_code=400, detail=DETAILS_REQUIRED)

    try:
        entry = submit_feedback(
            db,
            current_user,
            reg,
            req,
            rating_min=backend.settings.RATING_MIN,
            rating_max=backend.settings.RATING_MAX,
        )
    except FeedbackRejected as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return feedback_response(entry)


@router.get("/mine", response_model=FeedbackListResponse)
def my_feedback(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    entries = (
        db.query(FeedbackEntry)
        .filter(FeedbackEntry.student_id == current_user.id)
        .order_by(FeedbackEntry.submitted_at.desc())
        .all()
    )
    return FeedbackListResponse(feedback=[feedback_response(e) for e in entries])
