"""Dashboards router: feedback aggregates for teachers and admins."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.backend import Backend, get_backend
from app.database import get_db
from app.errors import StoreError
from app.middleware.auth import require_admin, require_teacher
from app.models.feedback import FeedbackEntry
from app.models.profile import TeacherProfile
from app.models.student_registration import StudentRegistration
from app.models.user import User
from app.schemas.dashboard import AdminDashboardResponse, TeacherDashboardResponse
from app.services import dashboard_service
from app.services.demo_data import DEMO_TEACHERS, generate_feedback

router = APIRouter(prefix="/api/dashboards", tags=["dashboards"])


def _check_demo(backend: Backend, demo: bool) -> None:
    if demo and not backend.settings.DEMO_DATA_ENABLED:
        raise HTTPException(status_code=400, detail="Demo data is disabled")


@router.get("/teacher", response_model=TeacherDashboardResponse)
def teacher_dashboard(
    demo: bool = Query(False),
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
    current_user: User = Depends(require_teacher),
):
    """Aggregates over every feedback entry addressed to the current teacher."""
    _check_demo(backend, demo)
    rating_max = backend.settings.RATING_MAX
    if demo:
        entries = generate_feedback(teacher_names=[current_user.display_name], rating_max=rating_max)
    else:
        try:
            entries = (
                db.query(FeedbackEntry)
                .filter(or_(
                    FeedbackEntry.teacher_uid == current_user.id,
                    FeedbackEntry.teacher_name == current_user.display_name,
                ))
                .all()
            )
        except SQLAlchemyError as exc:
            raise StoreError.from_exception(exc) from exc

    result = dashboard_service.aggregate(entries, rating_max)
    return TeacherDashboardResponse(
        teacher_name=current_user.display_name,
        summary=result["summary"],
        recent_feedback=result["recent_feedback"],
        demo=demo,
    )


@router.get("/admin", response_model=AdminDashboardResponse)
def admin_dashboard(
    demo: bool = Query(False),
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
    current_user: User = Depends(require_admin),
):
    """Institution-wide aggregates: students, faculty, ratings, departments."""
    _check_demo(backend, demo)
    rating_max = backend.settings.RATING_MAX
    if demo:
        entries = generate_feedback(rating_max=rating_max)
        departments = dict(DEMO_TEACHERS)
        total_students = len({e.student_id for e in entries})
        faculty_members = len(DEMO_TEACHERS)
    else:
        try:
            entries = db.query(FeedbackEntry).all()
            profiles = db.query(TeacherProfile).all()
            total_students = db.query(func.count(func.distinct(StudentRegistration.user_id))).scalar() or 0
        except SQLAlchemyError as exc:
            raise StoreError.from_exception(exc) from exc
        faculty_members = len(profiles)
        departments = {p.display_name: p.department for p in profiles if p.department}
        departments.update({p.user_id: p.department for p in profiles if p.department})

    def department_of(e: FeedbackEntry):
        return departments.get(e.teacher_uid) or departments.get(e.teacher_name)

    result = dashboard_service.aggregate(entries, rating_max, department_of=department_of)
    return AdminDashboardResponse(
        total_students=total_students,
        faculty_members=faculty_members,
        summary=result["summary"],
        department_averages=result["department_averages"],
        top_teachers=result["top_teachers"],
        demo=demo,
    )
