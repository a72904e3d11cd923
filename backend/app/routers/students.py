"""Students router: entry details and the list of teachers to review."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth import require_student
from app.models.profile import TeacherProfile
from app.models.site_setting import SiteSetting, STUDENT_CODE_PREFIX
from app.models.student_registration import StudentRegistration
from app.models.user import User
from app.schemas.student import (
    StudentEntryRequest,
    StudentEntryResponse,
    StudentRegistrationResponse,
    TeacherListResponse,
    TeacherSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["students"])

SEMESTERS = range(1, 9)
DETAILS_REQUIRED = "Please enter your details again."


def student_code_prefix(db: Session) -> Optional[str]:
    row = db.query(SiteSetting).filter(SiteSetting.key == STUDENT_CODE_PREFIX).first()
    return row.value if row else None


def current_registration(db: Session, user_id: str) -> Optional[StudentRegistration]:
    """The student's latest entry; earlier ones are superseded."""
    return (
        db.query(StudentRegistration)
        .filter(StudentRegistration.user_id == user_id)
        .order_by(StudentRegistration.created_at.desc())
        .first()
    )


def _registration_response(reg: StudentRegistration) -> StudentRegistrationResponse:
    return StudentRegistrationResponse(
        id=reg.id,
        name=reg.name,
        semester=reg.semester,
        college_code=reg.college_code,
        created_at=reg.created_at.isoformat(),
    )


@router.post("/entry", response_model=StudentEntryResponse, status_code=201)
def register_entry(
    req: StudentEntryRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    """Record name, semester and college code before giving feedback."""
    name = req.name.strip()
    code = req.college_code.strip().upper()
    if not name or not req.semester or not code:
        raise HTTPException(status_code=400, detail="Please fill all the required fields.")
    if req.semester not in SEMESTERS:
        raise HTTPException(status_code=400, detail="Semester must be between 1 and 8.")

    prefix = student_code_prefix(db)
    if prefix and not code.startswith(prefix):
        raise HTTPException(status_code=400, detail=f"Your college code should start with {prefix}")

    reg = StudentRegistration(
        user_id=current_user.id,
        name=name,
        semester=req.semester,
        college_code=code,
    )
    db.add(reg)
    db.commit()
    db.refresh(reg)

    return StudentEntryResponse(
        registration=_registration_response(reg),
        message="Welcome! You can now provide feedback.",
    )


@router.get("/entry", response_model=StudentRegistrationResponse)
def get_entry(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    reg = current_registration(db, current_user.id)
    if not reg:
        raise HTTPException(status_code=404, detail="No student details on record")
    return _registration_response(reg)


@router.get("/teachers", response_model=TeacherListResponse)
def list_teachers(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    """Teachers registered under the student's college code, one per display name."""
    reg = current_registration(db, current_user.id)
    if not reg:
        raise HTTPException(status_code=400, detail=DETAILS_REQUIRED)

    profiles = (
        db.query(TeacherProfile)
        .filter(TeacherProfile.college_code == reg.college_code)
        .order_by(TeacherProfile.display_name)
        .all()
    )
    unique = {}
    for p in profiles:
        unique[p.display_name] = TeacherSummary(
            uid=p.user_id,
            display_name=p.display_name,
            department=p.department,
            subjects=p.subjects,
        )
    return TeacherListResponse(teachers=list(unique.values()))
