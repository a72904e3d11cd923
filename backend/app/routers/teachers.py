"""Teachers router: profile completion and editing."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth import require_teacher
from app.models.profile import TeacherProfile
from app.models.user import User
from app.schemas.profile import CourseAddRequest, TeacherProfileResponse, TeacherProfileUpdate

router = APIRouter(prefix="/api/teachers", tags=["teachers"])

REQUIRED_FIELDS = {
    "teacher_id": "Teacher ID is required",
    "department": "Department is required",
    "subjects": "Subjects are required",
    "courses": "Completed courses are required",
}


def teacher_profile_response(user: User, profile: TeacherProfile) -> TeacherProfileResponse:
    return TeacherProfileResponse(
        user_id=user.id,
        email=user.email,
        display_name=profile.display_name,
        teacher_id=profile.teacher_id,
        department=profile.department,
        subjects=profile.subjects,
        courses=profile.courses,
        research_papers=profile.research_papers,
        college_code=profile.college_code,
        is_complete=profile.is_complete,
    )


def _get_or_create(db: Session, user: User) -> TeacherProfile:
    profile = db.query(TeacherProfile).filter(TeacherProfile.user_id == user.id).first()
    if not profile:
        profile = TeacherProfile(user_id=user.id, display_name=user.display_name)
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile


@router.get("/profile", response_model=TeacherProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    return teacher_profile_response(current_user, _get_or_create(db, current_user))


@router.put("/profile", response_model=TeacherProfileResponse)
def update_profile(
    req: TeacherProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    """Complete or edit the profile. The four core fields are required."""
    for field, message in REQUIRED_FIELDS.items():
        if not getattr(req, field).strip():
            raise HTTPException(status_code=400, detail=message)

    profile = _get_or_create(db, current_user)
    profile.teacher_id = req.teacher_id.strip()
    profile.department = req.department.strip()
    profile.subjects = req.subjects.strip()
    profile.courses = req.courses.strip()
    profile.research_papers = (req.research_papers or "").strip() or None
    if req.college_code is not None:
        profile.college_code = req.college_code.strip().upper() or None
    profile.display_name = current_user.display_name
    db.commit()
    db.refresh(profile)
    return teacher_profile_response(current_user, profile)


@router.post("/profile/courses", response_model=TeacherProfileResponse)
def add_course(
    req: CourseAddRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    """Append one completed course to the profile."""
    course = req.course.strip()
    if not course:
        raise HTTPException(status_code=400, detail="Course name is required")
    profile = _get_or_create(db, current_user)
    profile.courses = f"{profile.courses}\n{course}" if profile.courses else course
    db.commit()
    db.refresh(profile)
    return teacher_profile_response(current_user, profile)
