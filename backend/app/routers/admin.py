"""Admin router: admin profile, student code, faculty list, role changes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.backend import Backend, get_backend
from app.database import get_db
from app.middleware.auth import require_admin
from app.models.profile import AdminProfile, TeacherProfile
from app.models.site_setting import SiteSetting, STUDENT_CODE_PREFIX
from app.models.user import User, ROLES
from app.routers.teachers import teacher_profile_response
from app.schemas.auth import RoleUpdateRequest, UserResponse
from app.schemas.profile import (
    AdminProfileResponse,
    AdminProfileUpdate,
    StudentCodeRequest,
    StudentCodeResponse,
    TeacherProfileListResponse,
)
from app.services.role_resolver import RoleResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _admin_profile_response(user: User, profile: AdminProfile) -> AdminProfileResponse:
    return AdminProfileResponse(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        staff_id=profile.staff_id,
        college_code=profile.college_code,
        department=profile.department,
    )


def _get_or_create(db: Session, user: User) -> AdminProfile:
    profile = db.query(AdminProfile).filter(AdminProfile.user_id == user.id).first()
    if not profile:
        profile = AdminProfile(user_id=user.id)
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile


@router.get("/profile", response_model=AdminProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return _admin_profile_response(current_user, _get_or_create(db, current_user))


@router.put("/profile", response_model=AdminProfileResponse)
def update_profile(
    req: AdminProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    profile = _get_or_create(db, current_user)
    if req.staff_id is not None:
        profile.staff_id = req.staff_id.strip() or None
    if req.college_code is not None:
        profile.college_code = req.college_code.strip().upper() or None
    if req.department is not None:
        profile.department = req.department.strip() or None
    db.commit()
    db.refresh(profile)
    return _admin_profile_response(current_user, profile)


@router.get("/student-code", response_model=StudentCodeResponse)
def get_student_code(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    row = db.query(SiteSetting).filter(SiteSetting.key == STUDENT_CODE_PREFIX).first()
    return StudentCodeResponse(code=row.value if row else None)


@router.put("/student-code", response_model=StudentCodeResponse)
def set_student_code(
    req: StudentCodeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Set the prefix every student college code must start with. Blank clears it."""
    code = req.code.strip().upper()
    row = db.query(SiteSetting).filter(SiteSetting.key == STUDENT_CODE_PREFIX).first()
    if not code:
        if row:
            db.delete(row)
            db.commit()
        return StudentCodeResponse(code=None)
    if row:
        row.value = code
    else:
        db.add(SiteSetting(key=STUDENT_CODE_PREFIX, value=code))
    db.commit()
    return StudentCodeResponse(code=code)


@router.get("/teachers", response_model=TeacherProfileListResponse)
def list_teachers(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    rows = (
        db.query(User, TeacherProfile)
        .join(TeacherProfile, TeacherProfile.user_id == User.id)
        .order_by(TeacherProfile.display_name)
        .all()
    )
    return TeacherProfileListResponse(
        teachers=[teacher_profile_response(user, profile) for user, profile in rows]
    )


@router.put("/users/{user_id}/role", response_model=UserResponse)
def change_user_role(
    user_id: str,
    req: RoleUpdateRequest,
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
    current_user: User = Depends(require_admin),
):
    """Change any identity's role. Takes effect on that identity's next request."""
    if req.role not in ROLES:
        raise HTTPException(status_code=400, detail=f"Role must be one of: {', '.join(ROLES)}")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    role = RoleResolver(db, backend.role_cache).set_role(user.id, req.role)
    logger.info("Admin %s set role of %s to %s", current_user.id, user.id, role)
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=role,
        provider=user.provider,
        created_at=user.created_at.isoformat(),
    )
