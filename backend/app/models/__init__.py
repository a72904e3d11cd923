"""SQLAlchemy ORM models."""

from app.models.user import User, ROLES
from app.models.profile import TeacherProfile, AdminProfile
from app.models.student_registration import StudentRegistration
from app.models.feedback import FeedbackEntry
from app.models.site_setting import SiteSetting

__all__ = [
    "User",
    "ROLES",
    "TeacherProfile",
    "AdminProfile",
    "StudentRegistration",
    "FeedbackEntry",
    "SiteSetting",
]
