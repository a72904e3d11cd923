"""Teacher and admin profile schemas."""

from typing import Optional

from pydantic import BaseModel


class TeacherProfileUpdate(BaseModel):
    teacher_id: str = ""
    department: str = ""
    subjects: str = ""
    courses: str = ""
    research_papers: Optional[str] = None
    college_code: Optional[str] = None


class CourseAddRequest(BaseModel):
    course: str


class TeacherProfileResponse(BaseModel):
    user_id: str
    email: str
    display_name: str
    teacher_id: Optional[str] = None
    department: Optional[str] = None
    subjects: Optional[str] = None
    courses: Optional[str] = None
    research_papers: Optional[str] = None
    college_code: Optional[str] = None
    is_complete: bool


class TeacherProfileListResponse(BaseModel):
    teachers: list[TeacherProfileResponse]


class AdminProfileUpdate(BaseModel):
    staff_id: Optional[str] = None
    college_code: Optional[str] = None
    department: Optional[str] = None


class AdminProfileResponse(BaseModel):
    user_id: str
    email: str
    display_name: str
    staff_id: Optional[str] = None
    college_code: Optional[str] = None
    department: Optional[str] = None


class StudentCodeRequest(BaseModel):
    code: str


class StudentCodeResponse(BaseModel):
    code: Optional[str] = None
