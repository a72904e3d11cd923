"""Student entry schemas."""

from typing import Optional

from pydantic import BaseModel


class StudentEntryRequest(BaseModel):
    name: str = ""
    semester: Optional[int] = None  # 1-8
    college_code: str = ""


class StudentRegistrationResponse(BaseModel):
    id: str
    name: str
    semester: int
    college_code: str
    created_at: str


class StudentEntryResponse(BaseModel):
    registration: StudentRegistrationResponse
    message: str
    next_path: str = "/student/feedback"


class TeacherSummary(BaseModel):
    uid: Optional[str] = None
    display_name: str
    department: Optional[str] = None
    subjects: Optional[str] = None


class TeacherListResponse(BaseModel):
    teachers: list[TeacherSummary]
