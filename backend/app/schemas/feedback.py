"""Feedback submission schemas."""

from typing import Literal, Optional

from pydantic import BaseModel

TeachingQuality = Literal["Excellent", "Good", "Average", "Poor", "Very Poor"]
ExplanationClarity = Literal["Never", "Rarely", "Sometimes", "Often", "Always"]


class FeedbackCreate(BaseModel):
    teacher_name: str
    teacher_uid: Optional[str] = None
    rating: Optional[int] = None
    teaching_quality: Optional[TeachingQuality] = None
    effective_methods: bool = False
    approachable: bool = False
    explanation_clarity: Optional[ExplanationClarity] = None
    suggested_changes: Optional[str] = None


class FeedbackResponse(BaseModel):
    id: str
    student_id: str
    student_name: str
    teacher_name: str
    teacher_uid: Optional[str] = None
    rating: int
    teaching_quality: Optional[str] = None
    effective_methods: bool
    approachable: bool
    explanation_clarity: Optional[str] = None
    suggested_changes: Optional[str] = None
    college_code: Optional[str] = None
    submitted_at: str


class FeedbackListResponse(BaseModel):
    feedback: list[FeedbackResponse]
