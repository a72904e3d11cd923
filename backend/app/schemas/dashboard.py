"""Dashboard schemas."""

from typing import Optional

from pydantic import BaseModel


class TrendPoint(BaseModel):
    month: str  # YYYY-MM
    average_rating: float
    count: int


class RecentFeedback(BaseModel):
    teacher_name: str
    rating: int
    teaching_quality: Optional[str] = None
    suggested_changes: Optional[str] = None
    submitted_at: str


class FeedbackSummary(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: dict[str, int]  # "5 Stars" .. "1 Star"
    teaching_quality_counts: dict[str, int]
    explanation_clarity_counts: dict[str, int]
    effective_methods_pct: float
    approachable_pct: float
    monthly_trend: list[TrendPoint]


class TeacherDashboardResponse(BaseModel):
    teacher_name: str
    summary: FeedbackSummary
    recent_feedback: list[RecentFeedback]
    demo: bool = False


class TeacherRanking(BaseModel):
    teacher_name: str
    average_rating: float
    count: int


class AdminDashboardResponse(BaseModel):
    total_students: int
    faculty_members: int
    summary: FeedbackSummary
    department_averages: dict[str, float]
    top_teachers: list[TeacherRanking]
    demo: bool = False
