"""Placeholder feedback for demoing the dashboards.

Only reachable through ``?demo=true`` with ``DEMO_DATA_ENABLED`` set; the
regular dashboard path never falls back to it.
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.models.feedback import FeedbackEntry
from app.services.dashboard_service import CLARITY_OPTIONS, TEACHING_QUALITY_OPTIONS

DEMO_TEACHERS = {
    "Dr. Priya Kumar": "Computer Science",
    "Prof. Alan Reyes": "Mathematics",
    "Dr. Mei Tanaka": "Physics",
    "Prof. Grace Okafor": "Computer Science",
}


def generate_feedback(
    count: int = 60,
    teacher_names: Optional[list[str]] = None,
    seed: Optional[int] = None,
    rating_max: int = 10,
) -> list[FeedbackEntry]:
    """Build transient (never persisted) feedback spread over the last six months."""
    rng = random.Random(seed)
    names = teacher_names or list(DEMO_TEACHERS)
    now = datetime.now(timezone.utc)
    entries = []
    for i in range(count):
        rating = rng.randint(max(1, rating_max // 2), rating_max)
        entries.append(FeedbackEntry(
            id=str(uuid.uuid4()),
            student_id=f"demo-student-{i}",
            student_name=f"Demo Student {i + 1}",
            teacher_name=rng.choice(names),
            rating=rating,
            teaching_quality=rng.choice(TEACHING_QUALITY_OPTIONS[:3]),
            effective_methods=rng.random() < 0.75,
            approachable=rng.random() < 0.8,
            explanation_clarity=rng.choice(CLARITY_OPTIONS[2:]),
            suggested_changes=None,
            submitted_at=now - timedelta(days=rng.randint(0, 180)),
        ))
    return entries
