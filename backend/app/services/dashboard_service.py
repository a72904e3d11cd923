"""Dashboard aggregation.

Collections are fetched whole and every aggregate is computed in a single
pass over the entries; there is no pagination and no server-side
aggregation. Empty collections produce zeros.
"""

import heapq
import math
from collections import defaultdict
from datetime import datetime
from typing import Callable, Iterable, Optional

from app.models.feedback import FeedbackEntry

STAR_LABELS = ["5 Stars", "4 Stars", "3 Stars", "2 Stars", "1 Star"]
TEACHING_QUALITY_OPTIONS = ["Excellent", "Good", "Average", "Poor", "Very Poor"]
CLARITY_OPTIONS = ["Never", "Rarely", "Sometimes", "Often", "Always"]


def stars_for(rating: int, rating_max: int = 10) -> int:
    """Map a rating onto the 1-5 star scale used by the distribution chart."""
    return min(5, max(1, math.ceil(rating * 5 / rating_max)))


def _star_label(stars: int) -> str:
    return "1 Star" if stars == 1 else f"{stars} Stars"


def _pct(part: int, total: int) -> float:
    return round(part * 100 / total, 1) if total else 0.0


def _averages(sums: dict) -> dict[str, tuple[float, int]]:
    return {g: (round(s / c, 2), c) for g, (s, c) in sums.items()}


def aggregate(
    entries: Iterable[FeedbackEntry],
    rating_max: int = 10,
    department_of: Optional[Callable[[FeedbackEntry], Optional[str]]] = None,
    recent_limit: int = 5,
    top_limit: int = 5,
) -> dict:
    """Summarize feedback entries in one pass.

    Returns ``summary``, ``recent_feedback``, ``top_teachers`` and
    ``department_averages``. Entries for which ``department_of`` returns None
    are left out of the department averages only.
    """
    total = 0
    rating_sum = 0
    effective = 0
    approachable = 0
    distribution = {label: 0 for label in STAR_LABELS}
    quality = {option: 0 for option in TEACHING_QUALITY_OPTIONS}
    clarity = {option: 0 for option in CLARITY_OPTIONS}
    months: dict[str, list[int]] = defaultdict(lambda: [0, 0])  # month -> [sum, count]
    teachers: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    departments: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    latest: list = []  # min-heap of (submitted_at, seq, entry)

    for seq, e in enumerate(entries):
        total += 1
        rating_sum += e.rating
        distribution[_star_label(stars_for(e.rating, rating_max))] += 1
        if e.teaching_quality in quality:
            quality[e.teaching_quality] += 1
        if e.explanation_clarity in clarity:
            clarity[e.explanation_clarity] += 1
        effective += 1 if e.effective_methods else 0
        approachable += 1 if e.approachable else 0
        if e.submitted_at is not None:
            bucket = months[e.submitted_at.strftime("%Y-%m")]
            bucket[0] += e.rating
            bucket[1] += 1

        teachers[e.teacher_name][0] += e.rating
        teachers[e.teacher_name][1] += 1
        if department_of is not None:
            dept = department_of(e)
            if dept is not None:
                departments[dept][0] += e.rating
                departments[dept][1] += 1

        if recent_limit > 0:
            item = (e.submitted_at or datetime.min, seq, e)
            if len(latest) < recent_limit:
                heapq.heappush(latest, item)
            elif item[:2] > latest[0][:2]:
                heapq.heapreplace(latest, item)

    ranked = sorted(_averages(teachers).items(), key=lambda item: (-item[1][0], -item[1][1], item[0]))
    newest_first = [e for _, _, e in sorted(latest, key=lambda item: item[:2], reverse=True)]

    return {
        "summary": {
            "total_reviews": total,
            "average_rating": round(rating_sum / total, 2) if total else 0.0,
            "rating_distribution": distribution,
            "teaching_quality_counts": quality,
            "explanation_clarity_counts": clarity,
            "effective_methods_pct": _pct(effective, total),
            "approachable_pct": _pct(approachable, total),
            "monthly_trend": [
                {"month": month, "average_rating": round(s / c, 2), "count": c}
                for month, (s, c) in sorted(months.items())
            ],
        },
        "recent_feedback": [
            {
                "teacher_name": e.teacher_name,
                "rating": e.rating,
                "teaching_quality": e.teaching_quality,
                "suggested_changes": e.suggested_changes,
                "submitted_at": e.submitted_at.isoformat() if e.submitted_at else "",
            }
            for e in newest_first
        ],
        "top_teachers": [
            {"teacher_name": name, "average_rating": avg, "count": count}
            for name, (avg, count) in ranked[:top_limit]
        ],
        "department_averages": {dept: avg for dept, (avg, _count) in _averages(departments).items()},
    }
