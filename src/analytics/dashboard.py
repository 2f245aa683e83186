"""
Read-side aggregates for the dashboard view.

Everything here is derived from the ``stats`` and ``teachers`` collections
and is safe to recompute on every render.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from models import RiskLevel, Teacher, TeacherCategory, TeacherStats


ALL_CATEGORIES = "All"


@dataclass(frozen=True)
class SystemHealth:
    """Headline figures across every teacher."""
    average_quality: float = 0.0
    total_reviews: int = 0
    high_risk_count: int = 0


@dataclass(frozen=True)
class RankedTeacher:
    """One row of the quality ranking chart."""
    teacher_id: str
    name: str
    score: float
    rating: float
    risk_level: RiskLevel


def system_health(stats: Sequence[TeacherStats]) -> SystemHealth:
    if not stats:
        return SystemHealth()
    return SystemHealth(
        average_quality=sum(s.quality_score for s in stats) / len(stats),
        total_reviews=sum(s.total_reviews for s in stats),
        high_risk_count=sum(1 for s in stats if s.risk_level == RiskLevel.HIGH),
    )


def filter_by_category(
    stats: Sequence[TeacherStats],
    teachers: Sequence[Teacher],
    category: Optional[Union[TeacherCategory, str]] = None,
) -> List[TeacherStats]:
    """Stats for teachers in ``category``; ``None`` or ``"All"`` keeps everything."""
    if category is None or category == ALL_CATEGORIES:
        return list(stats)
    wanted = TeacherCategory(category)
    by_id: Dict[str, Teacher] = {t.id: t for t in teachers}
    return [
        s for s in stats
        if s.teacher_id in by_id and by_id[s.teacher_id].category == wanted
    ]


def rank_by_quality(stats: Sequence[TeacherStats], teachers: Sequence[Teacher]) -> List[RankedTeacher]:
    """Teachers ordered best first, figures rounded for display."""
    names = {t.id: t.name for t in teachers}
    rows = [
        RankedTeacher(
            teacher_id=s.teacher_id,
            name=names.get(s.teacher_id, "Unknown"),
            score=round(s.quality_score, 2),
            rating=round(s.average_rating, 2),
            risk_level=s.risk_level,
        )
        for s in stats
    ]
    return sorted(rows, key=lambda r: r.score, reverse=True)


def teachers_at_risk(stats: Sequence[TeacherStats], level: RiskLevel = RiskLevel.HIGH) -> List[TeacherStats]:
    return [s for s in stats if s.risk_level == level]
