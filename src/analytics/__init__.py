"""Dashboard aggregates over computed teacher stats."""

from .dashboard import (
    ALL_CATEGORIES,
    RankedTeacher,
    SystemHealth,
    filter_by_category,
    rank_by_quality,
    system_health,
    teachers_at_risk,
)

__all__ = [
    "SystemHealth",
    "RankedTeacher",
    "ALL_CATEGORIES",
    "system_health",
    "filter_by_category",
    "rank_by_quality",
    "teachers_at_risk",
]
