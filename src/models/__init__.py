"""
Core data models for teacher quality analytics.

This package contains:
- Input records (teachers and student feedback)
- Derived per-teacher statistics and the narrative summary type
"""

from .feedback import FeedbackRecord, RecordModel, Teacher, TeacherCategory
from .stats import (
    INSUFFICIENT_DATA_TEXT,
    PENDING_SUMMARY_TEXT,
    AISummary,
    RiskLevel,
    SummaryState,
    TeacherStats,
    TopicStat,
    TrendPoint,
)

__all__ = [
    # Input records
    "Teacher",
    "TeacherCategory",
    "FeedbackRecord",
    "RecordModel",

    # Derived stats
    "TeacherStats",
    "TrendPoint",
    "TopicStat",
    "RiskLevel",
    "AISummary",
    "SummaryState",
    "PENDING_SUMMARY_TEXT",
    "INSUFFICIENT_DATA_TEXT",
]
