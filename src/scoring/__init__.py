"""
Teacher quality scoring.

Main components:
- compute_teacher_stats: per-teacher aggregation into TeacherStats
- ScoringConfig: composite score weights and risk thresholds
"""

from .engine import (
    DEFAULT_SCORING,
    ScoringConfig,
    aggregate_topics,
    build_sentiment_trend,
    classify_risk,
    composite_quality_score,
    compute_teacher_stats,
    normalize_sentiment,
)

__all__ = [
    'compute_teacher_stats',
    'ScoringConfig',
    'DEFAULT_SCORING',
    'classify_risk',
    'composite_quality_score',
    'normalize_sentiment',
    'aggregate_topics',
    'build_sentiment_trend',
]
