"""
Deterministic teacher quality scoring.

Aggregates a teacher's feedback into a composite quality score, a risk
level, ranked topics and a time-ordered sentiment trend. Pure computation:
no I/O, no LLM calls, no mutation of the inputs.
"""

import logging
import statistics
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models import (
    AISummary,
    FeedbackRecord,
    RiskLevel,
    SummaryState,
    TeacherStats,
    TopicStat,
    TrendPoint,
)
from models.stats import INSUFFICIENT_DATA_TEXT, PENDING_SUMMARY_TEXT


logger = logging.getLogger(__name__)


class ScoringConfig(BaseModel):
    """Weights and thresholds for quality scoring and risk classification."""

    model_config = ConfigDict(frozen=True)

    # Composite score: rating dominates, sentiment is a secondary signal
    rating_weight: float = 0.7
    sentiment_weight: float = 0.3

    # Risk tiers; all comparisons are strict
    high_flag_ratio: float = 0.3
    high_quality_floor: float = 4.0
    medium_flag_ratio: float = 0.1
    medium_quality_floor: float = 6.0

    top_topics_limit: int = Field(5, ge=0)


DEFAULT_SCORING = ScoringConfig()


def normalize_sentiment(avg_sentiment: float) -> float:
    """Map a sentiment in [-1, 1] linearly onto [0, 10]."""
    return (avg_sentiment + 1) * 5


def composite_quality_score(
    average_rating: float,
    avg_sentiment: float,
    config: ScoringConfig = DEFAULT_SCORING,
) -> float:
    return (
        average_rating * config.rating_weight
        + normalize_sentiment(avg_sentiment) * config.sentiment_weight
    )


def classify_risk(
    flag_ratio: float,
    quality_score: float,
    config: ScoringConfig = DEFAULT_SCORING,
) -> RiskLevel:
    """
    Classify risk from the share of flagged feedback and the quality score.

    High is checked first. Boundary values fall to the less severe tier.
    """
    if flag_ratio > config.high_flag_ratio or quality_score < config.high_quality_floor:
        return RiskLevel.HIGH
    if flag_ratio > config.medium_flag_ratio or quality_score < config.medium_quality_floor:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def aggregate_topics(feedback: Iterable[FeedbackRecord], limit: int = 5) -> List[TopicStat]:
    """
    Tally topics across feedback, ranked by mention count.

    Each topic accumulates the sentiment of the record that mentioned it.
    Ties keep the order in which topics were first seen.
    """
    tallies: Dict[str, Dict[str, float]] = {}
    for record in feedback:
        for topic in record.topics:
            tally = tallies.setdefault(topic, {"count": 0, "sentiment_sum": 0.0})
            tally["count"] += 1
            tally["sentiment_sum"] += record.sentiment_score

    topics = [
        TopicStat(
            topic=topic,
            count=int(tally["count"]),
            sentiment=tally["sentiment_sum"] / tally["count"],
        )
        for topic, tally in tallies.items()
    ]
    # sorted() is stable
    topics = sorted(topics, key=lambda t: t.count, reverse=True)
    return topics[:limit]


def build_sentiment_trend(feedback: Iterable[FeedbackRecord]) -> List[TrendPoint]:
    """One trend point per record, oldest first."""
    ordered = sorted(feedback, key=lambda f: f.timestamp)
    return [TrendPoint(date=f.timestamp, score=f.sentiment_score) for f in ordered]


def _carry_summary(existing_summary: Optional[Union[AISummary, str]]) -> AISummary:
    if existing_summary is None:
        return AISummary.pending()
    if isinstance(existing_summary, str):
        # Legacy sentinel strings are states, not narratives
        if existing_summary in ("", PENDING_SUMMARY_TEXT, INSUFFICIENT_DATA_TEXT):
            return AISummary.pending()
        return AISummary.from_text(existing_summary)
    # A "no data" verdict is stale once data exists
    if existing_summary.state == SummaryState.INSUFFICIENT:
        return AISummary.pending()
    return existing_summary


def compute_teacher_stats(
    teacher_id: str,
    all_feedback: Iterable[FeedbackRecord],
    existing_summary: Optional[Union[AISummary, str]] = None,
    config: Optional[ScoringConfig] = None,
) -> TeacherStats:
    """
    Compute quality statistics for one teacher.

    Args:
        teacher_id: Teacher to score. Not checked against any teacher list.
        all_feedback: Feedback for every teacher; filtered here.
        existing_summary: Narrative from a previous computation to carry over.
        config: Scoring weights and thresholds, defaults to DEFAULT_SCORING.

    Returns:
        Fully populated TeacherStats. Never raises for well-formed records.
    """
    config = config or DEFAULT_SCORING
    teacher_feedback = [f for f in all_feedback if f.teacher_id == teacher_id]

    if not teacher_feedback:
        return TeacherStats.empty(teacher_id)

    total = len(teacher_feedback)
    average_rating = statistics.mean(f.numeric_rating for f in teacher_feedback)
    avg_sentiment = statistics.mean(f.sentiment_score for f in teacher_feedback)
    quality_score = composite_quality_score(average_rating, avg_sentiment, config)

    flagged_count = sum(1 for f in teacher_feedback if f.is_flagged)
    flag_ratio = flagged_count / total
    risk_level = classify_risk(flag_ratio, quality_score, config)

    stats = TeacherStats(
        teacher_id=teacher_id,
        average_rating=average_rating,
        quality_score=quality_score,
        total_reviews=total,
        sentiment_trend=build_sentiment_trend(teacher_feedback),
        top_topics=aggregate_topics(teacher_feedback, config.top_topics_limit),
        risk_level=risk_level,
        ai_summary=_carry_summary(existing_summary),
    )

    logger.debug(
        "Computed teacher stats",
        extra={
            "teacher_id": teacher_id,
            "total_reviews": total,
            "quality_score": quality_score,
            "risk_level": risk_level.value,
        },
    )
    return stats
