"""
Derived per-teacher statistics.

A ``TeacherStats`` value is always recomputed from the feedback collection;
the only piece of state carried between recomputations is the narrative
``ai_summary``, which is modelled as an explicit sum type instead of
sentinel strings.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .feedback import RecordModel


PENDING_SUMMARY_TEXT = "Pending AI Analysis..."
INSUFFICIENT_DATA_TEXT = "Insufficient data for analysis."


class RiskLevel(str, Enum):
    """Triage label for whether a teacher's feedback warrants review."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SummaryState(str, Enum):
    """Lifecycle of a narrative summary."""
    PENDING = "pending"
    TEXT = "text"
    UNAVAILABLE = "unavailable"
    INSUFFICIENT = "insufficient"


class AISummary(RecordModel):
    """Narrative summary for a teacher, or the reason there isn't one."""
    state: SummaryState
    message: Optional[str] = None

    @classmethod
    def pending(cls) -> "AISummary":
        return cls(state=SummaryState.PENDING)

    @classmethod
    def insufficient(cls) -> "AISummary":
        return cls(state=SummaryState.INSUFFICIENT)

    @classmethod
    def from_text(cls, text: str) -> "AISummary":
        return cls(state=SummaryState.TEXT, message=text)

    @classmethod
    def unavailable(cls, reason: str) -> "AISummary":
        return cls(state=SummaryState.UNAVAILABLE, message=reason)

    @property
    def is_pending(self) -> bool:
        return self.state == SummaryState.PENDING

    @property
    def has_text(self) -> bool:
        return self.state == SummaryState.TEXT

    def display(self) -> str:
        """Text shown to users for this summary state."""
        if self.state == SummaryState.PENDING:
            return PENDING_SUMMARY_TEXT
        if self.state == SummaryState.INSUFFICIENT:
            return INSUFFICIENT_DATA_TEXT
        return self.message or ""


class TrendPoint(RecordModel):
    """Sentiment of a single feedback record at its timestamp."""
    date: datetime
    score: float


class TopicStat(RecordModel):
    """How often a topic was mentioned and the mean sentiment around it."""
    topic: str
    count: int
    sentiment: float


class TeacherStats(RecordModel):
    """Aggregate quality figures for one teacher."""
    teacher_id: str
    average_rating: float = 0.0
    quality_score: float = 0.0
    total_reviews: int = 0
    sentiment_trend: List[TrendPoint] = Field(default_factory=list)
    top_topics: List[TopicStat] = Field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW
    ai_summary: AISummary = Field(default_factory=AISummary.pending)

    @classmethod
    def empty(cls, teacher_id: str) -> "TeacherStats":
        """Stats for a teacher with no feedback at all."""
        return cls(
            teacher_id=teacher_id,
            risk_level=RiskLevel.LOW,
            ai_summary=AISummary.insufficient(),
        )

    def with_summary(self, summary: AISummary) -> "TeacherStats":
        """Copy of these stats with only the narrative replaced."""
        return self.model_copy(update={"ai_summary": summary})
