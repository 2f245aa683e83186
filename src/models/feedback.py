"""
Input records for teacher quality analytics.

Teachers and feedback arrive either from the dataset generator or from a
student submission. ML-derived fields on a feedback record (sentiment,
topics, flag) are filled in before the record is built, so these models
reject anything out of range rather than repairing it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TeacherCategory(str, Enum):
    """Level a teacher works at, used for dashboard filtering."""
    SCHOOL = "School"
    UNIVERSITY = "University"
    PROFESSIONAL = "Professional"


class RecordModel(BaseModel):
    """Immutable model that serialises with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Teacher(RecordModel):
    """A teacher profile. Scoring only ever reads ``id``."""
    id: str
    name: str
    subject: str
    category: TeacherCategory
    syllabus: List[str] = Field(default_factory=list)
    avatar_url: str = ""


class FeedbackRecord(RecordModel):
    """One piece of student feedback about a teacher."""
    id: str
    teacher_id: str
    student_hash: str = ""
    timestamp: datetime
    numeric_rating: float = Field(ge=1, le=10)
    comment: str = ""

    # Derived ML features
    sentiment_score: float = Field(ge=-1.0, le=1.0)
    topics: List[str] = Field(default_factory=list)
    is_flagged: bool = False

    @field_validator("timestamp")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC so records always sort together."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
