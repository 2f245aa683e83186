"""
Dataset agent: synthesises the initial teachers and feedback.

The model is asked for a handful of School and University teachers with
feedback; those are merged with the built-in Professional catalogue. Any
failure falls back to the full built-in dataset.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agents.base import BaseAgent
from agents.catalogue import FALLBACK_TEACHERS, avatar_for, fallback_feedback, professional_teachers
from models import FeedbackRecord, Teacher, TeacherCategory
from utils.llm import LLMClient


logger = logging.getLogger(__name__)

Dataset = Tuple[List[Teacher], List[FeedbackRecord]]


class _ModelOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class GeneratedTeacher(_ModelOutput):
    id: str
    name: str
    subject: str
    category: str
    syllabus: List[str] = Field(default_factory=list)


class GeneratedFeedback(_ModelOutput):
    teacher_id: str
    numeric_rating: float
    comment: str
    sentiment_score: float
    topics: List[str] = Field(default_factory=list)
    is_flagged: bool = False
    timestamp: Optional[str] = None


class GeneratedDataset(_ModelOutput):
    teachers: List[GeneratedTeacher]
    feedback: List[GeneratedFeedback]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _parse_timestamp(raw: Optional[str], default: datetime) -> datetime:
    if not raw:
        return default
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return default


def fallback_dataset() -> Dataset:
    return list(FALLBACK_TEACHERS), fallback_feedback()


class DatasetAgent(BaseAgent):
    """Generates the starting dataset for the dashboard."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        school_count: int = 2,
        university_count: int = 2,
        feedback_per_teacher: int = 3,
        **kwargs
    ):
        super().__init__(llm_client=llm_client, **kwargs)
        self.school_count = school_count
        self.university_count = university_count
        self.feedback_per_teacher = feedback_per_teacher

    @property
    def agent_type(self) -> str:
        return "DatasetAgent"

    async def execute(self) -> Dict[str, Any]:
        generated = await self.llm_call_with_template(
            "dataset_generation",
            {
                "school_count": self.school_count,
                "university_count": self.university_count,
                "feedback_per_teacher": self.feedback_per_teacher,
            },
            response_format=GeneratedDataset,
        )
        teachers, feedback = self._to_records(generated)
        return {"teachers": teachers, "feedback": feedback}

    def fallback(self) -> Dict[str, Any]:
        teachers, feedback = fallback_dataset()
        return {"teachers": teachers, "feedback": feedback}

    def _to_records(self, generated: GeneratedDataset) -> Dataset:
        """Turn model output into validated records merged with the catalogue."""
        now = datetime.now(timezone.utc)
        catalogue = professional_teachers()
        catalogue_ids = {t.id for t in catalogue}
        taken_ids = set(catalogue_ids)

        teachers: List[Teacher] = []
        for item in generated.teachers:
            try:
                category = TeacherCategory(item.category)
            except ValueError:
                logger.warning(f"Skipping generated teacher {item.id!r} with category {item.category!r}")
                continue
            if item.id in taken_ids:
                logger.warning(f"Skipping generated teacher with duplicate id {item.id!r}")
                continue
            taken_ids.add(item.id)
            teachers.append(Teacher(
                id=item.id,
                name=item.name,
                subject=item.subject,
                category=category,
                syllabus=item.syllabus,
                avatar_url=avatar_for(item.name),
            ))

        generated_ids = {t.id for t in teachers}
        feedback: List[FeedbackRecord] = []
        for item in generated.feedback:
            if item.teacher_id not in generated_ids:
                logger.warning(f"Dropping generated feedback for unknown teacher {item.teacher_id!r}")
                continue
            feedback.append(FeedbackRecord(
                id=uuid.uuid4().hex[:9],
                teacher_id=item.teacher_id,
                student_hash=f"anon_{uuid.uuid4().hex[:5]}",
                timestamp=_parse_timestamp(item.timestamp, now),
                numeric_rating=_clamp(item.numeric_rating, 1, 10),
                comment=item.comment,
                sentiment_score=_clamp(item.sentiment_score, -1.0, 1.0),
                topics=item.topics,
                is_flagged=item.is_flagged,
            ))

        samples = [f for f in fallback_feedback(now) if f.teacher_id in catalogue_ids]
        return teachers + catalogue, feedback + samples

    async def generate_dataset(self) -> Dataset:
        """Teachers and feedback for the dashboard. Never raises."""
        result = await self.execute_with_tracking()
        teachers, feedback = result.data["teachers"], result.data["feedback"]
        logger.info(
            "Dataset ready",
            extra={"teachers": len(teachers), "feedback": len(feedback), "generated": result.success},
        )
        return teachers, feedback
