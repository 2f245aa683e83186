"""Shared fixtures: record factories and a scripted LLM provider."""

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest

from agents.templates import set_template_manager
from models import FeedbackRecord, Teacher, TeacherCategory
from utils.llm import LLMClient, LLMProvider, LLMRequest


BASE_TIME = datetime(2024, 9, 1, 9, 0, tzinfo=timezone.utc)
_ids = count(1)


def make_feedback(
    teacher_id: str = "t1",
    rating: float = 5,
    sentiment: float = 0.0,
    flagged: bool = False,
    topics: Optional[Sequence[str]] = None,
    day: int = 0,
    comment: str = "Feedback",
) -> FeedbackRecord:
    return FeedbackRecord(
        id=f"f{next(_ids)}",
        teacher_id=teacher_id,
        student_hash="h",
        timestamp=BASE_TIME + timedelta(days=day),
        numeric_rating=rating,
        comment=comment,
        sentiment_score=sentiment,
        topics=list(topics or []),
        is_flagged=flagged,
    )


def make_teacher(
    teacher_id: str = "t1",
    name: str = "Test Teacher",
    category: TeacherCategory = TeacherCategory.SCHOOL,
) -> Teacher:
    return Teacher(id=teacher_id, name=name, subject="Maths", category=category, syllabus=["Unit 1"])


class ScriptedProvider(LLMProvider):
    """Replays queued responses; exceptions in the queue are raised."""

    def __init__(self, responses: Optional[List[Union[str, Exception]]] = None, default: Optional[str] = None):
        self.responses = list(responses or [])
        self.default = default
        self.requests: List[LLMRequest] = []

    async def send(self, request: LLMRequest) -> Tuple[str, Dict[str, int]]:
        self.requests.append(request)
        if self.responses:
            item = self.responses.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise AssertionError("ScriptedProvider ran out of responses")

        if isinstance(item, Exception):
            raise item
        return item, {}


def scripted_client(*responses: Union[str, Exception], default: Optional[str] = None) -> LLMClient:
    """LLM client over a ScriptedProvider with no retry delays."""
    provider = ScriptedProvider(list(responses), default=default)
    return LLMClient(provider=provider, default_retry_delay=0, rate_limit_delay=0)


@pytest.fixture(autouse=True)
def reset_template_manager():
    """Keep the global template cache from leaking between tests."""
    set_template_manager(None)
    yield
    set_template_manager(None)
