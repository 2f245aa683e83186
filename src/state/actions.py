"""Actions accepted by the application state reducer."""

from typing import List, Union

from pydantic import BaseModel, ConfigDict

from models import AISummary, FeedbackRecord, Teacher


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class DatasetLoaded(Action):
    """Initial teachers and feedback arrived from the dataset source."""
    teachers: List[Teacher]
    feedback: List[FeedbackRecord]


class FeedbackSubmitted(Action):
    """A fully analysed feedback record was submitted."""
    record: FeedbackRecord


class SummaryResolved(Action):
    """A narrative summary request for a teacher finished."""
    teacher_id: str
    summary: AISummary


AnyAction = Union[DatasetLoaded, FeedbackSubmitted, SummaryResolved]
