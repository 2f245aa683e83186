"""Insight agent: short narrative summary of a teacher's feedback."""

from typing import Any, Dict, Optional, Sequence

from agents.base import BaseAgent
from models import AISummary, FeedbackRecord, Teacher
from utils.llm import LLMClient

EMPTY_RESPONSE_TEXT = "Analysis pending."
DELAYED_TEXT = "Data processing for insights is currently delayed."


class InsightAgent(BaseAgent):
    """Summarises the most recent comments about a teacher."""

    def __init__(self, llm_client: Optional[LLMClient] = None, max_comments: int = 10, **kwargs):
        super().__init__(llm_client=llm_client, **kwargs)
        self.max_comments = max_comments

    @property
    def agent_type(self) -> str:
        return "InsightAgent"

    async def execute(self, teacher: Teacher, feedback: Sequence[FeedbackRecord]) -> Dict[str, Any]:
        comments = ". ".join(f.comment for f in list(feedback)[:self.max_comments])
        response = await self.llm_call_with_template(
            "teacher_insight",
            {
                "teacher_name": teacher.name,
                "subject": teacher.subject,
                "comments": comments,
            },
        )
        text = response.content.strip()
        return {"summary": AISummary.from_text(text or EMPTY_RESPONSE_TEXT)}

    def fallback(self, teacher: Teacher, feedback: Sequence[FeedbackRecord]) -> Dict[str, Any]:
        return {"summary": AISummary.unavailable(DELAYED_TEXT)}

    async def summarize(self, teacher: Teacher, feedback: Sequence[FeedbackRecord]) -> AISummary:
        """Narrative for ``teacher``. Never raises; failures become ``unavailable``."""
        result = await self.execute_with_tracking(teacher=teacher, feedback=feedback)
        return result.data["summary"]
