"""Feedback analysis agent: sentiment, topics and intervention flag for a comment."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agents.base import BaseAgent
from utils.llm import LLMClient


class FeedbackAnalysis(BaseModel):
    """ML-derived fields attached to a feedback record."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    sentiment_score: float
    topics: List[str] = Field(default_factory=list)
    is_flagged: bool = False

    def clamped(self) -> "FeedbackAnalysis":
        """Copy with the sentiment forced into [-1, 1] and blank topics removed."""
        return FeedbackAnalysis(
            sentiment_score=max(-1.0, min(1.0, self.sentiment_score)),
            topics=[t.strip() for t in self.topics if t and t.strip()],
            is_flagged=self.is_flagged,
        )


def fallback_analysis(rating: float) -> FeedbackAnalysis:
    """Rating-only estimate used when the model cannot be reached."""
    return FeedbackAnalysis(
        sentiment_score=0.5 if rating > 5 else -0.5,
        topics=["General"],
        is_flagged=rating < 3,
    )


class FeedbackAnalysisAgent(BaseAgent):
    """Scores a single student comment."""

    def __init__(self, llm_client: Optional[LLMClient] = None, **kwargs):
        super().__init__(llm_client=llm_client, **kwargs)

    @property
    def agent_type(self) -> str:
        return "FeedbackAnalysisAgent"

    async def execute(self, comment: str, rating: float) -> Dict[str, Any]:
        analysis = await self.llm_call_with_template(
            "feedback_analysis",
            {"comment": comment, "rating": rating},
            response_format=FeedbackAnalysis,
            temperature=0.2,
        )
        return {"analysis": analysis.clamped()}

    def fallback(self, comment: str, rating: float) -> Dict[str, Any]:
        return {"analysis": fallback_analysis(rating)}

    async def analyze(self, comment: str, rating: float) -> FeedbackAnalysis:
        """Analysis for ``comment``; falls back to a rating-based estimate."""
        result = await self.execute_with_tracking(comment=comment, rating=rating)
        return result.data["analysis"]
