"""
Dashboard service wiring the LLM collaborators to the state store.

Stats are recomputed synchronously through the store's reducer; narrative
summaries are requested in the background and posted back through the same
``dispatch`` channel when they resolve, so the store stays single-writer.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Set

from pydantic import BaseModel

from agents import AgentConfig, DatasetAgent, FeedbackAnalysisAgent, InsightAgent
from agents.templates import FileTemplateLoader, TemplateManager
from eduinsight.config import Settings
from models import FeedbackRecord, Teacher, TeacherStats
from state import AppState, DatasetLoaded, FeedbackSubmitted, StateStore, SummaryResolved
from utils.llm import LLMClient, create_llm_client


logger = logging.getLogger(__name__)


class OrchestrationConfig(BaseModel):
    """Concurrency limits for background work."""
    max_concurrent_summaries: int = 5


class DashboardService:
    """
    Owns the in-memory dashboard state and the collaborators that feed it.

    Responsibilities:
    - Load the initial dataset and compute stats for every teacher
    - Analyse and record new feedback, recomputing only that teacher's stats
    - Request narrative summaries without blocking either of the above
    """

    def __init__(
        self,
        store: Optional[StateStore] = None,
        dataset_agent: Optional[DatasetAgent] = None,
        feedback_agent: Optional[FeedbackAnalysisAgent] = None,
        insight_agent: Optional[InsightAgent] = None,
        config: Optional[OrchestrationConfig] = None,
    ):
        self.store = store or StateStore()
        self.dataset_agent = dataset_agent or DatasetAgent()
        self.feedback_agent = feedback_agent or FeedbackAnalysisAgent()
        self.insight_agent = insight_agent or InsightAgent()
        self.config = config or OrchestrationConfig()

        self._summary_semaphore = asyncio.Semaphore(self.config.max_concurrent_summaries)
        self._summary_tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> AppState:
        return self.store.state

    async def initialize(self) -> AppState:
        """Load the dataset, compute stats, and start summary requests."""
        teachers, feedback = await self.dataset_agent.generate_dataset()
        state = await self.store.dispatch(DatasetLoaded(teachers=teachers, feedback=feedback))

        # Teachers without feedback keep the insufficient-data summary
        for teacher in state.teachers:
            feedback = state.feedback_for(teacher.id)
            if feedback:
                self._request_summary(teacher, feedback)

        logger.info(
            "Dashboard initialized",
            extra={"teachers": len(state.teachers), "feedback": len(state.feedback)},
        )
        return state

    async def submit_feedback(self, teacher_id: str, rating: float, comment: str) -> TeacherStats:
        """
        Analyse and record one piece of feedback.

        Args:
            teacher_id: Teacher the feedback is about; must be known.
            rating: Student rating from 1 to 10.
            comment: Free text comment; must not be blank.

        Returns:
            The teacher's recomputed stats.

        Raises:
            ValueError: Unknown teacher, blank comment or rating out of range.
        """
        teacher = self.state.find_teacher(teacher_id)
        if teacher is None:
            raise ValueError(f"Unknown teacher: {teacher_id}")
        if not comment or not comment.strip():
            raise ValueError("Feedback comment must not be empty")
        if not 1 <= rating <= 10:
            raise ValueError("Rating must be between 1 and 10")

        analysis = await self.feedback_agent.analyze(comment, rating)
        record = FeedbackRecord(
            id=uuid.uuid4().hex[:9],
            teacher_id=teacher_id,
            student_hash=f"anon_{uuid.uuid4().hex[:5]}",
            timestamp=datetime.now(timezone.utc),
            numeric_rating=rating,
            comment=comment,
            sentiment_score=analysis.sentiment_score,
            topics=analysis.topics,
            is_flagged=analysis.is_flagged,
        )

        state = await self.store.dispatch(FeedbackSubmitted(record=record))
        self._request_summary(teacher, state.feedback_for(teacher_id))
        return state.find_stats(teacher_id)

    def _request_summary(self, teacher: Teacher, feedback: List[FeedbackRecord]) -> None:
        task = asyncio.create_task(self._summarize(teacher, feedback))
        self._summary_tasks.add(task)
        task.add_done_callback(self._summary_tasks.discard)

    async def _summarize(self, teacher: Teacher, feedback: List[FeedbackRecord]) -> None:
        async with self._summary_semaphore:
            summary = await self.insight_agent.summarize(teacher, feedback)
        await self.store.dispatch(SummaryResolved(teacher_id=teacher.id, summary=summary))

    async def wait_for_summaries(self) -> None:
        """Block until every in-flight summary request has been merged."""
        while self._summary_tasks:
            await asyncio.gather(*list(self._summary_tasks))

    @property
    def pending_summaries(self) -> int:
        return len(self._summary_tasks)


def build_llm_client(settings: Settings) -> Optional[LLMClient]:
    """LLM client for the configured provider, or None when no key is set."""
    llm = settings.llm
    if not llm.has_api_key:
        return None

    provider = llm.provider or ("gemini" if llm.gemini_api_key else "claude")
    if provider == "gemini":
        return create_llm_client(
            "gemini",
            api_key=llm.gemini_api_key,
            model=llm.gemini_model,
            max_retries=llm.max_retries,
            retry_delay=llm.retry_delay,
        )
    return create_llm_client(
        "claude",
        api_key=llm.anthropic_api_key,
        model=llm.claude_model,
        max_retries=llm.max_retries,
        retry_delay=llm.retry_delay,
        timeout=llm.request_timeout,
    )


def create_dashboard_service(settings: Settings, offline: bool = False) -> DashboardService:
    """Service built from settings; ``offline`` skips the LLM entirely."""
    llm_client = None if offline else build_llm_client(settings)
    if llm_client is None:
        logger.warning("No LLM configured, collaborators will use fallback data")

    template_manager = None
    if settings.app.prompt_templates_dir:
        template_manager = TemplateManager(FileTemplateLoader(settings.app.prompt_templates_dir))

    agent_config = AgentConfig(llm_retry_count=settings.llm.max_retries)
    agent_kwargs = {"llm_client": llm_client, "config": agent_config, "template_manager": template_manager}

    return DashboardService(
        store=StateStore(AppState(scoring=settings.scoring.to_scoring_config())),
        dataset_agent=DatasetAgent(**agent_kwargs),
        feedback_agent=FeedbackAnalysisAgent(**agent_kwargs),
        insight_agent=InsightAgent(**agent_kwargs),
        config=OrchestrationConfig(max_concurrent_summaries=settings.llm.max_concurrent_requests),
    )
