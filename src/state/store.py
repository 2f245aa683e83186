"""
In-memory application state and its single update channel.

All changes to teachers, feedback and stats go through ``reduce``; the
``StateStore`` serialises dispatches so a recomputation is never torn by a
concurrent append.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from models import FeedbackRecord, Teacher, TeacherStats
from scoring import DEFAULT_SCORING, ScoringConfig, compute_teacher_stats

from .actions import AnyAction, DatasetLoaded, FeedbackSubmitted, SummaryResolved


logger = logging.getLogger(__name__)

Listener = Callable[["AppState", AnyAction], None]


class AppState(BaseModel):
    """Snapshot of everything the dashboard knows."""

    model_config = ConfigDict(frozen=True)

    teachers: Tuple[Teacher, ...] = ()
    feedback: Tuple[FeedbackRecord, ...] = ()
    stats: Tuple[TeacherStats, ...] = ()
    scoring: ScoringConfig = Field(default_factory=lambda: DEFAULT_SCORING)

    def find_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return next((t for t in self.teachers if t.id == teacher_id), None)

    def find_stats(self, teacher_id: str) -> Optional[TeacherStats]:
        return next((s for s in self.stats if s.teacher_id == teacher_id), None)

    def feedback_for(self, teacher_id: str) -> List[FeedbackRecord]:
        return [f for f in self.feedback if f.teacher_id == teacher_id]


def _replace_stats(stats: Tuple[TeacherStats, ...], updated: TeacherStats) -> Tuple[TeacherStats, ...]:
    """Swap in the entry for one teacher, appending it if there was none."""
    if any(s.teacher_id == updated.teacher_id for s in stats):
        return tuple(updated if s.teacher_id == updated.teacher_id else s for s in stats)
    return stats + (updated,)


def reduce(state: AppState, action: AnyAction) -> AppState:
    """Apply one action and return the next state. Never mutates ``state``."""
    if isinstance(action, DatasetLoaded):
        feedback = tuple(action.feedback)
        stats = tuple(
            compute_teacher_stats(t.id, feedback, config=state.scoring)
            for t in action.teachers
        )
        return state.model_copy(update={
            "teachers": tuple(action.teachers),
            "feedback": feedback,
            "stats": stats,
        })

    if isinstance(action, FeedbackSubmitted):
        teacher_id = action.record.teacher_id
        feedback = state.feedback + (action.record,)
        previous = state.find_stats(teacher_id)
        updated = compute_teacher_stats(
            teacher_id,
            feedback,
            existing_summary=previous.ai_summary if previous else None,
            config=state.scoring,
        )
        return state.model_copy(update={
            "feedback": feedback,
            "stats": _replace_stats(state.stats, updated),
        })

    if isinstance(action, SummaryResolved):
        current = state.find_stats(action.teacher_id)
        if current is None:
            logger.debug(f"Dropping summary for unknown teacher {action.teacher_id}")
            return state
        merged = current.with_summary(action.summary)
        return state.model_copy(update={"stats": _replace_stats(state.stats, merged)})

    raise TypeError(f"Unsupported action: {type(action).__name__}")


class StateStore:
    """Holds the current AppState and applies actions one at a time."""

    def __init__(self, initial: Optional[AppState] = None):
        self._state = initial or AppState()
        self._lock = asyncio.Lock()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def dispatch(self, action: AnyAction) -> AppState:
        """Apply ``action`` under the store lock and notify listeners."""
        async with self._lock:
            self._state = reduce(self._state, action)
            new_state = self._state

        logger.info(
            f"Applied {type(action).__name__}",
            extra={
                "teachers": len(new_state.teachers),
                "feedback": len(new_state.feedback),
            },
        )
        for listener in list(self._listeners):
            listener(new_state, action)
        return new_state
