"""Application state: actions, reducer and the single-writer store."""

from .actions import AnyAction, DatasetLoaded, FeedbackSubmitted, SummaryResolved
from .store import AppState, StateStore, reduce

__all__ = [
    "AppState",
    "StateStore",
    "reduce",
    "AnyAction",
    "DatasetLoaded",
    "FeedbackSubmitted",
    "SummaryResolved",
]
