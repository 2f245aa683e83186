"""LLM collaborators and their shared base class"""

from .base import AgentConfig, AgentResult, BaseAgent
from .dataset import DatasetAgent
from .feedback import FeedbackAnalysis, FeedbackAnalysisAgent
from .insight import InsightAgent

__all__ = [
    "BaseAgent",
    "AgentConfig",
    "AgentResult",
    "DatasetAgent",
    "FeedbackAnalysis",
    "FeedbackAnalysisAgent",
    "InsightAgent",
]
