"""Orchestration of the dashboard state and its LLM collaborators."""

from .dashboard import (
    DashboardService,
    OrchestrationConfig,
    build_llm_client,
    create_dashboard_service,
)

__all__ = [
    "DashboardService",
    "OrchestrationConfig",
    "build_llm_client",
    "create_dashboard_service",
]
