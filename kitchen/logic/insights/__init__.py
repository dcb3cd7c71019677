"""Insight generation: external analysis call and the workflow state machine around it."""
from kitchen.logic.insights.errors import (
    InsightError, InsightInProgressError, InsightUnavailableError, InsightResponseError
)
from kitchen.logic.insights.workflow import InsightWorkflow, WorkflowState

__all__ = [
    "InsightError", "InsightInProgressError", "InsightUnavailableError", "InsightResponseError",
    "InsightWorkflow", "WorkflowState",
]
