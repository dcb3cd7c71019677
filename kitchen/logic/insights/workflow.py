"""Insight workflow: the idle -> loading -> ready lifecycle around one analysis call.

Rules:
  - generate() with no orders does nothing and never calls the analyzer.
  - Only one analysis runs at a time; a second generate() while loading raises
    InsightInProgressError instead of queueing or superseding the first.
  - The analyzer works on a copy of the orders taken when generate() starts.
  - Whatever the analyzer does, the workflow never stays in LOADING: a failure
    returns it to IDLE, records last_error and re-raises.
  - clear() always returns to IDLE. A call still running at that point is not
    cancelled, but its outcome no longer changes the workflow state.
"""
import copy
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

from kitchen.domain.InsightReport import InsightReport
from kitchen.events.Event_Bus import EventBus
from kitchen.events.event_helpers import publish_insight_failed, publish_insight_ready
from kitchen.logic.insights.errors import InsightInProgressError

logger = logging.getLogger(__name__)


class InsightAnalyzer(Protocol):
    async def analyze(self, orders: List[Dict[str, Any]], user_name: str) -> InsightReport:
        ...


class WorkflowState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class InsightWorkflow:
    def __init__(self, analyzer: InsightAnalyzer, bus: Optional[EventBus] = None):
        self.analyzer = analyzer
        self.bus = bus
        self.state = WorkflowState.IDLE
        self.report: Optional[InsightReport] = None
        self.last_error: Optional[BaseException] = None
        self._run = 0

    @property
    def is_loading(self) -> bool:
        return self.state is WorkflowState.LOADING

    async def generate(self, orders: Sequence[Dict[str, Any]], user_name: str) -> Optional[InsightReport]:
        if not orders:
            return None
        if self.is_loading:
            raise InsightInProgressError("An analysis is already running")

        snapshot = copy.deepcopy(list(orders))
        self.report = None
        self.last_error = None
        self.state = WorkflowState.LOADING
        self._run += 1
        run = self._run
        try:
            report = await self.analyzer.analyze(snapshot, user_name)
        except BaseException as e:
            if run == self._run:
                self.state = WorkflowState.IDLE
                self.last_error = e
            if isinstance(e, Exception):
                logger.exception(f"Insight generation failed for {user_name}")
                publish_insight_failed(user_name, str(e) or type(e).__name__, bus=self.bus)
            raise

        if run != self._run:
            logger.info(f"Discarding insight report for {user_name}: cleared while loading")
            return report
        self.report = report
        self.state = WorkflowState.READY
        logger.info(f"Insight report ready for {user_name} ({len(snapshot)} orders)")
        publish_insight_ready(user_name, len(snapshot), bus=self.bus)
        return report

    def clear(self) -> None:
        """Discard the current report and return to IDLE."""
        self.report = None
        self.last_error = None
        self.state = WorkflowState.IDLE
        self._run += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "report": self.report.to_dict() if self.report is not None else None,
            "error": str(self.last_error) if self.last_error is not None else None,
        }
