"""Insight workflow exceptions."""


class InsightError(Exception):
    """Base class for insight generation failures."""


class InsightInProgressError(InsightError):
    """An analysis is already running for this workflow."""


class InsightUnavailableError(InsightError):
    """The analysis service is not configured."""


class InsightResponseError(InsightError):
    """The analysis service answered with something that is not a report."""
