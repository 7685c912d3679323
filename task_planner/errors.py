"""
Workflow error taxonomy.

FetchError and StoreError are fatal and abort the run. ExtractionError,
RoutingError and SummaryError are raised inside a node and recovered there
with a deterministic fallback.
"""

from __future__ import annotations


class TaskPlannerError(RuntimeError):
    """Base error for task planner failures."""

    fatal: bool = False

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class FetchError(TaskPlannerError):
    fatal = True


class StoreError(TaskPlannerError):
    fatal = True


class ExtractionError(TaskPlannerError):
    pass


class RoutingError(TaskPlannerError):
    pass


class SummaryError(TaskPlannerError):
    pass
