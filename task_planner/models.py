"""
=============================================================================
Domain Models
=============================================================================

Core types shared by the workflow, the agents and the store.

- TaskItem: one collected unit of work (9 string columns)
- AgentKind: closed set of data-collection agents, in priority order
- MergeResult: counts returned by the store after a merge
=============================================================================
"""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# Durable column order. Must stay in sync with TaskItem field order.
CSV_COLUMNS: tuple[str, ...] = (
    "App_id",
    "Task_Type",
    "Task_SubType",
    "Task",
    "DueDate",
    "Parent_JIRA",
    "JIRA",
    "Status",
    "MoreDetails",
)

# Fields the store is allowed to fill in on an existing row
FILLABLE_FIELDS: tuple[str, ...] = ("ticket", "status", "more_details")


class AgentKind(StrEnum):
    """Data-collection agents, declared in priority order."""

    COMPLIANCE = "compliance"
    ISSUE = "issue"
    SCAN = "scan"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            normalized = value.strip().lower()
            alias = AGENT_ALIASES.get(normalized, normalized)
            for member in cls:
                if member.value == alias:
                    return member
        return None

    @property
    def label(self) -> str:
        return AGENT_LABELS[self]

    @classmethod
    def priority_order(cls) -> list["AgentKind"]:
        return list(cls)


# Legacy tags still accepted from the LLM and from callers
AGENT_ALIASES: dict[str, str] = {
    "tci": "compliance",
    "itracker": "issue",
    "scanissues": "scan",
}

AGENT_LABELS: dict[AgentKind, str] = {
    AgentKind.COMPLIANCE: "Compliance",
    AgentKind.ISSUE: "Issue Tracker",
    AgentKind.SCAN: "Security Scan",
}


class TaskItem(BaseModel):
    """
    One row of collected work.

    All fields are plain strings; a missing value is always "" (never None).
    Two items with equal (app_id, task) are the same logical item.
    """

    model_config = ConfigDict(frozen=True)

    app_id: str = ""
    task_type: str = ""
    task_subtype: str = ""
    task: str = ""
    due_date: str = ""
    parent_ticket: str = ""
    ticket: str = ""
    status: str = ""
    more_details: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_empty(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for deduplication."""
        return (self.app_id, self.task)

    def to_row(self) -> list[str]:
        return [getattr(self, name) for name in TaskItem.model_fields]

    @classmethod
    def from_row(cls, values: list[str]) -> "TaskItem":
        """Build an item from a positional row, padding missing columns with ""."""
        padded = list(values[: len(CSV_COLUMNS)])
        padded += [""] * (len(CSV_COLUMNS) - len(padded))
        return cls(**dict(zip(cls.model_fields, padded)))


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a store merge."""

    added: int = 0
    updated: int = 0
