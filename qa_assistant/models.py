"""
Core data models for the QA Assistant.

AnalysisPayload is the structured bug analysis handed to ticketing and
notification collaborators. It is created fresh per analysis and never
mutated; edits go through model_copy(update=...).

Field names serialize in camelCase (summary, reproductionSteps, rootCause,
affectedModule, suggestedFix, testCases, priority, severity) to match the
JSON the model is asked to produce.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    """Ticket priority values the model is asked to choose from."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Severity(str, Enum):
    """Ticket severity values the model is asked to choose from."""

    BLOCKER = "Blocker"
    CRITICAL = "Critical"
    MAJOR = "Major"
    MINOR = "Minor"
    TRIVIAL = "Trivial"


def _as_text(v: Any) -> Any:
    """Render model-produced values as text: null -> "", list -> one item per line."""
    if v is None:
        return ""
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, list):
        return "\n".join(str(item) for item in v)
    if isinstance(v, (dict, int, float, bool)):
        return str(v)
    return v


class AnalysisPayload(BaseModel):
    """Structured analysis of a single bug report."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    summary: str = ""
    reproduction_steps: str = Field(default="", alias="reproductionSteps")
    root_cause: str = Field(default="", alias="rootCause")
    affected_module: str = Field(default="", alias="affectedModule")
    suggested_fix: str = Field(default="", alias="suggestedFix")
    test_cases: str = Field(default="", alias="testCases")
    priority: str = ""
    severity: str = ""

    @field_validator(
        "summary",
        "reproduction_steps",
        "root_cause",
        "affected_module",
        "suggested_fix",
        "test_cases",
        "priority",
        "severity",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return _as_text(v)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase wire names."""
        return self.model_dump(by_alias=True)


class UserStoryContext(BaseModel):
    """Related user story pulled from the ticketing system."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    description: str = ""
    acceptance_criteria: str = Field(default="", alias="acceptanceCriteria")
    components: list[str] = Field(default_factory=list)

    @field_validator("summary", "description", "acceptance_criteria", mode="before")
    @classmethod
    def _coerce_none_str(cls, v: Any) -> Any:
        return v if v is not None else ""

    @field_validator("components", mode="before")
    @classmethod
    def _coerce_none_components(cls, v: Any) -> Any:
        return v if v is not None else []


class Assignee(BaseModel):
    """A developer who recently worked on a similar issue."""

    name: str
    email: Optional[str] = None


class InvocationOptions(BaseModel):
    """Per-call overrides; every adapter supplies its own defaults for unset fields."""

    model_config = ConfigDict(frozen=True)

    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class InvocationResult(BaseModel):
    """A successful invocation: the text and which providers were tried to get it."""

    model_config = ConfigDict(frozen=True)

    text: str
    provider: str
    attempted: list[str] = Field(default_factory=list)
