"""Pydantic models matching the frontend TypeScript types."""
from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional

# ── Project snapshot (read-only input) ─────────────────────────────

class ProjectSnapshot(BaseModel):
    id: str = ""
    name: str = ""
    rawStatus: str = ""  # empty never resolves; callers get UnknownStatusError
    underlyingStatus: Optional[str] = None  # stage held before a special condition
    specialStatus: Optional[str] = None     # overlay column: delayed | paused | canceled | none
    completedMilestoneIds: list[str] = Field(default_factory=list)
    hasBudget: Optional[bool] = False
    hasTeamMembers: Optional[bool] = False
    hasFinancialDocuments: Optional[bool] = False

    @field_validator("id", "name", "rawStatus", mode="before")
    @classmethod
    def null_text_as_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("completedMilestoneIds", mode="before")
    @classmethod
    def null_milestones_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


# ── Progress models ────────────────────────────────────────────────

class MilestoneInfo(BaseModel):
    id: str
    stageId: str
    label: str
    weight: int = 0


class ProgressBreakdown(BaseModel):
    baseline: int = 0
    milestoneContribution: int = 0
    indicatorContribution: int = 0


class ProgressReport(BaseModel):
    percentage: int = 0  # 0-100
    breakdown: ProgressBreakdown = Field(default_factory=ProgressBreakdown)
    completedMilestones: int = 0
    totalMilestones: int = 0
    nextMilestone: Optional[MilestoneInfo] = None


# ── Board models ───────────────────────────────────────────────────

class BoardCard(BaseModel):
    projectId: str
    name: str = ""
    stageId: str
    specialCondition: Optional[str] = None
    specialLabel: Optional[str] = None
    progress: int = 0
    usedFallback: bool = False


class BoardColumn(BaseModel):
    id: str
    title: str
    order: int
    items: list[BoardCard] = Field(default_factory=list)


class UnresolvedProject(BaseModel):
    projectId: str
    name: str = ""
    rawStatus: str = ""
    token: str = ""  # the token no stage, alias or condition matched


class BoardView(BaseModel):
    version: str
    columns: list[BoardColumn] = Field(default_factory=list)
    unresolved: list[UnresolvedProject] = Field(default_factory=list)


# ── Transition checks ──────────────────────────────────────────────

class TransitionCheck(BaseModel):
    valid: bool
    reason: Optional[str] = None
