"""Project status & progress model shared by every dashboard surface."""

from contentcrush.workflow.board import assign_column, build_board
from contentcrush.workflow.progress import compute_progress
from contentcrush.workflow.registry import (
    IndicatorBonuses,
    Milestone,
    SpecialCondition,
    Stage,
    StatusModelConfigError,
    WorkflowRegistry,
    build_registry,
    get_registry,
    load_registry,
    milestones_for,
    next_incomplete,
    reset_registry_cache,
)
from contentcrush.workflow.resolver import (
    ResolvedStatus,
    UnknownStatusError,
    resolve,
    resolve_condition,
    resolve_project,
)
from contentcrush.workflow.transitions import check_special_transition, check_stage_transition

__all__ = [
    "IndicatorBonuses",
    "Milestone",
    "ResolvedStatus",
    "SpecialCondition",
    "Stage",
    "StatusModelConfigError",
    "UnknownStatusError",
    "WorkflowRegistry",
    "assign_column",
    "build_board",
    "build_registry",
    "check_special_transition",
    "check_stage_transition",
    "compute_progress",
    "get_registry",
    "load_registry",
    "milestones_for",
    "next_incomplete",
    "reset_registry_cache",
    "resolve",
    "resolve_condition",
    "resolve_project",
]
