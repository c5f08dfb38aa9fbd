"""Completion percentage from stage baseline, milestones and indicator bonuses."""
from __future__ import annotations

from typing import Any, Mapping

from contentcrush.models import MilestoneInfo, ProgressBreakdown, ProgressReport, ProjectSnapshot
from contentcrush.workflow.registry import Milestone, WorkflowRegistry, get_registry, next_incomplete
from contentcrush.workflow.resolver import ResolvedStatus, as_snapshot


def milestone_info(milestone: Milestone) -> MilestoneInfo:
    return MilestoneInfo(
        id=milestone.id,
        stageId=milestone.stage_id,
        label=milestone.label,
        weight=milestone.weight,
    )


def _indicator_contribution(snapshot: ProjectSnapshot, registry: WorkflowRegistry) -> int:
    bonuses = registry.bonuses
    total = 0
    if snapshot.hasBudget:
        total += bonuses.has_budget
    if snapshot.hasTeamMembers:
        total += bonuses.has_team_members
    if snapshot.hasFinancialDocuments:
        total += bonuses.has_financial_documents
    return total


def compute_progress(
    project: ProjectSnapshot | Mapping[str, Any],
    resolved: ResolvedStatus,
    *,
    registry: WorkflowRegistry | None = None,
) -> ProgressReport:
    """Compute the 0-100 completion percentage for a resolved project.

    Only milestones of the resolved stage count; completed ids that no longer
    exist in the registry are ignored. The terminal stage always reads 100.
    A special condition (cancelled included) does not alter the reading: the
    project keeps the progress of the stage it was in.
    """
    reg = registry or get_registry()
    snapshot = as_snapshot(project)
    stage = resolved.stage
    completed = set(snapshot.completedMilestoneIds or ())
    milestones = reg.milestones_for(stage.id)

    baseline = stage.baseline_progress
    done = [m for m in milestones if m.id in completed]
    milestone_contribution = sum(m.weight for m in done)
    indicator_contribution = _indicator_contribution(snapshot, reg)

    percentage = max(0, min(100, baseline + milestone_contribution + indicator_contribution))
    if stage.id == reg.terminal_stage.id:
        percentage = 100

    next_milestone = next_incomplete(stage.id, completed, registry=reg)
    return ProgressReport(
        percentage=int(percentage),
        breakdown=ProgressBreakdown(
            baseline=baseline,
            milestoneContribution=milestone_contribution,
            indicatorContribution=indicator_contribution,
        ),
        completedMilestones=len(done),
        totalMilestones=len(milestones),
        nextMilestone=milestone_info(next_milestone) if next_milestone else None,
    )
