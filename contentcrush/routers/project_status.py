"""API router exposing the project status & progress model."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from contentcrush.models import BoardView, ProgressReport, ProjectSnapshot, TransitionCheck
from contentcrush.observability import record_unknown_status, start_span
from contentcrush.status_card import derive_status_card
from contentcrush.workflow import (
    UnknownStatusError,
    assign_column,
    build_board,
    check_special_transition,
    check_stage_transition,
    compute_progress,
    get_registry,
    resolve,
    resolve_project,
)

logger = logging.getLogger("contentcrush.status")

status_model_router = APIRouter(prefix="/api/status-model", tags=["status-model"])
project_status_router = APIRouter(prefix="/api/project-status", tags=["project-status"])


class ResolveRequest(BaseModel):
    rawStatus: str
    underlyingStatus: Optional[str] = None


class ResolveResponse(BaseModel):
    stageId: str
    stageLabel: str
    specialCondition: Optional[str] = None
    specialLabel: Optional[str] = None
    column: str
    usedFallback: bool = False


class TransitionRequest(BaseModel):
    currentStatus: str
    underlyingStatus: Optional[str] = None
    targetStatus: Optional[str] = None
    specialStatus: Optional[str] = None
    targetSpecialStatus: Optional[str] = None


def _unknown_status(exc: UnknownStatusError, surface: str) -> HTTPException:
    record_unknown_status(surface)
    return HTTPException(
        status_code=422,
        detail={"message": "Unrecognized project status", "token": exc.token},
    )


@status_model_router.get("")
def get_status_model() -> dict[str, Any]:
    """Return stages, conditions, aliases, milestones and bonuses in one payload."""
    registry = get_registry()
    return {
        "version": registry.version,
        "stages": [
            {
                "id": stage.id,
                "label": stage.label,
                "order": stage.order,
                "baselineProgress": stage.baseline_progress,
            }
            for stage in registry.stages
        ],
        "specialConditions": [
            {"id": condition.id, "label": condition.label}
            for condition in registry.special_conditions
        ],
        "aliases": dict(registry.aliases),
        "milestones": {
            stage.id: [
                {"id": m.id, "label": m.label, "weight": m.weight}
                for m in registry.milestones_for(stage.id)
            ]
            for stage in registry.stages
        },
        "indicatorBonuses": {
            "hasBudget": registry.bonuses.has_budget,
            "hasTeamMembers": registry.bonuses.has_team_members,
            "hasFinancialDocuments": registry.bonuses.has_financial_documents,
        },
    }


@project_status_router.post("/resolve", response_model=ResolveResponse)
def resolve_status(req: ResolveRequest):
    """Resolve a raw status token into stage, condition and board column."""
    try:
        resolved = resolve(req.rawStatus, req.underlyingStatus)
    except UnknownStatusError as exc:
        raise _unknown_status(exc, "api_resolve") from exc
    condition = resolved.special_condition
    return ResolveResponse(
        stageId=resolved.stage.id,
        stageLabel=resolved.stage.label,
        specialCondition=condition.id if condition else None,
        specialLabel=condition.label if condition else None,
        column=assign_column(resolved),
        usedFallback=resolved.used_fallback,
    )


@project_status_router.post("/progress", response_model=ProgressReport)
def project_progress(project: ProjectSnapshot):
    """Compute the completion percentage for one project snapshot."""
    try:
        resolved = resolve_project(project)
    except UnknownStatusError as exc:
        raise _unknown_status(exc, "api_progress") from exc
    return compute_progress(project, resolved)


@project_status_router.post("/board", response_model=BoardView)
def project_board(projects: list[ProjectSnapshot]):
    """Group project snapshots into kanban columns."""
    with start_span("project_status.board", {"projects.count": len(projects)}):
        board = build_board(projects)
    if board.unresolved:
        logger.info("Board built with %d unresolved project(s)", len(board.unresolved))
    return board


@project_status_router.post("/card")
def project_card(project: ProjectSnapshot) -> dict[str, Any]:
    """Status card consumed by the badge, kanban card and milestone panel."""
    return derive_status_card(project)


@project_status_router.post("/transition", response_model=TransitionCheck)
def check_transition(req: TransitionRequest):
    """Validate a stage move and/or a special-condition change."""
    try:
        if req.targetStatus:
            check = check_stage_transition(
                req.currentStatus,
                req.targetStatus,
                req.specialStatus,
                underlying_status=req.underlyingStatus,
            )
            if not check.valid or req.targetSpecialStatus is None:
                return check
        return check_special_transition(req.specialStatus, req.targetSpecialStatus)
    except UnknownStatusError as exc:
        raise _unknown_status(exc, "api_transition") from exc
