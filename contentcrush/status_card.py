"""Derive the status card shown by the badge, kanban card and milestone panel."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from contentcrush.models import ProjectSnapshot
from contentcrush.observability import record_unknown_status
from contentcrush.workflow import (
    UnknownStatusError,
    WorkflowRegistry,
    assign_column,
    compute_progress,
    get_registry,
    resolve_project,
)
from contentcrush.workflow.resolver import as_snapshot

logger = logging.getLogger("contentcrush")


def _unrecognized_card(snapshot: ProjectSnapshot, token: str) -> dict[str, Any]:
    return {
        "projectId": snapshot.id,
        "column": None,
        "stageId": None,
        "stageLabel": "",
        "specialCondition": None,
        "specialLabel": None,
        "badges": [],
        "progress": None,
        "nextMilestone": None,
        "usedFallback": False,
        "unrecognizedStatus": token,
    }


def derive_status_card(
    project: ProjectSnapshot | Mapping[str, Any],
    *,
    registry: WorkflowRegistry | None = None,
) -> dict[str, Any]:
    """Derive column, badges and progress for one project snapshot."""
    reg = registry or get_registry()
    snapshot = as_snapshot(project)
    try:
        resolved = resolve_project(snapshot, registry=reg)
    except UnknownStatusError as exc:
        logger.warning("Project %s has unrecognized status %r", snapshot.id or "?", exc.token)
        record_unknown_status("status_card")
        return _unrecognized_card(snapshot, exc.token)

    condition = resolved.special_condition
    progress = compute_progress(snapshot, resolved, registry=reg)

    badges = [resolved.stage.label]
    if condition is not None:
        badges.append(condition.label)

    return {
        "projectId": snapshot.id,
        "column": assign_column(resolved),
        "stageId": resolved.stage.id,
        "stageLabel": resolved.stage.label,
        "specialCondition": condition.id if condition else None,
        "specialLabel": condition.label if condition else None,
        "badges": badges,
        "progress": progress.model_dump(),
        "nextMilestone": progress.nextMilestone.label if progress.nextMilestone else None,
        "usedFallback": resolved.used_fallback,
        "unrecognizedStatus": None,
    }
