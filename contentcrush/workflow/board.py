"""Kanban column assignment for resolved project statuses."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from contentcrush.models import BoardCard, BoardColumn, BoardView, ProjectSnapshot, UnresolvedProject
from contentcrush.observability import record_unknown_status
from contentcrush.workflow.progress import compute_progress
from contentcrush.workflow.registry import WorkflowRegistry, get_registry
from contentcrush.workflow.resolver import ResolvedStatus, UnknownStatusError, as_snapshot, resolve_project

logger = logging.getLogger("contentcrush.workflow")


def assign_column(resolved: ResolvedStatus) -> str:
    """Column id for a project: always its (effective) stage.

    Special conditions never own a column; they render as an overlay badge on
    the card in the stage column.
    """
    return resolved.stage.id


def build_board(
    projects: Iterable[ProjectSnapshot | Mapping[str, Any]],
    *,
    registry: WorkflowRegistry | None = None,
) -> BoardView:
    """Group projects into one column per stage, in pipeline order.

    Projects with an unrecognized status are listed under ``unresolved`` so
    the board can flag them instead of silently parking them in a column.
    """
    reg = registry or get_registry()
    columns = {
        stage.id: BoardColumn(id=stage.id, title=stage.label, order=stage.order)
        for stage in reg.stages
    }
    unresolved: list[UnresolvedProject] = []

    for project in projects:
        snapshot = as_snapshot(project)
        try:
            resolved = resolve_project(snapshot, registry=reg)
        except UnknownStatusError as exc:
            logger.warning("Project %s has unrecognized status %r", snapshot.id or "?", exc.token)
            record_unknown_status("board")
            unresolved.append(UnresolvedProject(
                projectId=snapshot.id,
                name=snapshot.name,
                rawStatus=snapshot.rawStatus,
                token=exc.token,
            ))
            continue

        condition = resolved.special_condition
        progress = compute_progress(snapshot, resolved, registry=reg)
        columns[assign_column(resolved)].items.append(BoardCard(
            projectId=snapshot.id,
            name=snapshot.name,
            stageId=resolved.stage.id,
            specialCondition=condition.id if condition else None,
            specialLabel=condition.label if condition else None,
            progress=progress.percentage,
            usedFallback=resolved.used_fallback,
        ))

    return BoardView(
        version=reg.version,
        columns=list(columns.values()),
        unresolved=unresolved,
    )
