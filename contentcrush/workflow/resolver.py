"""Resolve persisted project status tokens into a stage plus special condition."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from contentcrush.models import ProjectSnapshot
from contentcrush.observability import record_status_fallback
from contentcrush.workflow.registry import (
    NO_CONDITION_TOKENS,
    SpecialCondition,
    Stage,
    WorkflowRegistry,
    get_registry,
    normalize_status_token,
)

logger = logging.getLogger("contentcrush.workflow")


class UnknownStatusError(ValueError):
    """Raised when a status token matches no stage, alias or special condition."""

    def __init__(self, token: Any) -> None:
        self.token = "" if token is None else str(token)
        super().__init__(f"Unrecognized project status: {self.token!r}")


@dataclass(frozen=True)
class ResolvedStatus:
    stage: Stage
    special_condition: Optional[SpecialCondition] = None
    # True when a special condition had no underlying stage and the fallback stage was assumed.
    used_fallback: bool = False


def as_snapshot(project: ProjectSnapshot | Mapping[str, Any]) -> ProjectSnapshot:
    if isinstance(project, ProjectSnapshot):
        return project
    return ProjectSnapshot.model_validate(dict(project))


def _resolve_stage(raw: Any, registry: WorkflowRegistry) -> Stage:
    token = normalize_status_token(raw)
    stage = registry.stage(token) or registry.aliased_stage(token)
    if stage is None:
        raise UnknownStatusError(raw)
    return stage


def resolve(
    raw_status: str,
    underlying_status: str | None = None,
    *,
    registry: WorkflowRegistry | None = None,
    record_fallback: bool = True,
) -> ResolvedStatus:
    """Normalize a raw status (and optional underlying stage) into a ResolvedStatus.

    Special conditions are checked first, so a project marked late, paused or
    cancelled keeps the stage it held before the condition. Records written
    before the underlying-status field existed fall back to the registry's
    fallback stage; that path is logged and counted because it hides the
    project's real position in the pipeline. With
    ``record_fallback=False`` the fallback is applied silently.
    """
    reg = registry or get_registry()
    token = normalize_status_token(raw_status)

    condition = reg.special_condition(token)
    if condition is not None:
        if normalize_status_token(underlying_status):
            return ResolvedStatus(stage=_resolve_stage(underlying_status, reg), special_condition=condition)
        fallback = reg.fallback_stage
        if record_fallback:
            logger.warning(
                "Status '%s' has no underlying stage; assuming '%s'",
                raw_status,
                fallback.id,
            )
            record_status_fallback(condition.id)
        return ResolvedStatus(stage=fallback, special_condition=condition, used_fallback=True)

    return ResolvedStatus(stage=_resolve_stage(raw_status, reg))


def resolve_condition(raw: str | None, *, registry: WorkflowRegistry | None = None) -> Optional[SpecialCondition]:
    """Map an overlay token to its condition; ``None``/``none`` means no condition."""
    reg = registry or get_registry()
    token = normalize_status_token(raw)
    if token in NO_CONDITION_TOKENS:
        return None
    condition = reg.special_condition(token)
    if condition is None:
        raise UnknownStatusError(raw)
    return condition


def resolve_project(
    project: ProjectSnapshot | Mapping[str, Any],
    *,
    registry: WorkflowRegistry | None = None,
) -> ResolvedStatus:
    """Resolve a snapshot, honoring the separate special-status overlay column.

    A condition carried by ``rawStatus`` itself takes precedence over the
    overlay column.
    """
    reg = registry or get_registry()
    snapshot = as_snapshot(project)
    resolved = resolve(snapshot.rawStatus, snapshot.underlyingStatus, registry=reg)
    if resolved.special_condition is not None:
        return resolved
    condition = resolve_condition(snapshot.specialStatus, registry=reg)
    if condition is None:
        return resolved
    return replace(resolved, special_condition=condition)
