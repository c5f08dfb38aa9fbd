"""Rules for moving a project between stages and special conditions."""
from __future__ import annotations

from typing import Optional

from contentcrush.models import TransitionCheck
from contentcrush.workflow.registry import SpecialCondition, WorkflowRegistry, get_registry
from contentcrush.workflow.resolver import resolve, resolve_condition

_CANCELLED = "cancelado"


def _is_cancelled(condition: Optional[SpecialCondition]) -> bool:
    return condition is not None and condition.id == _CANCELLED


def check_stage_transition(
    current_status: str,
    target_status: str,
    special_status: str | None = None,
    *,
    underlying_status: str | None = None,
    registry: WorkflowRegistry | None = None,
) -> TransitionCheck:
    """Validate a stage move (e.g. a card dragged to another column).

    Backward moves are always allowed. Forward moves must follow the stage's
    ``next`` list unless the target is always reachable (delivery/closing).
    Raises UnknownStatusError for tokens that do not resolve.
    """
    reg = registry or get_registry()
    current = resolve(current_status, underlying_status, registry=reg, record_fallback=False)
    target = resolve(target_status, registry=reg, record_fallback=False).stage
    condition = current.special_condition or resolve_condition(special_status, registry=reg)

    if _is_cancelled(condition):
        return TransitionCheck(valid=False, reason="Cancelled projects cannot change stage")
    if current.stage.id == target.id:
        return TransitionCheck(valid=True)
    if target.order < current.stage.order:
        return TransitionCheck(valid=True)
    if target.id in current.stage.next_stage_ids or target.always_reachable:
        return TransitionCheck(valid=True)
    return TransitionCheck(
        valid=False,
        reason=f'Cannot move from "{current.stage.label}" to "{target.label}"',
    )


def check_special_transition(
    current_condition: str | None,
    target_condition: str | None,
    *,
    registry: WorkflowRegistry | None = None,
) -> TransitionCheck:
    """Validate setting or clearing the special-condition overlay."""
    reg = registry or get_registry()
    current = resolve_condition(current_condition, registry=reg)
    target = resolve_condition(target_condition, registry=reg)

    if target is None:
        return TransitionCheck(valid=True)
    if _is_cancelled(current):
        return TransitionCheck(valid=False, reason="Cancelled projects cannot take another special status")
    return TransitionCheck(valid=True)
