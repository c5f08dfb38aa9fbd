"""Stage registry, alias table, special-condition set and milestone registry.

All four tables are built from one versioned YAML document so the board
columns, badge labels and progress weights can never drift apart. The
registry is immutable once built; ``get_registry()`` loads the configured file
once per process.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

import yaml

from contentcrush import config

logger = logging.getLogger("contentcrush.workflow")

NO_CONDITION_TOKENS = frozenset({"", "none"})


class StatusModelConfigError(ValueError):
    """Raised when the status model file is missing, malformed or inconsistent."""


@dataclass(frozen=True)
class Stage:
    id: str
    label: str
    order: int
    baseline_progress: int
    next_stage_ids: tuple[str, ...] = ()
    always_reachable: bool = False


@dataclass(frozen=True)
class SpecialCondition:
    id: str
    label: str
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class Milestone:
    id: str
    stage_id: str
    label: str
    weight: int


@dataclass(frozen=True)
class IndicatorBonuses:
    has_budget: int = 0
    has_team_members: int = 0
    has_financial_documents: int = 0

    @property
    def maximum(self) -> int:
        return self.has_budget + self.has_team_members + self.has_financial_documents


@dataclass(frozen=True)
class WorkflowRegistry:
    version: str
    stages: tuple[Stage, ...]
    special_conditions: tuple[SpecialCondition, ...]
    aliases: Mapping[str, str]
    milestones: Mapping[str, tuple[Milestone, ...]]
    bonuses: IndicatorBonuses
    fallback_stage_id: str
    _stage_index: Mapping[str, Stage] = field(init=False, repr=False, compare=False)
    _condition_index: Mapping[str, SpecialCondition] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        condition_index: dict[str, SpecialCondition] = {}
        for condition in self.special_conditions:
            condition_index[condition.id] = condition
            for alias in condition.aliases:
                condition_index[alias] = condition
        object.__setattr__(self, "_stage_index", MappingProxyType({s.id: s for s in self.stages}))
        object.__setattr__(self, "_condition_index", MappingProxyType(condition_index))

    @property
    def stage_ids(self) -> tuple[str, ...]:
        return tuple(stage.id for stage in self.stages)

    @property
    def terminal_stage(self) -> Stage:
        return self.stages[-1]

    @property
    def fallback_stage(self) -> Stage:
        return self._stage_index[self.fallback_stage_id]

    def stage(self, stage_id: str) -> Optional[Stage]:
        return self._stage_index.get(stage_id)

    def aliased_stage(self, token: str) -> Optional[Stage]:
        target = self.aliases.get(token)
        if target is None:
            return None
        return self._stage_index.get(target)

    def special_condition(self, token: str) -> Optional[SpecialCondition]:
        return self._condition_index.get(token)

    def milestones_for(self, stage_id: str) -> tuple[Milestone, ...]:
        return self.milestones.get(stage_id, ())

    def known_tokens(self) -> list[str]:
        """Every token that resolves: stage ids, aliases and special-condition ids."""
        tokens = set(self.aliases)
        tokens.update(self._condition_index)
        return sorted(tokens)

    def with_aliases(self, extra: Mapping[str, str]) -> "WorkflowRegistry":
        """Return a copy with additional legacy aliases, validated like the file."""
        merged = dict(self.aliases)
        for raw_token, target in extra.items():
            token = normalize_status_token(raw_token)
            _require(token not in merged, f"Alias '{token}' is already defined")
            _require(token not in self._condition_index, f"Alias '{token}' collides with a special condition")
            _require(target in self._stage_index, f"Alias '{token}' targets unknown stage '{target}'")
            merged[token] = target
        return replace(self, aliases=MappingProxyType(merged))


def normalize_status_token(raw: Any) -> str:
    return str(raw or "").strip().lower()


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise StatusModelConfigError(message)


def _as_int(value: Any, what: str, low: int = 0, high: int = 100) -> int:
    _require(isinstance(value, int) and not isinstance(value, bool), f"{what} must be an integer")
    _require(low <= value <= high, f"{what} must be between {low} and {high}")
    return value


def _build_stages(raw_stages: Any) -> tuple[Stage, ...]:
    _require(isinstance(raw_stages, list) and raw_stages, "status model needs a non-empty 'stages' list")
    stages: list[Stage] = []
    for raw in raw_stages:
        _require(isinstance(raw, dict), "each stage must be a mapping")
        stage_id = normalize_status_token(raw.get("id"))
        _require(bool(stage_id), "stage id is required")
        next_ids = raw.get("next") or []
        _require(isinstance(next_ids, list), f"stage '{stage_id}' next must be a list")
        stages.append(Stage(
            id=stage_id,
            label=str(raw.get("label") or stage_id),
            order=_as_int(raw.get("order"), f"stage '{stage_id}' order", high=10_000),
            baseline_progress=_as_int(raw.get("baseline"), f"stage '{stage_id}' baseline"),
            next_stage_ids=tuple(normalize_status_token(n) for n in next_ids),
            always_reachable=bool(raw.get("always_reachable", False)),
        ))

    stages.sort(key=lambda s: s.order)
    ids = [s.id for s in stages]
    orders = [s.order for s in stages]
    _require(len(set(ids)) == len(ids), "stage ids must be unique")
    _require(len(set(orders)) == len(orders), "stage order values must be unique")
    for stage in stages:
        for next_id in stage.next_stage_ids:
            _require(next_id in ids, f"stage '{stage.id}' lists unknown next stage '{next_id}'")
    return tuple(stages)


def _build_conditions(raw_conditions: Any, stage_ids: set[str]) -> tuple[SpecialCondition, ...]:
    _require(isinstance(raw_conditions, list), "'special_conditions' must be a list")
    conditions: list[SpecialCondition] = []
    seen: set[str] = set()
    for raw in raw_conditions:
        _require(isinstance(raw, dict), "each special condition must be a mapping")
        condition_id = normalize_status_token(raw.get("id"))
        aliases = tuple(normalize_status_token(a) for a in raw.get("aliases") or [])
        for token in (condition_id,) + aliases:
            _require(bool(token), "special condition tokens cannot be empty")
            _require(token not in NO_CONDITION_TOKENS, f"'{token}' is reserved for 'no condition'")
            _require(token not in stage_ids, f"special condition token '{token}' collides with a stage id")
            _require(token not in seen, f"special condition token '{token}' is defined twice")
            seen.add(token)
        conditions.append(SpecialCondition(
            id=condition_id,
            label=str(raw.get("label") or condition_id),
            aliases=aliases,
        ))
    return tuple(conditions)


def _build_aliases(raw_aliases: Any, stage_ids: set[str], condition_tokens: set[str]) -> Mapping[str, str]:
    raw_aliases = raw_aliases or {}
    _require(isinstance(raw_aliases, dict), "'aliases' must be a mapping")
    # Identity entries: every canonical stage id is an alias of itself.
    table: dict[str, str] = {stage_id: stage_id for stage_id in stage_ids}
    for raw_token, raw_target in raw_aliases.items():
        token = normalize_status_token(raw_token)
        target = normalize_status_token(raw_target)
        _require(bool(token), "alias tokens cannot be empty")
        _require(token not in table, f"alias '{token}' is defined twice or shadows a stage id")
        _require(token not in condition_tokens, f"alias '{token}' collides with a special condition")
        _require(target in stage_ids, f"alias '{token}' targets unknown stage '{target}'")
        table[token] = target
    return MappingProxyType(table)


def _build_milestones(raw_milestones: Any, stages: tuple[Stage, ...], bonuses: IndicatorBonuses) -> Mapping[str, tuple[Milestone, ...]]:
    raw_milestones = raw_milestones or {}
    _require(isinstance(raw_milestones, dict), "'milestones' must be a mapping of stage id to list")
    stage_index = {s.id: s for s in stages}
    terminal_id = stages[-1].id
    seen_ids: set[str] = set()
    table: dict[str, tuple[Milestone, ...]] = {}
    for raw_stage_id, raw_items in raw_milestones.items():
        stage_id = normalize_status_token(raw_stage_id)
        _require(stage_id in stage_index, f"milestones reference unknown stage '{stage_id}'")
        _require(isinstance(raw_items, list), f"milestones for '{stage_id}' must be a list")
        items: list[Milestone] = []
        for raw in raw_items:
            _require(isinstance(raw, dict), f"milestone entries for '{stage_id}' must be mappings")
            milestone_id = str(raw.get("id") or "").strip()
            _require(bool(milestone_id), f"milestone in '{stage_id}' is missing an id")
            _require(milestone_id not in seen_ids, f"milestone id '{milestone_id}' is defined twice")
            seen_ids.add(milestone_id)
            items.append(Milestone(
                id=milestone_id,
                stage_id=stage_id,
                label=str(raw.get("label") or milestone_id),
                weight=_as_int(raw.get("weight"), f"milestone '{milestone_id}' weight"),
            ))

        # Terminal stage always reads 100, so only earlier stages carry the ceiling.
        if stage_id != terminal_id:
            ceiling = stage_index[stage_id].baseline_progress + sum(m.weight for m in items) + bonuses.maximum
            _require(
                ceiling <= 100,
                f"stage '{stage_id}' can reach {ceiling}%: baseline + milestones + bonuses must not exceed 100",
            )
        table[stage_id] = tuple(items)
    return MappingProxyType(table)


def _build_bonuses(raw_bonuses: Any) -> IndicatorBonuses:
    raw_bonuses = raw_bonuses or {}
    _require(isinstance(raw_bonuses, dict), "'indicator_bonuses' must be a mapping")
    return IndicatorBonuses(
        has_budget=_as_int(raw_bonuses.get("has_budget", 0), "has_budget bonus"),
        has_team_members=_as_int(raw_bonuses.get("has_team_members", 0), "has_team_members bonus"),
        has_financial_documents=_as_int(raw_bonuses.get("has_financial_documents", 0), "has_financial_documents bonus"),
    )


def build_registry(data: Mapping[str, Any]) -> WorkflowRegistry:
    """Validate a parsed status model document and build the registry."""
    _require(isinstance(data, Mapping), "status model must be a mapping")
    version = str(data.get("version") or "").strip()
    _require(bool(version), "status model needs a 'version'")

    stages = _build_stages(data.get("stages"))
    stage_ids = {s.id for s in stages}
    conditions = _build_conditions(data.get("special_conditions") or [], stage_ids)
    condition_tokens = {c.id for c in conditions} | {a for c in conditions for a in c.aliases}
    aliases = _build_aliases(data.get("aliases"), stage_ids, condition_tokens)
    bonuses = _build_bonuses(data.get("indicator_bonuses"))
    milestones = _build_milestones(data.get("milestones"), stages, bonuses)

    fallback_stage_id = normalize_status_token(data.get("fallback_stage"))
    _require(fallback_stage_id in stage_ids, f"fallback stage '{fallback_stage_id}' is not a known stage")

    return WorkflowRegistry(
        version=version,
        stages=stages,
        special_conditions=conditions,
        aliases=aliases,
        milestones=milestones,
        bonuses=bonuses,
        fallback_stage_id=fallback_stage_id,
    )


def load_registry(path: Path) -> WorkflowRegistry:
    """Load and validate the status model YAML file at ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise StatusModelConfigError(f"Cannot read status model {path}") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise StatusModelConfigError(f"Invalid YAML in status model {path}") from exc
    registry = build_registry(data)
    logger.info(
        "Loaded status model %s (%d stages, %d aliases, %d special conditions)",
        registry.version,
        len(registry.stages),
        len(registry.aliases),
        len(registry.special_conditions),
    )
    return registry


@lru_cache(maxsize=1)
def get_registry() -> WorkflowRegistry:
    return load_registry(config.STATUS_MODEL_PATH)


def reset_registry_cache() -> None:
    get_registry.cache_clear()


def milestones_for(stage_id: str, *, registry: WorkflowRegistry | None = None) -> tuple[Milestone, ...]:
    """Ordered milestones of a stage; unknown stages have none."""
    reg = registry or get_registry()
    return reg.milestones_for(normalize_status_token(stage_id))


def next_incomplete(
    stage_id: str,
    completed_ids: Iterable[str] | None,
    *,
    registry: WorkflowRegistry | None = None,
) -> Optional[Milestone]:
    """Return the first milestone of the stage not yet completed, or None."""
    completed = set(completed_ids or ())
    for milestone in milestones_for(stage_id, registry=registry):
        if milestone.id not in completed:
            return milestone
    return None
