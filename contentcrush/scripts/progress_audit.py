#!/usr/bin/env python3
"""Audit exported project rows for stale progress and unrecognized statuses.

Usage:
  python -m contentcrush.scripts.progress_audit --input projects.json
  python -m contentcrush.scripts.progress_audit --input projects.json --json
  python -m contentcrush.scripts.progress_audit --input projects.json --status-model custom.yaml
"""
from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Optional

from contentcrush.models import ProjectSnapshot
from contentcrush.workflow import (
    UnknownStatusError,
    WorkflowRegistry,
    compute_progress,
    get_registry,
    load_registry,
    resolve_project,
)


@dataclass
class AuditFinding:
    project_id: str
    name: str
    status: str
    stored_progress: Optional[int]
    computed_progress: Optional[int]
    stage: str
    special_condition: str
    reason: str


def _to_float(raw: Any) -> float:
    try:
        return float(raw or 0.0)
    except Exception:
        return 0.0


def _to_progress(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(round(float(raw)))
    except Exception:
        return None


def _non_empty(raw: Any) -> bool:
    if isinstance(raw, (list, tuple, set, dict)):
        return len(raw) > 0
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw > 0
    return bool(raw)


def row_to_snapshot(row: dict[str, Any]) -> ProjectSnapshot:
    """Map a database export row (snake_case) onto a ProjectSnapshot."""
    milestones = row.get("completed_milestones") or []
    if not isinstance(milestones, list):
        milestones = []
    return ProjectSnapshot(
        id=str(row.get("id") or ""),
        name=str(row.get("name") or ""),
        rawStatus=str(row.get("status") or ""),
        underlyingStatus=row.get("underlying_status") or row.get("original_status") or None,
        specialStatus=row.get("special_status") or None,
        completedMilestoneIds=[str(m) for m in milestones],
        hasBudget=_to_float(row.get("budget")) > 0,
        hasTeamMembers=_non_empty(row.get("team_members") or row.get("members")),
        hasFinancialDocuments=_non_empty(row.get("financial_documents")),
    )


def audit_rows(rows: list[dict[str, Any]], registry: WorkflowRegistry, include_ok: bool = False) -> list[AuditFinding]:
    findings: list[AuditFinding] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        snapshot = row_to_snapshot(row)
        stored = _to_progress(row.get("progress"))
        try:
            resolved = resolve_project(snapshot, registry=registry)
        except UnknownStatusError as exc:
            findings.append(AuditFinding(
                project_id=snapshot.id,
                name=snapshot.name,
                status=snapshot.rawStatus,
                stored_progress=stored,
                computed_progress=None,
                stage="",
                special_condition="",
                reason=f"unrecognized_status({exc.token})",
            ))
            continue

        computed = compute_progress(snapshot, resolved, registry=registry).percentage
        reasons: list[str] = []
        if stored is not None and stored != computed:
            reasons.append(f"progress_drift({stored}->{computed})")
        if resolved.used_fallback:
            reasons.append("missing_underlying_status")
        if reasons or include_ok:
            condition = resolved.special_condition
            findings.append(AuditFinding(
                project_id=snapshot.id,
                name=snapshot.name,
                status=snapshot.rawStatus,
                stored_progress=stored,
                computed_progress=computed,
                stage=resolved.stage.id,
                special_condition=condition.id if condition else "",
                reason=";".join(reasons) or "ok",
            ))
    return findings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", default="projects.json")
    parser.add_argument("--status-model", default="")
    parser.add_argument("--all", action="store_true", help="List projects without findings too")
    parser.add_argument("--limit", type=int, default=200)
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args(argv)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Input not found: {input_path}")
        return 1

    registry = load_registry(Path(args.status_model)) if args.status_model else get_registry()
    payload = json.loads(input_path.read_text(encoding="utf-8"))
    rows = payload.get("projects", []) if isinstance(payload, dict) else payload
    if not isinstance(rows, list):
        rows = []

    findings = audit_rows(rows, registry, include_ok=args.all)
    findings = findings[: max(1, args.limit)]

    if args.json:
        print(json.dumps({
            "input": str(input_path),
            "status_model_version": registry.version,
            "row_count": len(rows),
            "finding_count": len(findings),
            "findings": [asdict(f) for f in findings],
        }, indent=2, ensure_ascii=False))
        return 0

    print(f"Input: {input_path}")
    print(f"Status model: {registry.version}")
    print(f"Analyzed projects: {len(rows)}")
    print(f"Findings: {len(findings)}")
    print("")
    for idx, f in enumerate(findings, start=1):
        print(f"{idx:02d}. project={f.project_id} status={f.status} stage={f.stage or '-'} special={f.special_condition or '-'}")
        print(f"    name={f.name}")
        print(f"    progress stored={f.stored_progress} computed={f.computed_progress}")
        print(f"    reason={f.reason}")
        print("")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
