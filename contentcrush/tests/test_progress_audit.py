import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from contentcrush.scripts import progress_audit
from contentcrush.workflow import get_registry


ROWS = [
    {"id": 1, "name": "Campanha", "status": "proposta", "progress": 15, "budget": 1200.0},
    {"id": 2, "name": "Série", "status": "em_andamento", "progress": 57, "team_members": [4, 9]},
    {"id": 3, "name": "Clipe", "status": "atrasado", "progress": 50},
    {"id": 4, "name": "Evento", "status": "suspenso", "progress": 40},
]


class ProgressAuditTests(unittest.TestCase):
    def test_row_to_snapshot_maps_export_columns(self) -> None:
        snapshot = progress_audit.row_to_snapshot({
            "id": 12,
            "status": "pausado",
            "original_status": "producao",
            "special_status": "none",
            "completed_milestones": ["first_draft"],
            "budget": "0",
            "members": [1],
            "financial_documents": [],
        })
        self.assertEqual(snapshot.id, "12")
        self.assertEqual(snapshot.underlyingStatus, "producao")
        self.assertFalse(snapshot.hasBudget)
        self.assertTrue(snapshot.hasTeamMembers)
        self.assertFalse(snapshot.hasFinancialDocuments)

    def test_audit_reports_drift_fallback_and_unknown_status(self) -> None:
        findings = progress_audit.audit_rows(ROWS, get_registry())
        by_id = {f.project_id: f for f in findings}

        self.assertNotIn("1", by_id)
        self.assertEqual(by_id["2"].reason, "progress_drift(57->53)")
        self.assertEqual(by_id["3"].reason, "missing_underlying_status")
        self.assertEqual(by_id["3"].special_condition, "atrasado")
        self.assertEqual(by_id["4"].reason, "unrecognized_status(suspenso)")
        self.assertIsNone(by_id["4"].computed_progress)

    def test_main_emits_json_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "projects.json"
            path.write_text(json.dumps({"projects": ROWS}), encoding="utf-8")
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                code = progress_audit.main(["--input", str(path), "--json"])

        self.assertEqual(code, 0)
        payload = json.loads(out.getvalue())
        self.assertEqual(payload["row_count"], 4)
        self.assertEqual(payload["finding_count"], 3)

    def test_main_fails_for_missing_input(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = progress_audit.main(["--input", "/nonexistent/projects.json"])
        self.assertEqual(code, 1)
        self.assertIn("Input not found", out.getvalue())


if __name__ == "__main__":
    unittest.main()
