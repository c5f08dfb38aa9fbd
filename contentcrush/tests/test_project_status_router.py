import unittest

from fastapi import HTTPException

from contentcrush.models import ProjectSnapshot
from contentcrush.routers import project_status as status_router


class ProjectStatusRouterTests(unittest.TestCase):
    def test_status_model_payload_lists_pipeline(self) -> None:
        payload = status_router.get_status_model()
        self.assertEqual([s["id"] for s in payload["stages"]][0], "proposta")
        self.assertEqual(payload["aliases"]["em_andamento"], "producao")
        self.assertEqual(payload["indicatorBonuses"], {"hasBudget": 5, "hasTeamMembers": 3, "hasFinancialDocuments": 2})
        self.assertEqual(len(payload["milestones"]["producao"]), 4)

    def test_resolve_endpoint_returns_column(self) -> None:
        response = status_router.resolve_status(
            status_router.ResolveRequest(rawStatus="cancelado", underlyingStatus="pre_producao")
        )
        self.assertEqual(response.column, "pre_producao")
        self.assertEqual(response.specialCondition, "cancelado")
        self.assertFalse(response.usedFallback)

    def test_resolve_endpoint_maps_unknown_status_to_422(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            status_router.resolve_status(status_router.ResolveRequest(rawStatus="not_a_real_status"))
        self.assertEqual(ctx.exception.status_code, 422)
        self.assertEqual(ctx.exception.detail["token"], "not_a_real_status")

    def test_progress_endpoint(self) -> None:
        report = status_router.project_progress(ProjectSnapshot(rawStatus="proposta", hasBudget=True))
        self.assertEqual(report.percentage, 15)

        with self.assertRaises(HTTPException) as ctx:
            status_router.project_progress(ProjectSnapshot(rawStatus="producao", specialStatus="frozen"))
        self.assertEqual(ctx.exception.detail["token"], "frozen")

    def test_board_endpoint_keeps_unresolved_projects(self) -> None:
        board = status_router.project_board([
            ProjectSnapshot(id="1", rawStatus="novo"),
            ProjectSnapshot(id="2", rawStatus="legacy?"),
        ])
        self.assertEqual(len(board.unresolved), 1)
        self.assertEqual(sum(len(c.items) for c in board.columns), 1)

    def test_card_endpoint(self) -> None:
        card = status_router.project_card(ProjectSnapshot(id="1", rawStatus="atrasado", underlyingStatus="entregue"))
        self.assertEqual(card["column"], "entregue")
        self.assertEqual(card["badges"], ["Entregue / Aprovado", "Atrasado"])

    def test_transition_endpoint(self) -> None:
        check = status_router.check_transition(
            status_router.TransitionRequest(currentStatus="proposta", targetStatus="pos_revisao")
        )
        self.assertFalse(check.valid)

        check = status_router.check_transition(
            status_router.TransitionRequest(
                currentStatus="producao",
                specialStatus="canceled",
                targetSpecialStatus="pausado",
            )
        )
        self.assertFalse(check.valid)

        with self.assertRaises(HTTPException):
            status_router.check_transition(
                status_router.TransitionRequest(currentStatus="???", targetStatus="producao")
            )


if __name__ == "__main__":
    unittest.main()
