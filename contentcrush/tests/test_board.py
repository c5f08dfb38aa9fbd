import unittest

from contentcrush.models import ProjectSnapshot
from contentcrush.workflow import assign_column, build_board, get_registry, resolve


class BoardAssignmentTests(unittest.TestCase):
    def test_special_condition_never_owns_a_column(self) -> None:
        self.assertEqual(assign_column(resolve("cancelado", "pre_producao")), "pre_producao")
        self.assertEqual(assign_column(resolve("atrasado", "entregue")), "entregue")
        self.assertEqual(assign_column(resolve("revisao_cliente", None)), "pos_revisao")

    def test_build_board_has_one_column_per_stage_in_order(self) -> None:
        board = build_board([])
        self.assertEqual([c.id for c in board.columns], list(get_registry().stage_ids))
        self.assertEqual(board.version, get_registry().version)
        self.assertEqual(board.unresolved, [])

    def test_build_board_places_each_project_exactly_once(self) -> None:
        projects = [
            ProjectSnapshot(id="1", name="Campanha Verão", rawStatus="novo", hasBudget=True),
            ProjectSnapshot(id="2", name="Documentário", rawStatus="pausado", underlyingStatus="producao"),
            {"id": "3", "name": "Vinheta", "rawStatus": "entregue", "specialStatus": "delayed"},
            {"id": "4", "name": "Podcast", "rawStatus": "arquivo_morto"},
        ]
        board = build_board(projects)
        placed = {card.projectId: column.id for column in board.columns for card in column.items}

        self.assertEqual(placed, {"1": "proposta", "2": "producao", "3": "entregue"})
        self.assertEqual([u.projectId for u in board.unresolved], ["4"])
        self.assertEqual(board.unresolved[0].token, "arquivo_morto")

        by_id = {card.projectId: card for column in board.columns for card in column.items}
        self.assertEqual(by_id["1"].progress, 15)
        self.assertEqual(by_id["2"].specialCondition, "pausado")
        self.assertEqual(by_id["2"].specialLabel, "Pausado")
        self.assertEqual(by_id["3"].specialCondition, "atrasado")

    def test_null_status_row_is_listed_as_unresolved(self) -> None:
        board = build_board([
            {"id": "1", "rawStatus": "novo"},
            {"id": "2", "rawStatus": None, "completedMilestoneIds": None},
        ])
        placed = [card.projectId for column in board.columns for card in column.items]
        self.assertEqual(placed, ["1"])
        self.assertEqual([u.projectId for u in board.unresolved], ["2"])
        self.assertEqual(board.unresolved[0].rawStatus, "")

    def test_build_board_flags_fallback_cards(self) -> None:
        board = build_board([{"id": "9", "rawStatus": "atrasado"}])
        production = next(c for c in board.columns if c.id == "producao")
        self.assertEqual(len(production.items), 1)
        self.assertTrue(production.items[0].usedFallback)


if __name__ == "__main__":
    unittest.main()
