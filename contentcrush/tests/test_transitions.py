import unittest
from unittest.mock import patch

from contentcrush.workflow import resolver as status_resolver
from contentcrush.workflow import UnknownStatusError, check_special_transition, check_stage_transition


class StageTransitionTests(unittest.TestCase):
    def test_forward_moves_follow_next_list(self) -> None:
        self.assertTrue(check_stage_transition("proposta", "producao").valid)
        self.assertTrue(check_stage_transition("em_andamento", "pos_revisao").valid)

    def test_skipping_beyond_next_list_is_rejected(self) -> None:
        check = check_stage_transition("proposta", "pos_revisao")
        self.assertFalse(check.valid)
        self.assertIn("Pós / Revisão", check.reason)

    def test_delivery_and_closing_are_always_reachable(self) -> None:
        self.assertTrue(check_stage_transition("proposta", "entregue").valid)
        self.assertTrue(check_stage_transition("pre_producao", "concluido").valid)

    def test_backward_and_same_stage_moves_are_allowed(self) -> None:
        self.assertTrue(check_stage_transition("entregue", "proposta").valid)
        self.assertTrue(check_stage_transition("producao", "em_producao").valid)

    def test_cancelled_projects_cannot_change_stage(self) -> None:
        check = check_stage_transition("producao", "pos_revisao", "canceled")
        self.assertFalse(check.valid)
        self.assertFalse(check_stage_transition("cancelado", "proposta").valid)

    def test_condition_without_underlying_stage_is_checked_silently(self) -> None:
        with patch.object(status_resolver, "record_status_fallback") as recorded:
            with self.assertNoLogs("contentcrush.workflow", level="WARNING"):
                check = check_stage_transition("atrasado", "pos_revisao")
        self.assertTrue(check.valid)
        recorded.assert_not_called()

    def test_underlying_status_sets_the_current_stage(self) -> None:
        self.assertFalse(check_stage_transition("pausado", "pos_revisao", underlying_status="proposta").valid)
        self.assertTrue(check_stage_transition("pausado", "pos_revisao", underlying_status="producao").valid)

    def test_unknown_target_raises(self) -> None:
        with self.assertRaises(UnknownStatusError):
            check_stage_transition("producao", "arquivado")


class SpecialTransitionTests(unittest.TestCase):
    def test_clearing_is_always_allowed(self) -> None:
        self.assertTrue(check_special_transition("cancelado", "none").valid)
        self.assertTrue(check_special_transition("atrasado", None).valid)

    def test_any_condition_can_be_set_on_active_project(self) -> None:
        self.assertTrue(check_special_transition(None, "delayed").valid)
        self.assertTrue(check_special_transition("pausado", "cancelado").valid)

    def test_cancelled_cannot_switch_condition(self) -> None:
        self.assertFalse(check_special_transition("canceled", "pausado").valid)
        self.assertFalse(check_special_transition("canceled", "cancelado").valid)
        self.assertFalse(check_special_transition("cancelado", "atrasado").valid)

    def test_unknown_condition_raises(self) -> None:
        with self.assertRaises(UnknownStatusError):
            check_special_transition(None, "frozen")


if __name__ == "__main__":
    unittest.main()
