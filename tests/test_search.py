import unittest
import sys
import os

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hashi.core.board import Board
from hashi.core.utils import Stopwatch
from hashi.solvers.rules import FIXPOINT_RULES, bad_corners
from hashi.solvers.search import SolveStatus, auto_solve, make_a_guess, refutes, speculate
from board_checks import assert_invariants, snapshot


SAMPLE = "2.2\n...\n1.1"
SQUARE = "2.2\n...\n2.2"
AMBIGUOUS = "33\n33"
# The rules stall here; the first deduction a guess finds caps the river
# between (3, 2) and (4, 2), since filling it starves (3, 0)
GUESS_BOARD = ".....1\n....23\n2.2...\n5.4...\n4.2...\n3...53"


class TestAutoSolve(unittest.TestCase):

    def test_square_of_twos(self):
        board = Board.from_string(SQUARE)
        self.assertEqual(auto_solve(board), SolveStatus.SOLVED)
        self.assertTrue(all(r.bridges == 1 for r in board.rivers))
        self.assertEqual(board.num_clusters, 1)
        self.assertIsNone(board._crossing_conflict())
        assert_invariants(self, board)

    def test_sample_uses_both_isolation_rules(self):
        board = Board.from_string(SAMPLE)
        stats = {}
        self.assertEqual(auto_solve(board, stats=stats), SolveStatus.SOLVED)
        self.assertEqual(stats['cap_to_avoid_joined_isolation'], 1)
        self.assertEqual(stats['cap_to_avoid_self_isolation'], 1)
        self.assertEqual(stats['passes'], 3)
        self.assertEqual(board.render(), "2-2\n| |\n1 1")

    def test_two_fours_contradiction(self):
        board = Board.from_string("44")
        self.assertEqual(auto_solve(board), SolveStatus.CONTRADICTION)
        mistake, _ = board.has_mistakes()
        self.assertTrue(mistake)

    def test_overfull_row_contradiction(self):
        board = Board.from_string("2.2.2")
        self.assertEqual(auto_solve(board), SolveStatus.CONTRADICTION)

    def test_ambiguous_board_stalls(self):
        board = Board.from_string(AMBIGUOUS)
        self.assertEqual(auto_solve(board), SolveStatus.STALLED)
        self.assertTrue(all(r.bridges == 1 for r in board.rivers))
        self.assertEqual(board.has_mistakes(), (False, None))
        solved, reason = board.is_solved()
        self.assertFalse(solved)
        self.assertIn("target is 3", reason)

    def test_fixpoint_is_idempotent(self):
        for text in (SAMPLE, SQUARE, AMBIGUOUS):
            board = Board.from_string(text)
            auto_solve(board)
            before = snapshot(board)
            auto_solve(board)
            self.assertEqual(snapshot(board), before)
            for rule in FIXPOINT_RULES:
                self.assertFalse(rule(board))
            self.assertFalse(bad_corners(board))

    def test_changes_are_monotonic(self):
        for text in (SAMPLE, SQUARE, AMBIGUOUS, ".1.\n141\n.1."):
            board = Board.from_string(text)
            states = [snapshot(board)]

            def record(message):
                states.append(snapshot(board))
                assert_invariants(self, board)

            auto_solve(board, trace=record)
            self.assertGreater(len(states), 1)
            for before, after in zip(states, states[1:]):
                for (b0, cap0), (b1, cap1) in zip(before, after):
                    self.assertGreaterEqual(b1, b0)
                    if b1 == b0:
                        self.assertLessEqual(cap1, cap0)

    def test_guessing_can_be_disabled(self):
        board = Board.from_string(AMBIGUOUS)
        stats = {}
        auto_solve(board, allow_guess=False, stats=stats)
        self.assertNotIn('make_a_guess', stats)

    def test_guessing_continues_after_rules_stall(self):
        board = Board.from_string(GUESS_BOARD)
        stats = {}
        # Two independent cycles can each be closed either way
        self.assertEqual(auto_solve(board, stats=stats), SolveStatus.STALLED)
        self.assertGreaterEqual(stats['make_a_guess'], 1)
        self.assertEqual(board.has_mistakes(), (False, None))
        self.assertEqual(board.num_clusters, 1)
        river = board.river_with(board.island_at(3, 2), board.island_at(4, 2))
        self.assertLessEqual(river.bridges + river.to_give, 1)
        assert_invariants(self, board)


class TestSpeculation(unittest.TestCase):

    def test_speculate_leaves_board_untouched(self):
        board = Board.from_string("1.1")
        before = snapshot(board)
        trial = speculate(board, 0, saturate=False)
        self.assertIsNot(trial, board)
        self.assertEqual(snapshot(board), before)
        self.assertEqual(trial.rivers[0].to_give, 0)
        self.assertTrue(trial.has_mistakes()[0])

    def test_speculate_saturate(self):
        board = Board.from_string("2.2")
        trial = speculate(board, 0, saturate=True)
        self.assertEqual(trial.rivers[0].bridges, 2)
        self.assertEqual(board.rivers[0].bridges, 0)
        self.assertEqual(trial.is_solved(), (True, None))

    def test_refutes(self):
        board = Board.from_string("1.1")
        self.assertTrue(refutes(board, 0, saturate=False))
        self.assertFalse(refutes(board, 0, saturate=True))

    def test_make_a_guess_forces_bridge(self):
        board = Board.from_string("1.1")
        stopwatch = Stopwatch()
        messages = []
        self.assertTrue(make_a_guess(board, messages.append, stopwatch))
        self.assertEqual(board.rivers[0].bridges, 1)
        self.assertEqual(stopwatch.counts['copy'], 1)
        self.assertIn("can't be empty", messages[0])

    def test_make_a_guess_caps_river_that_cannot_be_filled(self):
        board = Board.from_string(GUESS_BOARD)
        self.assertEqual(auto_solve(board, allow_guess=False), SolveStatus.STALLED)
        self.assertEqual(board.num_clusters, 2)
        river = board.river_with(board.island_at(3, 2), board.island_at(4, 2))
        self.assertEqual((river.bridges, river.to_give), (0, 2))
        before = snapshot(board)

        messages = []
        self.assertTrue(make_a_guess(board, messages.append))

        self.assertEqual(river.to_give, 1)
        self.assertEqual(river.bridges, 0)
        after = snapshot(board)
        changed = [i for i in range(len(before)) if before[i] != after[i]]
        self.assertEqual(changed, [river.id])
        self.assertEqual(len(messages), 1)
        self.assertIn("can't be filled", messages[0])
        assert_invariants(self, board)

    def test_filling_starving_river_is_refuted(self):
        board = Board.from_string(GUESS_BOARD)
        auto_solve(board, allow_guess=False)
        river = board.river_with(board.island_at(3, 2), board.island_at(4, 2))
        self.assertTrue(refutes(board, river.id, saturate=True))
        self.assertFalse(refutes(board, river.id, saturate=False))

    def test_make_a_guess_finds_nothing_on_ambiguous_board(self):
        board = Board.from_string(AMBIGUOUS)
        auto_solve(board, allow_guess=False)
        before = snapshot(board)
        self.assertFalse(make_a_guess(board))
        self.assertEqual(snapshot(board), before)

    def test_refutes_filling_that_splits_board(self):
        # Two double bridges would leave two closed pairs
        board = Board.from_string("22\n22")
        self.assertTrue(refutes(board, 0, saturate=True))
        self.assertTrue(refutes(board, 0, saturate=False))

    def test_make_a_guess_on_fresh_square(self):
        board = Board.from_string(SQUARE)
        self.assertTrue(make_a_guess(board))
        self.assertEqual(board.rivers[0].bridges, 1)
        assert_invariants(self, board)


if __name__ == '__main__':
    unittest.main()
