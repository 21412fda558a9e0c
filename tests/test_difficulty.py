import unittest
from math import factorial, log10

from rubikpow.actions import Move
from rubikpow.difficulty import (
    DIGEST_PREFIX_BYTES,
    MAX_TARGET,
    _closed_form_state_count,
    calculate_difficulty,
    difficulty_is_enumerated,
    digest_value,
    meets_difficulty,
    state_digest,
    target_for_difficulty,
)
from rubikpow.engine import PuzzleState
from rubikpow.scramble import scrambled_state


class TestCalculateDifficulty(unittest.TestCase):
    def test_enumerated_sizes(self):
        self.assertEqual(calculate_difficulty(1), 1)
        self.assertEqual(calculate_difficulty(2), 3674160)
        self.assertEqual(calculate_difficulty(3), 43252003274489856000)
        for size in (1, 2, 3):
            self.assertTrue(difficulty_is_enumerated(size))
        self.assertFalse(difficulty_is_enumerated(4))

    def test_closed_form_matches_enumerated_sizes(self):
        self.assertEqual(_closed_form_state_count(2), 3674160)
        self.assertEqual(_closed_form_state_count(3), 43252003274489856000)

    def test_four_cube(self):
        expected = factorial(7) * 3**6 * factorial(24) ** 2 // factorial(4) ** 6
        self.assertEqual(calculate_difficulty(4), expected)
        self.assertEqual(calculate_difficulty(4), 7401196841564901869874093974498574336000000000)

    def test_larger_sizes_grow(self):
        values = [calculate_difficulty(n) for n in range(2, 12)]
        self.assertEqual(values, sorted(values))
        self.assertAlmostEqual(log10(calculate_difficulty(5)), 74.45, places=1)

    def test_invalid_size(self):
        for bad in (0, -1, 2.5, True):
            with self.assertRaises(ValueError):
                calculate_difficulty(bad)


class TestMeetsDifficulty(unittest.TestCase):
    def test_digest_prefix_value(self):
        state = PuzzleState(3)
        digest = state_digest(state)
        self.assertEqual(len(digest), 32)
        self.assertEqual(digest_value(state), int.from_bytes(digest[:DIGEST_PREFIX_BYTES], "big"))
        self.assertLessEqual(digest_value(state), MAX_TARGET)

    def test_max_target_always_passes(self):
        for nonce in range(5):
            state, _ = scrambled_state(2, nonce, b"hdr")
            self.assertTrue(meets_difficulty(state, MAX_TARGET))
            self.assertTrue(meets_difficulty(state, MAX_TARGET * 4))

    def test_zero_target_only_for_zero_prefix(self):
        state = PuzzleState(3)
        self.assertEqual(meets_difficulty(state, 0), digest_value(state) == 0)

    def test_target_boundary(self):
        state, _ = scrambled_state(3, 42, b"hdr")
        value = digest_value(state)
        self.assertTrue(meets_difficulty(state, value))
        self.assertEqual(meets_difficulty(state, value - 1), False)
        self.assertFalse(meets_difficulty(state, -1))

    def test_independent_of_solved_status(self):
        solved = PuzzleState(3)
        moved = PuzzleState(3)
        moved.apply_move(Move("U", 1))
        self.assertNotEqual(digest_value(solved), digest_value(moved))
        rotated = PuzzleState(3)
        rotated.apply_move(Move("Y", 1))
        self.assertTrue(rotated.is_solved())
        self.assertNotEqual(digest_value(solved), digest_value(rotated))

    def test_target_for_difficulty(self):
        self.assertEqual(target_for_difficulty(1), MAX_TARGET)
        self.assertEqual(target_for_difficulty(2), MAX_TARGET // 2)
        self.assertEqual(target_for_difficulty(calculate_difficulty(3)), 0)
        with self.assertRaises(ValueError):
            target_for_difficulty(0)


if __name__ == "__main__":
    unittest.main()
