import unittest
import os
import sys

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from tsgen.windowing import (
    max_target_index,
    min_target_index,
    window_range,
    window_rows,
)


class TestWindowRange(unittest.TestCase):
    """Window index arithmetic for a single target row."""

    def test_window_ends_lookback_rows_before_target(self):
        self.assertEqual(window_range(10, lookback=2, timesteps=3), (6, 8))

    def test_window_length_equals_timesteps(self):
        for lookback in range(0, 4):
            for timesteps in range(1, 5):
                t = 12
                start, end = window_range(t, lookback, timesteps)
                self.assertEqual(end, t - lookback)
                self.assertEqual(end - start + 1, timesteps)

    def test_zero_lookback_window_includes_target_row(self):
        self.assertEqual(window_range(5, lookback=0, timesteps=2), (4, 5))

    def test_window_rows(self):
        np.testing.assert_array_equal(window_rows(10, 2, 3), [6, 7, 8])

    def test_start_before_first_row_raises(self):
        with self.assertRaises(IndexError):
            window_range(3, lookback=2, timesteps=3)

    def test_start_before_custom_first_index_raises(self):
        with self.assertRaises(IndexError):
            window_range(10, lookback=2, timesteps=3, first_index=7)

    def test_end_after_last_row_raises(self):
        with self.assertRaises(IndexError):
            window_range(25, lookback=0, timesteps=3, last_index=19)

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            window_range(10, lookback=-1, timesteps=3)
        with self.assertRaises(ValueError):
            window_range(10, lookback=0, timesteps=0)


class TestTargetBounds(unittest.TestCase):

    def test_min_target_index(self):
        self.assertEqual(min_target_index(lookback=2, timesteps=3), 4)
        self.assertEqual(min_target_index(lookback=0, timesteps=1), 0)
        self.assertEqual(min_target_index(lookback=1, timesteps=1, first_index=5), 6)

    def test_max_target_index(self):
        self.assertEqual(max_target_index(20, lookback=2), 19)
        self.assertEqual(max_target_index(20, lookback=2, forecast=True), 21)

    def test_max_target_index_empty_table(self):
        with self.assertRaises(ValueError):
            max_target_index(0, lookback=0)


if __name__ == "__main__":
    unittest.main()
