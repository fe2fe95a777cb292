import unittest
import os
import sys

import numpy as np
import pandas as pd

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from tsgen.data_generators import WindowSequence


class TestWindowSequence(unittest.TestCase):
    """Keras Sequence built on the same window arithmetic."""

    def setUp(self):
        rows = np.arange(30)
        self.df = pd.DataFrame(
            {"a": rows.astype(float), "b": -rows.astype(float), "target": 1000.0 + rows}
        )

    def test_length_and_short_last_batch(self):
        seq = WindowSequence(
            self.df, y="target", x=["a", "b"], lookback=2, timesteps=3,
            start_index=4, end_index=13, batch_size=4,
        )
        self.assertEqual(len(seq), 3)

        X, y = seq[0]
        self.assertEqual(X.shape, (4, 3, 2))
        self.assertEqual(y.shape, (4, 1))
        np.testing.assert_array_equal(X[0, :, 0], [0, 1, 2])

        X_last, y_last = seq[2]
        self.assertEqual(X_last.shape, (2, 3, 2))
        np.testing.assert_array_equal(y_last[:, 0], [1012, 1013])

    def test_shuffled_epoch_visits_every_target_once(self):
        seq = WindowSequence(
            self.df, y="target", x="a", lookback=1, timesteps=2,
            batch_size=5, shuffle=True, seed=7,
        )
        targets = []
        for i in range(len(seq)):
            X, y = seq[i]
            # column a holds the row position, so each window must end one row before its target
            np.testing.assert_array_equal(X[:, -1, 0] + 1, y[:, 0] - 1000)
            targets.extend(y[:, 0].tolist())

        self.assertListEqual(sorted(targets), [1000.0 + t for t in range(2, 30)])

    def test_seeded_shuffle_is_reproducible(self):
        def epoch_targets(seq):
            return np.concatenate([seq[i][1][:, 0] for i in range(len(seq))])

        first = WindowSequence(self.df, y="target", x="a", batch_size=4, shuffle=True, seed=3)
        second = WindowSequence(self.df, y="target", x="a", batch_size=4, shuffle=True, seed=3)
        np.testing.assert_array_equal(epoch_targets(first), epoch_targets(second))

        first.on_epoch_end()
        second.on_epoch_end()
        np.testing.assert_array_equal(epoch_targets(first), epoch_targets(second))

    def test_features_only(self):
        seq = WindowSequence(self.df, x="a", timesteps=4, batch_size=8, return_target=False)
        batch = seq[0]
        self.assertIsInstance(batch, np.ndarray)
        self.assertEqual(batch.shape, (8, 4, 1))

    def test_out_of_range_batch_index(self):
        seq = WindowSequence(self.df, y="target", batch_size=10)
        with self.assertRaises(IndexError):
            seq[len(seq)]

    def test_invalid_configuration(self):
        with self.assertRaises(ValueError):
            WindowSequence(self.df, x="a")
        with self.assertRaises(ValueError):
            WindowSequence(self.df, y="target", batch_size=0)
        with self.assertRaises(IndexError):
            WindowSequence(self.df, y="target", lookback=3, timesteps=2, start_index=2)
        with self.assertRaises(IndexError):
            WindowSequence(self.df, y="target", end_index=30)


if __name__ == "__main__":
    unittest.main()
