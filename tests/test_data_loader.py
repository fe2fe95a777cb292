"""
Unit tests for the data_loader module.

This module covers CSV loading, chronological row splits and the extension of
a regular time index for forecast rows.
"""

import unittest
import os
import sys
import tempfile

import pandas as pd

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from tsgen.data_loader import (
    check_regular_spacing,
    chronological_index_split,
    extend_time_index,
    load_table,
)


class TestLoadTable(unittest.TestCase):
    """Test cases for loading time-ordered tables."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "series.csv")
        pd.DataFrame(
            {
                "date": ["2020-01-03", "2020-01-01", "2020-01-02", "2020-01-04"],
                "temp": [3.0, 1.0, 2.0, 4.0],
            }
        ).to_csv(self.path, index=False)

    def tearDown(self):
        self.tmp.cleanup()

    def test_load_sorts_and_parses_time(self):
        df = load_table(self.path, "date")

        self.assertTrue(pd.api.types.is_datetime64_any_dtype(df["date"]))
        self.assertListEqual(df["temp"].tolist(), [1.0, 2.0, 3.0, 4.0])
        self.assertListEqual(df.index.tolist(), [0, 1, 2, 3])

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_table(os.path.join(self.tmp.name, "nope.csv"), "date")

    def test_missing_time_column(self):
        with self.assertRaises(ValueError):
            load_table(self.path, "timestamp")

    def test_irregular_spacing_is_logged(self):
        pd.DataFrame(
            {"date": ["2020-01-01", "2020-01-02", "2020-01-05"], "temp": [1, 2, 3]}
        ).to_csv(self.path, index=False)

        with self.assertLogs("tsgen.data_loader", level="WARNING"):
            load_table(self.path, "date")


class TestTimeHelpers(unittest.TestCase):

    def test_check_regular_spacing(self):
        regular = pd.Series(pd.date_range("2020-01-01", periods=5, freq="10min"))
        irregular = pd.Series(pd.to_datetime(["2020-01-01", "2020-01-02", "2020-01-04"]))
        self.assertTrue(check_regular_spacing(regular))
        self.assertFalse(check_regular_spacing(irregular))

    def test_extend_time_index(self):
        times = pd.Series(pd.date_range("2020-01-01 00:00", periods=4, freq="h"))
        future = extend_time_index(times, 2)
        self.assertListEqual(
            list(future),
            [pd.Timestamp("2020-01-01 04:00"), pd.Timestamp("2020-01-01 05:00")],
        )

    def test_extend_time_index_irregular(self):
        times = pd.Series(pd.to_datetime(["2020-01-01", "2020-01-02", "2020-01-04"]))
        with self.assertRaises(ValueError):
            extend_time_index(times, 1)


class TestChronologicalIndexSplit(unittest.TestCase):

    def test_split_ranges(self):
        self.assertListEqual(
            chronological_index_split(20), [(0, 9), (10, 14), (15, 19)]
        )
        self.assertListEqual(
            chronological_index_split(100, train_frac=0.7, val_frac=0.2),
            [(0, 69), (70, 89), (90, 99)],
        )

    def test_invalid_fractions(self):
        with self.assertRaises(ValueError):
            chronological_index_split(20, train_frac=0.8, val_frac=0.2)
        with self.assertRaises(ValueError):
            chronological_index_split(20, train_frac=0.0)
        with self.assertRaises(ValueError):
            chronological_index_split(2)


if __name__ == "__main__":
    unittest.main()
