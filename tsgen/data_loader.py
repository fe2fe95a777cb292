"""
Loading helpers for time-ordered tables.

These functions turn a CSV file into the kind of table the generators expect:
sorted by time, positionally indexed, and regularly spaced. They also carve a
table into chronological train/validation/test row ranges.
"""

import logging
from pathlib import Path
from typing import List, Tuple, Union

import pandas as pd
from pandas.tseries.frequencies import to_offset

logger = logging.getLogger(__name__)


def check_regular_spacing(times: pd.Series) -> bool:
    """Return ``True`` if consecutive timestamps are evenly spaced."""
    if len(times) < 3:
        return True
    deltas = pd.Series(times).diff().iloc[1:]
    return bool((deltas == deltas.iloc[0]).all())


def load_table(file_path: Union[str, Path], time_column: str, **read_kwargs) -> pd.DataFrame:
    """
    Load a CSV file into a time-sorted DataFrame.

    Args:
        file_path: Path to the CSV file
        time_column: Name of the timestamp column
        **read_kwargs: Extra arguments for ``pandas.read_csv``

    Returns:
        DataFrame sorted by *time_column* with a fresh ``RangeIndex``

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the time column is missing or the table is empty
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    df = pd.read_csv(path, **read_kwargs)
    if time_column not in df.columns:
        raise ValueError(
            f"Time column '{time_column}' not found; available columns: {list(df.columns)}"
        )
    if df.empty:
        raise ValueError(f"No rows in {file_path}")

    df[time_column] = pd.to_datetime(df[time_column])
    if not df[time_column].is_monotonic_increasing:
        logger.info("Sorting %d rows by '%s'", len(df), time_column)
        df = df.sort_values(time_column, kind="stable")
    df = df.reset_index(drop=True)

    if not check_regular_spacing(df[time_column]):
        logger.warning(
            "Timestamps in %s are not evenly spaced; windows will span uneven periods",
            file_path,
        )

    logger.info("Loaded table with shape %s from %s", df.shape, file_path)
    return df


def chronological_index_split(
    n_rows: int,
    train_frac: float = 0.5,
    val_frac: float = 0.25,
) -> List[Tuple[int, int]]:
    """
    Split ``range(n_rows)`` into consecutive train/validation/test row ranges.

    Returns:
        ``[(train_start, train_end), (val_start, val_end), (test_start, test_end)]``
        with inclusive ends, suitable for ``start_index``/``end_index``.
    """
    if not (0 < train_frac < 1) or not (0 < val_frac < 1):
        raise ValueError("train_frac and val_frac must be within (0,1)")
    if train_frac + val_frac >= 1:
        raise ValueError("train_frac + val_frac must be < 1 to leave room for test set")

    n_train = int(round(n_rows * train_frac))
    n_val = int(round(n_rows * val_frac))
    train_end = n_train - 1
    val_end = n_train + n_val - 1

    if train_end < 0 or val_end <= train_end or val_end >= n_rows - 1:
        raise ValueError(
            f"{n_rows} rows are too few for fractions train={train_frac}, val={val_frac}"
        )

    return [(0, train_end), (train_end + 1, val_end), (val_end + 1, n_rows - 1)]


def extend_time_index(times: pd.Series, periods: int) -> pd.DatetimeIndex:
    """
    Timestamps of the *periods* rows that would follow *times*.

    Used to label forecasts for target rows past the end of the table.
    """
    if periods < 0:
        raise ValueError(f"periods must be >= 0, got {periods}")

    index = pd.DatetimeIndex(times)
    freq = pd.infer_freq(index) if len(index) >= 3 else None
    if freq is None:
        raise ValueError("Cannot infer a regular frequency from the time column")

    offset = to_offset(freq)
    return pd.date_range(index[-1] + offset, periods=periods, freq=offset)
