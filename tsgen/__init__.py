"""Windowed batch generators for training recurrent networks on tabular time series."""

from .assembler import assemble_batch, resolve_columns
from .cycler import BatchCycler, WrapPolicy
from .generators import forecast_generator, series_generator, steps_per_epoch
from .windowing import max_target_index, min_target_index, window_range, window_rows

__version__ = "0.1.0"

__all__ = [
    "BatchCycler",
    "WrapPolicy",
    "assemble_batch",
    "forecast_generator",
    "max_target_index",
    "min_target_index",
    "resolve_columns",
    "series_generator",
    "steps_per_epoch",
    "window_range",
    "window_rows",
]
