"""
Cursor over a range of target rows that hands out batches indefinitely.

Keras pulls batches from a generator for as many steps as it was told, epoch
after epoch, so the cursor never runs dry: once it passes ``end_index`` it
wraps back to ``start_index``. What happens to a batch that straddles the end
of the range is decided by :class:`WrapPolicy`.
"""

import logging
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class WrapPolicy(Enum):
    """How a batch that runs past ``end_index`` is completed."""

    CYCLE = "cycle"  # fill the rest of the batch from start_index
    TRUNCATE = "truncate"  # yield a short final batch
    DROP = "drop"  # skip the incomplete tail and restart


def coerce_policy(policy) -> WrapPolicy:
    """Accept a :class:`WrapPolicy` or its string value."""
    if isinstance(policy, WrapPolicy):
        return policy
    try:
        return WrapPolicy(str(policy).lower())
    except ValueError:
        valid = ", ".join(p.value for p in WrapPolicy)
        raise ValueError(f"Unknown wrap policy {policy!r}; expected one of: {valid}")


class BatchCycler:
    """Stateful cursor yielding groups of target-row indices.

    Example with ``start_index=1, end_index=10, batch_size=4``:

    - ``CYCLE``: ``[1-4], [5-8], [9, 10, 1, 2], [3-6], ...``
    - ``TRUNCATE``: ``[1-4], [5-8], [9, 10], [1-4], ...``
    - ``DROP``: ``[1-4], [5-8], [1-4], ...``
    """

    def __init__(
        self,
        start_index: int,
        end_index: int,
        batch_size: int,
        policy=WrapPolicy.CYCLE,
    ):
        for name, value in (
            ("start_index", start_index),
            ("end_index", end_index),
            ("batch_size", batch_size),
        ):
            if not isinstance(value, (int, np.integer)) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")

        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if start_index < 0:
            raise ValueError(f"start_index must be >= 0, got {start_index}")
        if start_index > end_index:
            raise ValueError(
                f"start_index ({start_index}) must be <= end_index ({end_index})"
            )

        self.start_index = int(start_index)
        self.end_index = int(end_index)
        self.batch_size = int(batch_size)
        self.policy = coerce_policy(policy)

        if self.policy == WrapPolicy.DROP and self.batch_size > self.span:
            raise ValueError(
                f"batch_size ({self.batch_size}) exceeds the {self.span} rows in "
                f"[{self.start_index}, {self.end_index}]; the 'drop' policy would "
                "never yield a batch"
            )

        self._cursor = self.start_index

    @property
    def span(self) -> int:
        """Number of target rows in the range."""
        return self.end_index - self.start_index + 1

    @property
    def position(self) -> int:
        """Row the next batch starts at."""
        return self._cursor

    @property
    def batches_per_cycle(self) -> int:
        """Number of batches that cover the range once."""
        if self.policy == WrapPolicy.DROP:
            return self.span // self.batch_size
        return -(-self.span // self.batch_size)

    def reset(self) -> None:
        self._cursor = self.start_index

    def next_rows(self) -> np.ndarray:
        """Return the next group of target rows and advance the cursor."""
        if self.policy == WrapPolicy.CYCLE:
            offsets = (self._cursor - self.start_index + np.arange(self.batch_size)) % self.span
            rows = self.start_index + offsets
            self._cursor = self.start_index + int(offsets[-1] + 1) % self.span
        elif self.policy == WrapPolicy.TRUNCATE:
            stop = min(self._cursor + self.batch_size - 1, self.end_index)
            rows = np.arange(self._cursor, stop + 1)
            self._cursor = int(stop) + 1
        else:
            if self._cursor + self.batch_size - 1 > self.end_index:
                logger.debug(
                    "Dropping %d tail rows, restarting at %d",
                    self.end_index - self._cursor + 1,
                    self.start_index,
                )
                self._cursor = self.start_index
            rows = np.arange(self._cursor, self._cursor + self.batch_size)
            self._cursor += self.batch_size

        if self._cursor > self.end_index:
            self._cursor = self.start_index

        return rows.astype(np.int64)

    def __iter__(self):
        return self

    def __next__(self) -> np.ndarray:
        return self.next_rows()

    def __repr__(self):
        return (
            f"BatchCycler(start_index={self.start_index}, end_index={self.end_index}, "
            f"batch_size={self.batch_size}, policy={self.policy.value!r}, "
            f"position={self._cursor})"
        )
