from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RowCapacity:
    """Row allocation policy for pages whose row count is not known upfront.

    Parameters
    ----------
    initial
        number of rows allocated when a page is started.
    growth
        factor applied to the current capacity when it is exhausted.
    minimum_step
        minimum number of rows added by a single growth step.
    """

    initial: int = 10000
    growth: float = 2.0
    minimum_step: int = 3

    def __post_init__(self) -> None:
        if self.initial < 0:
            msg = f"initial capacity must be non-negative, got {self.initial}"
            raise ValueError(msg)
        if self.growth < 1:
            msg = f"growth factor must be at least 1, got {self.growth}"
            raise ValueError(msg)
        if self.minimum_step < 1:
            msg = f"minimum growth step must be positive, got {self.minimum_step}"
            raise ValueError(msg)

    def grow(self, capacity: int, needed: int) -> int:
        """Return the new capacity required to hold at least `needed` rows."""
        while capacity < needed:
            capacity = max(int(capacity * self.growth), capacity + self.minimum_step)
        return capacity


def default_row_capacity() -> RowCapacity:
    """Return the default row allocation policy of the package.

    Examples
    --------
    >>> from sddsplain import settings
    >>> settings.DEFAULT_ROW_CAPACITY = settings.RowCapacity(initial=100)
    >>> settings.DEFAULT_ROW_CAPACITY = settings.default_row_capacity()
    """
    return RowCapacity()


DEFAULT_ROW_CAPACITY: RowCapacity = default_row_capacity()
"""Global row allocation policy used when none is passed explicitly.

Modify this global variable before converting data with this package.
"""

MAX_STRING_LENGTH: int = 1023
"""Longest string or character field, in bytes, accepted from plain-data input."""

INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1
