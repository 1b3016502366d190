# file: src/forecast/ranges.py
"""
Range resolution for row selection.

A Range holds optional start/end offsets. Missing start means the first row,
missing end means the last row, negative offsets count from the end of the
series. Resolved bounds are inclusive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from src.forecast.errors import InvalidRangeError


@dataclass(frozen=True)
class Range:
    """Sparse, possibly open-ended row range"""
    start: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def finite(cls, start: int, end: int) -> "Range":
        """Range with both bounds given"""
        return cls(start=start, end=end)

    def limits(self, length: int) -> Tuple[int, int]:
        """
        Resolve to concrete (start, end) inclusive bounds

        Args:
            length: Number of rows in the series

        Returns:
            (start, end) with 0 <= start <= end <= length - 1

        Raises:
            InvalidRangeError: if the range does not fit the series
        """
        if length <= 0:
            raise InvalidRangeError(f"limit undefined for series of length {length}")

        start = 0 if self.start is None else self.start
        end = length - 1 if self.end is None else self.end

        if start < 0:
            start += length
        if end < 0:
            end += length

        if start < 0 or end < 0:
            raise InvalidRangeError(f"invalid range {self}: resolves before row 0 (length={length})")
        if start > end:
            raise InvalidRangeError(f"invalid range {self}: start {start} > end {end}")
        if start >= length or end >= length:
            raise InvalidRangeError(f"invalid range {self}: out of bounds for length {length}")

        return start, end

    def nrows(self, length: int) -> int:
        """Number of rows the range selects from a series of given length"""
        start, end = self.limits(length)
        return end - start + 1


def resolve(range_spec: Optional[Range], length: int) -> Tuple[int, int]:
    """Resolve an optional range; None selects the whole series"""
    return (range_spec or Range()).limits(length)


def nrows(range_spec: Optional[Range], length: int) -> int:
    """Row count implied by an optional range"""
    return (range_spec or Range()).nrows(length)
