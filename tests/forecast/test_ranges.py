"""
Range resolution tests

Absent bounds default to the whole series, negatives count from the end,
inconsistent specs fail loud.
"""

import pytest

from src.forecast.errors import InvalidRangeError
from src.forecast.ranges import Range, nrows, resolve


@pytest.mark.smoke
class TestRangeDefaults:
    """Absent and negative bounds"""

    def test_open_range_is_whole_series(self):
        assert resolve(Range(), 10) == (0, 9)

    def test_none_is_whole_series(self):
        assert resolve(None, 10) == (0, 9)

    def test_negative_start_counts_from_end(self):
        assert resolve(Range(start=-3), 10) == (7, 9)

    def test_negative_end_counts_from_end(self):
        assert Range(start=2, end=-2).limits(10) == (2, 8)

    def test_finite_range(self):
        assert Range.finite(3, 5).limits(10) == (3, 5)

    def test_nrows(self):
        assert Range(start=-4).nrows(10) == 4
        assert nrows(Range(end=5), 9) == 6
        assert nrows(None, 7) == 7


@pytest.mark.fail_loud
class TestRangeValidation:
    """Inconsistent specs raise InvalidRangeError"""

    def test_start_after_end(self):
        with pytest.raises(InvalidRangeError):
            resolve(Range(start=5, end=2), 10)

    def test_end_out_of_bounds(self):
        with pytest.raises(InvalidRangeError):
            Range(end=10).limits(10)

    def test_start_out_of_bounds(self):
        with pytest.raises(InvalidRangeError):
            Range(start=10).limits(10)

    def test_negative_beyond_length(self):
        with pytest.raises(InvalidRangeError):
            Range(start=-11).limits(10)

    def test_empty_series(self):
        with pytest.raises(InvalidRangeError):
            Range().limits(0)

    def test_invalid_range_is_value_error(self):
        """Callers treating bad input as ValueError still catch it"""
        with pytest.raises(ValueError):
            Range(start=3, end=1).nrows(5)
