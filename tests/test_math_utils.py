"""Tests for math_utils - percentages and largest-remainder allocation."""

from __future__ import annotations

import pytest

from habitcore.utils.math_utils import (
    calculate_percentage,
    clamp,
    largest_remainder_percentages,
    safe_mean,
)


class TestPercentages:
    """Tests for calculate_percentage, clamp and safe_mean."""

    def test_rounding(self) -> None:
        """Percentages are rounded to two decimals."""
        assert calculate_percentage(1, 3) == 33.33
        assert calculate_percentage(50, 100) == 50.0

    @pytest.mark.parametrize("target", [0, -5])
    def test_non_positive_target(self, target: float) -> None:
        """Division by zero is guarded."""
        assert calculate_percentage(5, target) == 0.0

    def test_clamp(self) -> None:
        """Values are bounded on both sides."""
        assert clamp(150, 0, 100) == 100
        assert clamp(-10, 0, 100) == 0
        assert clamp(42, 0, 100) == 42

    def test_safe_mean(self) -> None:
        """Empty input averages to zero."""
        assert safe_mean([]) == 0.0
        assert safe_mean([1, 2]) == 1.5


class TestLargestRemainder:
    """Tests for largest_remainder_percentages."""

    def test_three_way_tie(self) -> None:
        """The leftover unit goes to the first key on a full tie."""
        assert largest_remainder_percentages({"a": 1, "b": 1, "c": 1}) == {
            "a": 34,
            "b": 33,
            "c": 33,
        }

    def test_largest_remainder_wins(self) -> None:
        """2:1 splits as 67/33."""
        assert largest_remainder_percentages({"a": 2, "b": 1}) == {"a": 67, "b": 33}

    @pytest.mark.parametrize(
        "counts",
        [
            {"a": 1},
            {"a": 1, "b": 2, "c": 3, "d": 4, "e": 5, "f": 6},
            {"x": 7, "y": 7, "z": 1},
            {"a": 1, "b": 1, "c": 1, "d": 1, "e": 1, "f": 1, "g": 1},
        ],
    )
    def test_sums_to_total(self, counts: dict[str, int]) -> None:
        """Shares always add up to exactly 100."""
        assert sum(largest_remainder_percentages(counts).values()) == 100

    def test_zero_counts(self) -> None:
        """All-zero counts allocate nothing."""
        assert largest_remainder_percentages({"a": 0, "b": 0}) == {"a": 0, "b": 0}
