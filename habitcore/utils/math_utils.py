# File: utils/math_utils.py
"""Math and calculation utilities for habitcore.

Pure Python math functions shared by the engines.

Functions:
    - round_value: Consistent rounding to configured precision
    - calculate_percentage: Progress percentage calculations
    - clamp: Bound a value to a range
    - safe_mean: Mean of a possibly empty sequence
    - largest_remainder_percentages: Integer percentages that sum to 100
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import math

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

DATA_FLOAT_PRECISION = 2


# ==============================================================================
# Rounding and Percentages
# ==============================================================================


def round_value(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a value to the configured precision.

    Prevents float arithmetic drift (e.g., 27.499999999999996 → 27.5).

    Examples:
        round_value(10.456) → 10.46
        round_value(10.0) → 10.0
    """
    return round(value, precision)


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Returns:
        Percentage with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0  # Division by zero protection
    """
    if target <= 0:
        return 0.0
    return round_value((current / target) * 100, precision)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))


def safe_mean(values: Sequence[float], precision: int = DATA_FLOAT_PRECISION) -> float:
    """Return the rounded arithmetic mean, or 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return round_value(sum(values) / len(values), precision)


# ==============================================================================
# Largest Remainder Allocation
# ==============================================================================


def largest_remainder_percentages(
    counts: Mapping[str, int], total: int = 100
) -> dict[str, int]:
    """Allocate integer percentages proportional to counts, summing to `total`.

    Floors every exact share, then hands the leftover units to the keys with
    the largest fractional remainders (ties go to the larger count, then the
    key name, so the result is deterministic).

    Args:
        counts: Mapping of key → non-negative count
        total: The amount to distribute (100 for percentages)

    Returns:
        Mapping of key → integer share. All zeros if the counts sum to zero.

    Examples:
        largest_remainder_percentages({"a": 1, "b": 1, "c": 1}) → {"a": 34, "b": 33, "c": 33}
        largest_remainder_percentages({"a": 2, "b": 1}) → {"a": 67, "b": 33}
    """
    count_sum = sum(counts.values())
    if count_sum <= 0:
        return dict.fromkeys(counts, 0)

    exact = {key: count * total / count_sum for key, count in counts.items()}
    shares = {key: math.floor(value) for key, value in exact.items()}
    leftover = total - sum(shares.values())

    ranked = sorted(
        counts,
        key=lambda key: (-(exact[key] - shares[key]), -counts[key], key),
    )
    for key in ranked[:leftover]:
        shares[key] += 1

    _LOGGER.debug("Allocated %s across %d keys: %s", total, len(counts), shares)
    return shares
