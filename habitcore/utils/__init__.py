# File: utils/__init__.py
"""Pure Python utilities for habitcore.

All functions here can be unit tested without any store or manager setup.

Submodules:
    - dt_utils: Date/time parsing, elapsed-time arithmetic, day ranges
    - math_utils: Rounding, percentages, largest-remainder allocation

Usage:
    from . import dt_utils
    from .math_utils import calculate_percentage
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
