"""Shared utility functions for cosmojax.

Provides the angle conversion helper used by the formula evaluator and the
elementary rotations.
"""

from cosmojax.utils._angle import to_radians

__all__ = [
    "to_radians",
]
