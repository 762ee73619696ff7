"""
Default exercise definitions for geekfit.

Each bundled exercise is described by an ExerciseSeed; the catalog turns
seeds into ExerciseDefinition rows that carry progress.
"""

from .base import ExerciseSeed
from .registry import get_default_seeds

__all__ = [
    "ExerciseSeed",
    "get_default_seeds",
]
