"""
Default exercise registry.

The default catalog is read from ``src/geekfit/exercises.yaml`` (plus user
overrides) every time the catalog is seeded, so edits to the user file take
effect on the next reset. If no exercise definitions can be loaded a
RuntimeError is raised: the catalog cannot be seeded without them.
"""

from .base import ExerciseSeed
from .loader import load_seeds_from_yaml


def get_default_seeds() -> tuple[ExerciseSeed, ...]:
    """
    Return the default exercise seeds in catalog order.

    Returns:
        Tuple of ExerciseSeed, bundled exercises first

    Raises:
        RuntimeError: If the bundled catalog is empty
    """
    seeds = tuple(load_seeds_from_yaml())
    if not seeds:
        raise RuntimeError(
            "geekfit: no exercise definitions could be loaded. "
            "Check that src/geekfit/exercises.yaml is present and valid."
        )
    return seeds

