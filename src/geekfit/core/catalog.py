"""
Exercise catalog: the per-exercise XP ledger.

ExerciseCatalog wraps the list of ExerciseDefinition rows held by a
ProgressState and provides name resolution and XP application. It works on
the list in place, so the engine only ever hands it a private working copy.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from .config import SEARCH_RESULT_LIMIT
from .errors import InvalidInputError, NotFoundError
from .exercises import ExerciseSeed
from .models import ExerciseDefinition

logger = logging.getLogger(__name__)


class ExerciseCatalog:
    """
    Name-aware view over a list of exercises.

    Exercises stay in insertion order; that order decides which exercise a
    substring lookup returns when several match.
    """

    def __init__(self, exercises: list[ExerciseDefinition]):
        self._exercises = exercises

    def __iter__(self) -> Iterator[ExerciseDefinition]:
        return iter(self._exercises)

    def __len__(self) -> int:
        return len(self._exercises)

    # ── Lookups ─────────────────────────────────────────────────────────────

    def get(self, exercise_id: int) -> ExerciseDefinition:
        """
        Return the exercise with the given id.

        Raises:
            NotFoundError: If no exercise has that id
        """
        for ex in self._exercises:
            if ex.exercise_id == exercise_id:
                return ex
        raise NotFoundError(f"No exercise with id {exercise_id}")

    def find_by_name(self, name: str) -> ExerciseDefinition | None:
        """Case-insensitive exact name match, or None."""
        wanted = name.strip().lower()
        for ex in self._exercises:
            if ex.name.lower() == wanted:
                return ex
        return None

    def lookup(self, ref: str | int) -> ExerciseDefinition:
        """
        Resolve an exercise reference.

        Integers are treated as ids. Strings are matched against names:
        case-insensitive exact match first, then the first case-insensitive
        substring match in catalog order. An all-digit string that matches
        no name falls back to an id.

        Args:
            ref: Exercise id, full name or name fragment

        Returns:
            The matching ExerciseDefinition

        Raises:
            NotFoundError: If nothing matches
        """
        if isinstance(ref, int):
            return self.get(ref)

        text = ref.strip()
        if not text:
            raise NotFoundError("Empty exercise reference")

        exact = self.find_by_name(text)
        if exact is not None:
            return exact

        fragment = text.lower()
        for ex in self._exercises:
            if fragment in ex.name.lower():
                return ex
        if text.isdigit():
            return self.get(int(text))
        raise NotFoundError(f"No exercise found matching '{ref}'")

    def search(self, fragment: str, limit: int = SEARCH_RESULT_LIMIT) -> list[ExerciseDefinition]:
        """Exercises whose name contains *fragment*, highest level first."""
        needle = fragment.strip().lower()
        matches = [ex for ex in self._exercises if needle in ex.name.lower()]
        matches.sort(key=lambda ex: ex.current_level, reverse=True)
        return matches[:limit]

    def ranked(self) -> list[ExerciseDefinition]:
        """All exercises ordered by level, then total XP, both descending."""
        return sorted(
            self._exercises,
            key=lambda ex: (ex.current_level, ex.total_xp),
            reverse=True,
        )

    # ── Aggregates ──────────────────────────────────────────────────────────

    @property
    def total_xp(self) -> int:
        return sum(ex.total_xp for ex in self._exercises)

    @property
    def total_level(self) -> int:
        """Sum of per-exercise levels."""
        return sum(ex.current_level for ex in self._exercises)

    # ── Mutations ───────────────────────────────────────────────────────────

    def apply_xp(self, exercise_id: int, xp_delta: int) -> tuple[int, int]:
        """
        Add XP to an exercise.

        Args:
            exercise_id: Exercise to credit
            xp_delta: XP to add (must be positive)

        Returns:
            (old_level, new_level); new_level > old_level means a level-up

        Raises:
            InvalidInputError: If xp_delta is not positive
            NotFoundError: If the exercise does not exist
        """
        if xp_delta <= 0:
            raise InvalidInputError(f"xp_delta must be positive, got {xp_delta}")
        ex = self.get(exercise_id)
        old_level = ex.current_level
        ex.total_xp += xp_delta
        new_level = ex.current_level
        if new_level > old_level:
            logger.info("%s leveled up: %d -> %d", ex.name, old_level, new_level)
        return old_level, new_level

    def add(
        self,
        exercise_id: int,
        name: str,
        xp_per_rep: int,
        icon: str | None = None,
        created_at: datetime | None = None,
    ) -> ExerciseDefinition:
        """
        Append a new exercise with zero XP.

        Raises:
            InvalidInputError: If the name is empty or taken, or xp_per_rep <= 0
        """
        clean = name.strip()
        if not clean:
            raise InvalidInputError("Exercise name cannot be empty")
        if clean.isdigit():
            raise InvalidInputError("Exercise name cannot be purely numeric")
        if isinstance(xp_per_rep, bool) or not isinstance(xp_per_rep, int) or xp_per_rep <= 0:
            raise InvalidInputError(f"xp_per_rep must be a positive integer, got {xp_per_rep!r}")
        if self.find_by_name(clean) is not None:
            raise InvalidInputError(f"An exercise named '{clean}' already exists")

        ex = ExerciseDefinition(
            exercise_id=exercise_id,
            name=clean,
            xp_per_rep=xp_per_rep,
            icon=icon,
            created_at=created_at,
        )
        self._exercises.append(ex)
        return ex

    def remove(self, exercise_id: int) -> ExerciseDefinition:
        """Remove and return an exercise. Its log entries are the caller's concern."""
        ex = self.get(exercise_id)
        self._exercises.remove(ex)
        return ex


def seed_exercises(
    seeds: Iterable[ExerciseSeed],
    created_at: datetime,
    first_id: int = 1,
) -> list[ExerciseDefinition]:
    """Build fresh zero-XP catalog rows from seeds, numbering ids from first_id."""
    return [
        ExerciseDefinition(
            exercise_id=first_id + i,
            name=seed.name,
            xp_per_rep=seed.xp_per_rep,
            icon=seed.icon,
            created_at=created_at,
        )
        for i, seed in enumerate(seeds)
    ]
