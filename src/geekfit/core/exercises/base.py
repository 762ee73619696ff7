"""
Base type for default exercise definitions.

ExerciseSeed is the static, bundled description of an exercise: its name,
XP value per rep and display icon. The catalog turns seeds into mutable
ExerciseDefinition rows with progress attached.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExerciseSeed:
    """Static definition of one default exercise."""

    name: str                 # e.g. "Pushups"
    xp_per_rep: int           # XP earned per repetition
    icon: str | None = None   # Material icon name used by front ends

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("ExerciseSeed.name must be non-empty")
        if self.xp_per_rep <= 0:
            raise ValueError(f"ExerciseSeed.xp_per_rep must be positive for {self.name!r}")
