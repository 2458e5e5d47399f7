"""
Base type for exercise definitions.

ExerciseDefinition is display metadata for the catalog; the personal-best
engine only ever sees exercise ids.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExerciseDefinition:
    """One exercise the user can add to a workout."""

    exercise_id: str                  # e.g. "bench-press"
    name: str                         # e.g. "Chest Bench Press"
    categories: tuple[str, ...] = field(default_factory=tuple)
    group: str = ""                   # library file it came from, e.g. "push"
    default_photo: str | None = None
    is_custom: bool = False

    def matches_any(self, categories: list[str] | tuple[str, ...]) -> bool:
        """True if the exercise carries at least one of the given categories."""
        return any(c in categories for c in self.categories)
