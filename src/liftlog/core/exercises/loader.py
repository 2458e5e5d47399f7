"""
YAML to ExerciseDefinition loader.

Loads the exercise library from the YAML files in the bundled
``src/liftlog/exercises/`` directory. Each file (e.g. push.yaml) holds a
``group`` name and a list of ``exercises`` entries with ``id``, ``name``
and ``categories``.

User overrides: ``<liftlog home>/exercises.yaml`` uses the same layout.
Entries whose id matches a bundled exercise replace it; new ids are added
to the library.

Usage (internal, called by registry.py):
    from .loader import load_exercises_from_yaml
    exercises = load_exercises_from_yaml()
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..config import EXERCISE_CATEGORIES
from ..engine.config_loader import get_home_dir
from .base import ExerciseDefinition

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset({"id", "name", "categories"})


def exercise_from_dict(d: dict, group: str = "") -> ExerciseDefinition:
    """Convert a raw dict (from YAML) to an ExerciseDefinition.

    Raises ValueError if any required field is absent or a category is unknown.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"exercise missing fields: {sorted(missing)}")

    categories = tuple(str(c) for c in d["categories"] or ())
    unknown = [c for c in categories if c not in EXERCISE_CATEGORIES]
    if unknown:
        raise ValueError(f"unknown categories {unknown} for '{d['id']}'")

    return ExerciseDefinition(
        exercise_id=str(d["id"]),
        name=str(d["name"]),
        categories=categories,
        group=str(d.get("group", group)),
        default_photo=d.get("default_photo"),
        is_custom=bool(d.get("is_custom", False)),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; warn and return {} when it cannot be parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"liftlog: cannot read {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _get_bundled_exercises_dir() -> Path | None:
    """Return path to the bundled exercises/ data directory, or None if not found."""
    # loader.py lives at src/liftlog/core/exercises/loader.py
    # three levels up: src/liftlog/
    candidate = Path(__file__).parent.parent.parent / "exercises"
    return candidate if candidate.is_dir() else None


def _get_user_exercises_file() -> Path | None:
    """Return <liftlog home>/exercises.yaml if it exists, else None."""
    p = get_home_dir() / "exercises.yaml"
    return p if p.is_file() else None


def _entries_from_file(path: Path) -> list[ExerciseDefinition]:
    raw = _load_yaml_file(path)
    group = str(raw.get("group", path.stem))
    result: list[ExerciseDefinition] = []
    for entry in raw.get("exercises") or []:
        if not isinstance(entry, dict):
            continue
        try:
            result.append(exercise_from_dict(entry, group))
        except ValueError as exc:
            warnings.warn(
                f"liftlog: skipping exercise in {path.name}: {exc}",
                stacklevel=2,
            )
    return result


def load_exercises_from_yaml(
    bundled_dir: Path | None = None,
    user_file: Path | None = None,
) -> dict[str, ExerciseDefinition]:
    """Return {exercise_id: ExerciseDefinition} loaded from the YAML library.

    Bundled files are read in name order; the user file is applied last so
    its entries win.

    Args:
        bundled_dir: Library directory (default: the bundled one)
        user_file: Override file (default: <liftlog home>/exercises.yaml)

    Returns:
        Library keyed by exercise id, in load order (may be empty)
    """
    if bundled_dir is None:
        bundled_dir = _get_bundled_exercises_dir()
    if user_file is None:
        user_file = _get_user_exercises_file()

    result: dict[str, ExerciseDefinition] = {}

    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            for ex in _entries_from_file(p):
                if ex.exercise_id in result:
                    warnings.warn(
                        f"liftlog: duplicate exercise id '{ex.exercise_id}' in {p.name}",
                        stacklevel=2,
                    )
                result[ex.exercise_id] = ex

    if user_file is not None:
        for ex in _entries_from_file(user_file):
            result[ex.exercise_id] = ex

    return result
