"""
YAML -> ExerciseSeed loader.

Loads the default catalog from the bundled ``src/geekfit/exercises.yaml``.
The file holds an ``exercises:`` list; each entry matches the ExerciseSeed
schema.

User overrides: ``~/.geekfit/exercises.yaml`` uses the same layout. An
entry whose name matches a bundled exercise (case-insensitively) is merged
over it, so only changed keys need to be listed. Entries with new names are
appended after the bundled ones.

Usage (internal, called by registry.py):
    from .loader import load_seeds_from_yaml
    seeds = load_seeds_from_yaml()
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..settings import geekfit_home
from .base import ExerciseSeed

_REQUIRED_SEED_FIELDS: frozenset[str] = frozenset({"name", "xp_per_rep"})


def seed_from_dict(d: dict) -> ExerciseSeed:
    """Convert a raw dict (from YAML) to an ExerciseSeed.

    Raises ValueError if a required field is absent or invalid.
    """
    missing = _REQUIRED_SEED_FIELDS - set(d)
    if missing:
        raise ValueError(f"exercise entry missing fields: {sorted(missing)}")
    xp = d["xp_per_rep"]
    if isinstance(xp, bool) or not isinstance(xp, int):
        raise ValueError(f"xp_per_rep must be an integer, got {xp!r}")
    icon = d.get("icon")
    return ExerciseSeed(
        name=str(d["name"]).strip(),
        xp_per_rep=xp,
        icon=str(icon) if icon is not None else None,
    )


def _load_entries(path: Path) -> list[dict]:
    """Return the raw ``exercises`` list from a YAML file."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if not isinstance(data, dict):
        return []
    entries = data.get("exercises") or []
    if not isinstance(entries, list):
        raise ValueError(f"{path}: 'exercises' must be a list")
    return [e for e in entries if isinstance(e, dict)]


def _get_bundled_exercises_path() -> Path:
    # loader.py lives at src/geekfit/core/exercises/loader.py
    return Path(__file__).parent.parent.parent / "exercises.yaml"


def _get_user_exercises_path() -> Path | None:
    """Return ~/.geekfit/exercises.yaml if it exists, else None."""
    p = geekfit_home() / "exercises.yaml"
    return p if p.is_file() else None


def load_seeds_from_yaml(user_path: Path | None = None) -> list[ExerciseSeed]:
    """Return the default catalog, bundled entries first, in file order.

    Bundled entries that fail validation are a packaging error and raise.
    User entries that fail validation are skipped with a warning, and an
    unreadable user file is ignored with a warning.
    """
    merged: dict[str, dict] = {}
    for raw in _load_entries(_get_bundled_exercises_path()):
        seed = seed_from_dict(raw)
        merged[seed.name.lower()] = dict(raw, name=seed.name)

    user = user_path if user_path is not None else _get_user_exercises_path()
    if user is not None and user.exists():
        try:
            user_entries = _load_entries(user)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            warnings.warn(
                f"geekfit: ignoring user exercises file {user} ({exc})",
                stacklevel=2,
            )
            user_entries = []
        for raw in user_entries:
            name = str(raw.get("name", "")).strip()
            if not name:
                warnings.warn("geekfit: skipping user exercise without a name", stacklevel=2)
                continue
            key = name.lower()
            candidate = dict(merged.get(key, {}), **raw)
            try:
                seed_from_dict(candidate)
            except ValueError as exc:
                warnings.warn(
                    f"geekfit: skipping user exercise '{name}' ({exc})",
                    stacklevel=2,
                )
                continue
            # Keep the bundled spelling when only overriding values
            merged[key] = dict(candidate, name=merged.get(key, candidate)["name"])

    return [seed_from_dict(d) for d in merged.values()]
