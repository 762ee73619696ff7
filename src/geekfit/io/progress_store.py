"""
JSON snapshot storage for progress data.

The whole ProgressState lives in one JSON document (progress.json). Every
save writes the new document to a temporary file and atomically replaces
the old one, so a reader or a crashed writer never sees half a document.
"""

import copy
import json
import logging
import os
import shutil
from pathlib import Path
from typing import Protocol

from ..core.errors import PersistenceError
from ..core.models import ProgressState
from ..core.settings import geekfit_home
from .serializers import ValidationError, dict_to_state, state_to_json

logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    """Persistence port consumed by the engine."""

    def load(self) -> ProgressState | None:
        """Return the stored state, or None if nothing has been stored yet."""
        ...

    def save(self, state: ProgressState) -> None:
        """Durably replace the stored state; all-or-nothing."""
        ...


class JsonProgressStore:
    """
    Stores progress as a single pretty-printed JSON document.

    Files (all in the same directory):
    - progress.json: current state
    - progress.backup.json: previous state, refreshed before each write
    - progress.json.tmp: transient, exists only during a write
    """

    def __init__(self, data_path: str | Path):
        """
        Initialize the store.

        Args:
            data_path: Path to the progress JSON file
        """
        self.data_path = Path(data_path)
        self.backup_path = self.data_path.with_name(
            f"{self.data_path.stem}.backup{self.data_path.suffix}"
        )
        self._temp_path = self.data_path.with_name(self.data_path.name + ".tmp")

    def exists(self) -> bool:
        """Check if the data file exists."""
        return self.data_path.exists()

    def load(self) -> ProgressState | None:
        """
        Load and validate the stored state.

        Returns:
            ProgressState, or None if the file does not exist yet

        Raises:
            PersistenceError: If the file cannot be read or fails validation
        """
        if not self.data_path.exists():
            return None
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return dict_to_state(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise PersistenceError(f"Failed to load {self.data_path}: {e}") from e

    def save(self, state: ProgressState) -> None:
        """
        Atomically replace the stored state.

        The previous file is copied to the backup path first; a failed
        backup is logged and does not stop the write.

        Raises:
            PersistenceError: If the new document cannot be written
        """
        text = state_to_json(state)
        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            self._backup()
            with open(self._temp_path, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self._temp_path, self.data_path)
        except OSError as e:
            if self._temp_path.exists():
                self._temp_path.unlink()
            raise PersistenceError(f"Failed to write {self.data_path}: {e}") from e
        logger.debug("Saved progress to %s", self.data_path)

    def _backup(self) -> None:
        if not self.data_path.exists():
            return
        try:
            shutil.copyfile(self.data_path, self.backup_path)
        except OSError as e:
            logger.warning("Failed to create backup %s: %s", self.backup_path, e)

    def has_backup(self) -> bool:
        return self.backup_path.exists()


class InMemoryProgressStore:
    """
    Keeps the stored state in memory. Used by tests and embedding callers.

    Saved states are deep-copied so later mutations by the caller cannot
    leak into the "durable" copy.
    """

    def __init__(self, state: ProgressState | None = None):
        self._state = copy.deepcopy(state) if state is not None else None
        self.save_count = 0

    def load(self) -> ProgressState | None:
        return copy.deepcopy(self._state) if self._state is not None else None

    def save(self, state: ProgressState) -> None:
        self._state = copy.deepcopy(state)
        self.save_count += 1


def get_default_data_path(data_dir: Path | None = None) -> Path:
    """
    Get the default progress file path.

    Args:
        data_dir: Directory from settings (storage.data_dir), if configured

    Returns:
        ``<data_dir>/progress.json``, defaulting to ~/.geekfit/progress.json
    """
    base = data_dir if data_dir is not None else geekfit_home()
    return base / "progress.json"
