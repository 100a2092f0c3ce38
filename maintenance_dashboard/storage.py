"""
File-backed key-value slots for the persisted snapshot and notes.

One slot is one UTF-8 file ``<directory>/<key>.json``.  The state slot is
read once at startup and rewritten after every change.
"""

import json
import logging
from pathlib import Path

from .config import DATA_DIR, NOTES_SLOT, STATE_SLOT
from .models import DashboardState
from .snapshot import dump_snapshot_json, normalize_snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, directory: str | Path = DATA_DIR):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Dashboard slots
    # ------------------------------------------------------------------

    def load_state(self) -> DashboardState:
        """Persisted state, or a fresh one when the slot is empty or unreadable."""
        text = self.get(STATE_SLOT)
        if text is None:
            return DashboardState()
        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            logger.exception("Error reading persisted state from %s", self._path(STATE_SLOT))
            return DashboardState()
        return normalize_snapshot(raw)

    def save_state(self, state: DashboardState) -> None:
        self.set(STATE_SLOT, dump_snapshot_json(state))

    def load_notes(self) -> str:
        """Notes are stored as a JSON string; older plain-text slots are read as is."""
        text = self.get(NOTES_SLOT)
        if text is None:
            return ""
        try:
            notes = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Notes slot %s is not JSON; reading it as plain text", self._path(NOTES_SLOT))
            return text
        return notes if isinstance(notes, str) else ""

    def save_notes(self, notes: str) -> None:
        self.set(NOTES_SLOT, json.dumps(notes, ensure_ascii=False))

    def reset(self) -> None:
        """Drop the persisted state; notes are kept."""
        self.remove(STATE_SLOT)
        logger.info("Persisted dashboard state cleared")
