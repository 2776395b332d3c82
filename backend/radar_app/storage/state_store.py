"""JSON file persistence for the signal book and notifier settings.

Data structure (state file):
- signals -> list of serialized Signal (most recent first)
- statuses -> {signal_id: status}
- stats -> {strategy_name: {wins, total}}
- revision -> snapshot counter; a lower revision never overwrites a higher one

Writes go to a temporary file that replaces the target, so a crash
mid-write leaves the previous snapshot intact. Uses orjson for
serialization.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
import uuid
from pathlib import Path

import orjson
from pydantic import BaseModel, ValidationError

from radar_core.state import PersistedState

logger = logging.getLogger(__name__)


def _write_atomic(path: Path, payload: bytes) -> None:
    tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        tmp_path.write_bytes(payload)
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


class JsonStateStore:
    """Load and save PersistedState snapshots."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        # Held in worker threads around every write and _saved_revision
        self._write_lock = threading.Lock()
        self._saved_revision = -1

    def _write_if_newer(self, revision: int, payload: bytes) -> bool:
        with self._write_lock:
            if revision < self._saved_revision:
                return False
            _write_atomic(self.path, payload)
            self._saved_revision = revision
            return True

    async def load(self) -> PersistedState:
        """Load the last saved state.

        Returns empty defaults if the file is missing or unreadable.
        """
        if not self.path.exists():
            logger.info(f"No state file at {self.path}, starting empty")
            return PersistedState()

        try:
            raw = await asyncio.to_thread(self.path.read_bytes)
            state = PersistedState.model_validate(orjson.loads(raw))
        except (OSError, orjson.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to load state file {self.path}: {e}")
            return PersistedState()

        logger.info(
            f"Loaded {len(state.signals)} signals and "
            f"{len(state.stats)} strategy stats from {self.path}"
        )
        return state

    async def save(self, state: PersistedState) -> bool:
        """Save a snapshot.

        Writes run one at a time. A snapshot older than the last one
        written is dropped, since the file already holds newer state.

        Returns:
            True if the file holds this snapshot or a newer one
        """
        try:
            payload = orjson.dumps(state.model_dump(mode="json"))
            written = await asyncio.to_thread(
                self._write_if_newer, state.revision, payload
            )
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save state file {self.path}: {e}")
            return False

        if not written:
            logger.debug(
                f"Skipped stale snapshot r{state.revision} "
                f"(r{self._saved_revision} already saved)"
            )
        return True


class NotifierSettings(BaseModel):
    """Stored Telegram credentials."""

    token: str = ""
    chat_id: str = ""


class SettingsStore:
    """Persist notifier credentials set through the API."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> NotifierSettings:
        if not self.path.exists():
            return NotifierSettings()
        try:
            data = orjson.loads(self.path.read_bytes())
            return NotifierSettings.model_validate(data)
        except (OSError, orjson.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to load settings file {self.path}: {e}")
            return NotifierSettings()

    async def save(self, settings: NotifierSettings) -> bool:
        try:
            payload = orjson.dumps(settings.model_dump())
            await asyncio.to_thread(_write_atomic, self.path, payload)
            return True
        except OSError as e:
            logger.error(f"Failed to save settings file {self.path}: {e}")
            return False
