from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable

from baby_api.engine.core.models import BrainState, BrainStats, MutationResult, utc_iso


logger = logging.getLogger("baby_api.store")

# One writer lock per data file, shared by every Store opened on it.
_WRITER_LOCKS: dict[Path, threading.Lock] = {}
_WRITER_LOCKS_GUARD = threading.Lock()


def _writer_lock(path: Path) -> threading.Lock:
    key = path.resolve()
    with _WRITER_LOCKS_GUARD:
        lock = _WRITER_LOCKS.get(key)
        if lock is None:
            lock = _WRITER_LOCKS[key] = threading.Lock()
        return lock


def empty_state() -> BrainState:
    return BrainState(stats=BrainStats(created_at=utc_iso()))


class Store:
    """File-backed home of all triggers, the teacher ledger and stats.

    Durable storage is authoritative: every call to `load` reads the file and
    every mutation goes through `update`, which holds the writer lock for the
    whole load-modify-save sequence. Writes replace the file atomically, so
    readers that skip the lock still see either the old or the new record.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = _writer_lock(self.path)

    def initialize(self) -> None:
        """Write an empty record on first run."""

        with self._lock:
            if self.path.exists():
                return
            state = empty_state()
            if self.save(state):
                logger.info("Initialized empty store at %s", self.path)

    def load(self) -> BrainState:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except FileNotFoundError:
            logger.debug("No store at %s yet, starting empty", self.path)
            return empty_state()
        except (OSError, ValueError) as e:
            logger.warning("Could not read store %s (%s), starting empty", self.path, e)
            return empty_state()

        if not isinstance(raw, dict):
            logger.warning("Store %s does not hold an object, starting empty", self.path)
            return empty_state()
        return BrainState.from_dict(raw)

    def save(self, state: BrainState) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=self.path.name + ".", suffix=".tmp", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(state.to_dict(), handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError:
            logger.exception("Failed to write store %s", self.path)
            return False
        return True

    def update(self, updater: Callable[[BrainState], MutationResult]) -> MutationResult:
        with self._lock:
            state = self.load()
            result = updater(state)
            if result.changed:
                result.persisted = self.save(state)
            return result
