"""Root access state and its on-disk mirror.

The in-memory flag is authoritative for the lifetime of the process.  The
file under the storage directory holds ``"0"`` or ``"1"`` and is rewritten in
full after every confirmed transition.  Write failures are logged and never
raised; the next successful transition brings the file back in sync.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_DIR = Path("/data/adbroot")
STATE_FILE = "enabled"


class FilePersistence:
    """Read and write the state file."""

    def __init__(self, storage_dir: Union[str, Path] = DEFAULT_STORAGE_DIR):
        self.path = Path(storage_dir) / STATE_FILE

    def load(self) -> bool:
        """Return the persisted value, ``False`` when absent or unreadable."""
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            logger.info("no persisted state at %s, defaulting to disabled", self.path)
            return False
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", self.path, exc)
            return False
        try:
            return int(text.strip()) != 0
        except ValueError:
            logger.warning(
                "Malformed persisted state %r in %s, defaulting to disabled",
                text[:16],
                self.path,
            )
            return False

    def save(self, enabled: bool) -> bool:
        """Replace the state file with ``"1"`` or ``"0"``."""
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".enabled.")
            with os.fdopen(fd, "w") as fh:
                fh.write("1" if enabled else "0")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
            return True
        except OSError as exc:
            logger.warning("Failed to write %s: %s", self.path, exc)
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            return False


@dataclass(frozen=True)
class Changed:
    old: bool
    new: bool
    persisted: bool = True

    @property
    def disabled(self) -> bool:
        """True for an enabled -> disabled transition."""
        return self.old and not self.new


@dataclass(frozen=True)
class NoOp:
    value: bool


Transition = Union[Changed, NoOp]


class StateStore:
    """Lock-guarded boolean synchronized with a :class:`FilePersistence`."""

    def __init__(self, persistence: FilePersistence, initial: Optional[bool] = None):
        self._persistence = persistence
        self._lock = threading.Lock()
        self._enabled = persistence.load() if initial is None else bool(initial)

    def get(self) -> bool:
        with self._lock:
            return self._enabled

    def try_set(self, value: bool) -> Transition:
        """Set the flag to *value*, persisting it if it changed."""
        return self.transaction(value)

    def transaction(
        self, value: bool, on_change: Optional[Callable[[Changed], None]] = None
    ) -> Transition:
        """Compare-and-set *value*, then persist and run *on_change* under the lock."""
        value = bool(value)
        with self._lock:
            if value == self._enabled:
                return NoOp(value)
            old = self._enabled
            self._enabled = value
            persisted = self._persistence.save(value)
            change = Changed(old, value, persisted)
            if on_change is not None:
                on_change(change)
            return change


__all__ = [
    "DEFAULT_STORAGE_DIR",
    "STATE_FILE",
    "FilePersistence",
    "StateStore",
    "Changed",
    "NoOp",
    "Transition",
]
