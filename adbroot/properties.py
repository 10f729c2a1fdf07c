"""System property and service-control adapters.

Turning root access off must drop the ``service.adb.root`` property and ask
init to restart ``adbd`` through the ``ctl.restart`` control property.  The
default adapter shells out to ``setprop``; hosts without it can use
:class:`RecordingControl`.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import Protocol

logger = logging.getLogger(__name__)

ROOT_PROPERTY = "service.adb.root"
RESTART_PROPERTY = "ctl.restart"
DEFAULT_DAEMON = "adbd"


class PropertyControl(Protocol):
    def set_property(self, key: str, value: str) -> bool: ...

    def restart(self, service: str) -> bool: ...


class SetpropControl:
    """Set properties by running the ``setprop`` tool."""

    def __init__(self, setprop: str = "setprop"):
        self._setprop = setprop

    def _run(self, cmd: list[str]) -> bool:
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
            return True
        except FileNotFoundError:
            logger.error("command not found: %s", cmd[0])
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr or ""
            logger.error("command failed %s: %s", cmd, stderr.strip())
        return False

    def set_property(self, key: str, value: str) -> bool:
        return self._run([self._setprop, key, value])

    def restart(self, service: str) -> bool:
        return self.set_property(RESTART_PROPERTY, service)


class RecordingControl:
    """Keep property writes in memory instead of applying them."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.properties: dict[str, str] = {}
        self._lock = threading.Lock()

    def set_property(self, key: str, value: str) -> bool:
        with self._lock:
            self.calls.append((key, value))
            self.properties[key] = value
        return True

    def restart(self, service: str) -> bool:
        return self.set_property(RESTART_PROPERTY, service)

    @property
    def restarts(self) -> list[str]:
        with self._lock:
            return [v for k, v in self.calls if k == RESTART_PROPERTY]


__all__ = [
    "ROOT_PROPERTY",
    "RESTART_PROPERTY",
    "DEFAULT_DAEMON",
    "PropertyControl",
    "SetpropControl",
    "RecordingControl",
]
