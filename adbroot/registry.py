"""In-process service registry.

Endpoints are published under a unique name and looked up by transports.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict

from .errors import RegistrationError

logger = logging.getLogger(__name__)


class ServiceRegistry:
    def __init__(self) -> None:
        self._services: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def publish(self, name: str, service: Any) -> None:
        if not isinstance(name, str) or not name:
            raise RegistrationError("service name must be non-empty string")
        with self._lock:
            if name in self._services:
                raise RegistrationError(f"service {name!r} already registered")
            self._services[name] = service
        logger.info("published service %s", name)

    def lookup(self, name: str) -> Any:
        with self._lock:
            return self._services[name]

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._services)


default_registry = ServiceRegistry()

__all__ = ["ServiceRegistry", "default_registry"]
