"""Root access toggle service.

``ADBRootService`` gates each call on the caller's role, reads or updates the
:class:`~adbroot.store.StateStore` and, when root access is switched off,
clears ``service.adb.root`` and restarts ``adbd`` so the daemon drops its
privileges.  The service only records the decision; enforcing it is up to
the daemon.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .config import SERVICE_NAME, ServiceConfig
from .errors import PermissionDenied, RegistrationError
from .observability.trace import Tracer
from .permissions import (
    GET_ENABLED_ROLES,
    SET_ENABLED_ROLES,
    CallerIdentity,
    Denied,
    IdentityResolver,
    Role,
    check_caller,
    process_identity,
)
from .properties import DEFAULT_DAEMON, ROOT_PROPERTY, PropertyControl, SetpropControl
from .registry import ServiceRegistry, default_registry
from .store import Changed, FilePersistence, StateStore

logger = logging.getLogger(__name__)


class ADBRootService:
    """Process-wide root access toggle."""

    def __init__(
        self,
        store: StateStore,
        control: Optional[PropertyControl] = None,
        resolver: Optional[IdentityResolver] = None,
        daemon: str = DEFAULT_DAEMON,
        tracer: Optional[Tracer] = None,
    ):
        self._store = store
        self._control = control if control is not None else SetpropControl()
        self._resolver = resolver if resolver is not None else process_identity
        self._daemon = daemon
        self._tracer = tracer if tracer is not None else Tracer()

    @classmethod
    def from_config(
        cls,
        config: ServiceConfig,
        control: Optional[PropertyControl] = None,
        resolver: Optional[IdentityResolver] = None,
    ) -> "ADBRootService":
        """Load the persisted state described by *config* and build the service."""
        store = StateStore(FilePersistence(config.storage_dir))
        if resolver is None:
            uid_roles = config.uid_roles

            def resolver() -> CallerIdentity:
                return process_identity(uid_roles)

        logger.info("root access initially %s", "enabled" if store.get() else "disabled")
        return cls(store, control=control, resolver=resolver, daemon=config.daemon)

    def _authorize(
        self, identity: Optional[CallerIdentity], required: Iterable[Role]
    ) -> CallerIdentity:
        if identity is None:
            identity = self._resolver()
        decision = check_caller(identity, required)
        if isinstance(decision, Denied):
            logger.error(
                "%s (uid=%s role=%s)", decision.reason, identity.uid, identity.role.value
            )
            raise PermissionDenied(decision.reason)
        return identity

    def set_enabled(self, enabled: bool, *, identity: Optional[CallerIdentity] = None) -> None:
        """Turn root access on or off.  Only ``system`` may call this."""
        with self._tracer.start_span("adbroot.setEnabled", enabled=bool(enabled)):
            caller = self._authorize(identity, SET_ENABLED_ROLES)
            if not isinstance(enabled, bool):
                raise TypeError('"enabled" must be a boolean')
            result = self._store.transaction(enabled, on_change=self.on_transition)
            if isinstance(result, Changed):
                logger.info(
                    "root access %s by uid=%s",
                    "enabled" if result.new else "disabled",
                    caller.uid,
                )

    def get_enabled(self, *, identity: Optional[CallerIdentity] = None) -> bool:
        """Return whether root access is enabled.  ``system`` and ``shell`` may ask."""
        with self._tracer.start_span("adbroot.getEnabled"):
            self._authorize(identity, GET_ENABLED_ROLES)
            return self._store.get()

    def on_transition(self, change: Changed) -> None:
        # Called with the store lock held.
        if not change.disabled:
            return
        try:
            self._control.set_property(ROOT_PROPERTY, "0")
            self._control.restart(self._daemon)
        except Exception:
            logger.exception("failed to restart %s after disabling root", self._daemon)

    def register(
        self, registry: ServiceRegistry = default_registry, name: str = SERVICE_NAME
    ) -> None:
        """Publish the service; a failure terminates the process."""
        try:
            registry.publish(name, self)
        except RegistrationError as exc:
            logger.critical("Could not register adbroot service: %s", exc)
            raise SystemExit(1) from exc


__all__ = ["ADBRootService"]
