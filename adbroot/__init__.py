"""adbroot package init.

Privileged toggle for device-wide root access, gated on the caller's role.
"""

from .config import ServiceConfig, load_config
from .errors import AdbRootError, ConfigError, PermissionDenied, RegistrationError
from .logging import setup_structured_logging  # noqa: F401
from .permissions import (
    Allowed,
    CallerIdentity,
    Denied,
    Role,
    check_caller,
    identity_from_uid,
)
from .properties import RecordingControl, SetpropControl
from .registry import ServiceRegistry, default_registry
from .service import ADBRootService
from .store import Changed, FilePersistence, NoOp, StateStore

__all__ = [
    "ADBRootService",
    "StateStore",
    "FilePersistence",
    "Changed",
    "NoOp",
    "Role",
    "CallerIdentity",
    "Allowed",
    "Denied",
    "check_caller",
    "identity_from_uid",
    "SetpropControl",
    "RecordingControl",
    "ServiceRegistry",
    "default_registry",
    "ServiceConfig",
    "load_config",
    "AdbRootError",
    "PermissionDenied",
    "RegistrationError",
    "ConfigError",
    "setup_structured_logging",
]
