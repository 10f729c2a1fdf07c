"""Service configuration.

Values come from built-in defaults, then an optional YAML file, then the
``ADBROOT_*`` environment variables.  A minimal file looks like::

    version: 0.1
    storage_dir: /data/adbroot
    socket_path: /dev/socket/adbroot
    system_uids: [1000]
    shell_uids: [2000]
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional, Union

import yaml

from .errors import ConfigError
from .permissions import AID_SHELL, AID_SYSTEM, Role
from .properties import DEFAULT_DAEMON
from .store import DEFAULT_STORAGE_DIR

CONFIG_ENV = "ADBROOT_CONFIG"
DEFAULT_SOCKET = "/dev/socket/adbroot"
SERVICE_NAME = "adbroot_service"


@dataclass(frozen=True)
class ServiceConfig:
    storage_dir: Path = DEFAULT_STORAGE_DIR
    socket_path: Path = Path(DEFAULT_SOCKET)
    log_level: str = "INFO"
    daemon: str = DEFAULT_DAEMON
    service_name: str = SERVICE_NAME
    system_uids: tuple[int, ...] = (AID_SYSTEM,)
    shell_uids: tuple[int, ...] = (AID_SHELL,)

    @property
    def uid_roles(self) -> dict[int, Role]:
        roles = {uid: Role.SHELL for uid in self.shell_uids}
        roles.update({uid: Role.SYSTEM for uid in self.system_uids})
        return roles

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


_PATH_KEYS = {"storage_dir", "socket_path"}
_UID_KEYS = {"system_uids", "shell_uids"}


def _validate(data: object) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    version = data.get("version")
    if version is not None and str(version) != "0.1":
        raise ConfigError(f"unsupported config version: {version}")

    known = {f.name for f in fields(ServiceConfig)}
    values = {}
    for key, value in data.items():
        if key == "version":
            continue
        if key not in known:
            raise ConfigError(f"unknown config key: {key}")
        if key in _UID_KEYS:
            if not isinstance(value, list) or not all(
                isinstance(v, int) and not isinstance(v, bool) for v in value
            ):
                raise ConfigError(f'"{key}" must be a list of integers')
            value = tuple(value)
        elif key in _PATH_KEYS:
            if not isinstance(value, str) or not value:
                raise ConfigError(f'"{key}" must be a non-empty path')
            value = Path(value)
        elif not isinstance(value, str) or not value:
            raise ConfigError(f'"{key}" must be a non-empty string')
        values[key] = value
    return values


def _from_env(environ: Mapping[str, str]) -> dict:
    values: dict[str, object] = {}
    if environ.get("ADBROOT_STORAGE_DIR"):
        values["storage_dir"] = Path(environ["ADBROOT_STORAGE_DIR"])
    if environ.get("ADBROOT_SOCKET"):
        values["socket_path"] = Path(environ["ADBROOT_SOCKET"])
    if environ.get("ADBROOT_LOG_LEVEL"):
        values["log_level"] = environ["ADBROOT_LOG_LEVEL"]
    return values


def load_config(
    path: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """Build a :class:`ServiceConfig` from *path* and *environ*."""
    environ = os.environ if environ is None else environ
    path = path or environ.get(CONFIG_ENV)
    config = ServiceConfig()
    if path:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except OSError as exc:
            raise ConfigError(f"cannot read config {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML: {exc}") from None
        config = replace(config, **_validate(data))
    config = replace(config, **_from_env(environ))
    if not isinstance(config.level, int):
        raise ConfigError(f"unknown log level: {config.log_level}")
    return config


__all__ = ["ServiceConfig", "load_config", "CONFIG_ENV", "DEFAULT_SOCKET", "SERVICE_NAME"]
