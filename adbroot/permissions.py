"""Caller identities and the permission gate.

Every RPC operation names the set of roles allowed to invoke it.  The gate is
a pure function of the caller's identity and that set, so it can be tested
without a transport.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Mapping, Optional, Union

# Well-known uids of the administrative principals.
AID_SYSTEM = 1000
AID_SHELL = 2000


class Role(str, enum.Enum):
    SYSTEM = "system"
    SHELL = "shell"
    OTHER = "other"


# Order used when naming roles in denial messages.
_ROLE_ORDER = (Role.SYSTEM, Role.SHELL, Role.OTHER)

SET_ENABLED_ROLES: FrozenSet[Role] = frozenset({Role.SYSTEM})
GET_ENABLED_ROLES: FrozenSet[Role] = frozenset({Role.SYSTEM, Role.SHELL})

DEFAULT_UID_ROLES: Mapping[int, Role] = {
    AID_SYSTEM: Role.SYSTEM,
    AID_SHELL: Role.SHELL,
}


@dataclass(frozen=True)
class CallerIdentity:
    """Resolved identity of the process invoking an operation."""

    role: Role
    uid: Optional[int] = None
    pid: Optional[int] = None


@dataclass(frozen=True)
class Allowed:
    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    reason: str

    def __bool__(self) -> bool:
        return False


Decision = Union[Allowed, Denied]
IdentityResolver = Callable[[], CallerIdentity]


def identity_from_uid(
    uid: int,
    pid: Optional[int] = None,
    uid_roles: Mapping[int, Role] = DEFAULT_UID_ROLES,
) -> CallerIdentity:
    """Map a numeric *uid* to a :class:`CallerIdentity`."""
    return CallerIdentity(role=uid_roles.get(uid, Role.OTHER), uid=uid, pid=pid)


def describe_roles(roles: Iterable[Role]) -> str:
    """Return ``"system or shell"`` style text for *roles*."""
    wanted = set(roles)
    names = [r.value for r in _ROLE_ORDER if r in wanted]
    return " or ".join(names)


def check_caller(identity: CallerIdentity, required: Iterable[Role]) -> Decision:
    """Allow *identity* if its role is one of *required*."""
    required = frozenset(required)
    if identity.role in required:
        return Allowed()
    return Denied(f"Caller must be {describe_roles(required)}")


def process_identity(uid_roles: Mapping[int, Role] = DEFAULT_UID_ROLES) -> CallerIdentity:
    """Identity of the current process, for in-process callers."""
    return identity_from_uid(os.getuid(), pid=os.getpid(), uid_roles=uid_roles)


__all__ = [
    "AID_SYSTEM",
    "AID_SHELL",
    "Role",
    "CallerIdentity",
    "Allowed",
    "Denied",
    "Decision",
    "IdentityResolver",
    "SET_ENABLED_ROLES",
    "GET_ENABLED_ROLES",
    "DEFAULT_UID_ROLES",
    "identity_from_uid",
    "describe_roles",
    "check_caller",
    "process_identity",
]
