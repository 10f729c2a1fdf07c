import pytest

from adbroot.permissions import (
    AID_SHELL,
    AID_SYSTEM,
    GET_ENABLED_ROLES,
    SET_ENABLED_ROLES,
    Allowed,
    CallerIdentity,
    Denied,
    Role,
    check_caller,
    describe_roles,
    identity_from_uid,
    process_identity,
)


def test_system_may_set():
    decision = check_caller(CallerIdentity(Role.SYSTEM), SET_ENABLED_ROLES)
    assert decision == Allowed()
    assert decision


@pytest.mark.parametrize("role", [Role.SHELL, Role.OTHER])
def test_only_system_may_set(role):
    decision = check_caller(CallerIdentity(role), SET_ENABLED_ROLES)
    assert isinstance(decision, Denied)
    assert not decision
    assert decision.reason == "Caller must be system"


@pytest.mark.parametrize("role", [Role.SYSTEM, Role.SHELL])
def test_system_and_shell_may_get(role):
    assert isinstance(check_caller(CallerIdentity(role), GET_ENABLED_ROLES), Allowed)


def test_other_may_not_get():
    decision = check_caller(CallerIdentity(Role.OTHER), GET_ENABLED_ROLES)
    assert decision == Denied("Caller must be system or shell")


def test_describe_roles_is_ordered():
    assert describe_roles([Role.SHELL, Role.SYSTEM]) == "system or shell"


def test_identity_from_uid():
    assert identity_from_uid(AID_SYSTEM).role is Role.SYSTEM
    assert identity_from_uid(AID_SHELL).role is Role.SHELL
    assert identity_from_uid(0).role is Role.OTHER
    assert identity_from_uid(0, uid_roles={0: Role.SYSTEM}).role is Role.SYSTEM


def test_process_identity_uses_current_uid(monkeypatch):
    import adbroot.permissions as permissions

    monkeypatch.setattr(permissions.os, "getuid", lambda: AID_SHELL)
    identity = process_identity()
    assert identity.uid == AID_SHELL
    assert identity.role is Role.SHELL
