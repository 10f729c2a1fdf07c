import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from adbroot.permissions import CallerIdentity, Role  # noqa: E402

SYSTEM = CallerIdentity(role=Role.SYSTEM, uid=1000)
SHELL = CallerIdentity(role=Role.SHELL, uid=2000)
OTHER = CallerIdentity(role=Role.OTHER, uid=10123)


class FakeResolver:
    """Identity resolver whose answer tests can swap between calls."""

    def __init__(self, identity: CallerIdentity = SYSTEM):
        self.identity = identity

    def __call__(self) -> CallerIdentity:
        return self.identity


@pytest.fixture
def resolver():
    return FakeResolver()
