import math

import pytest

from humanoid_balance.body import Joint, JointRig, RootBody, tilt_rotation


def _tilt_to_balance(root, balance):
    """Tilt the root forward so that dot(up, world_up) == balance."""
    root.rotation = tilt_rotation(math.acos(balance), 0.0)


class ScriptedPhysics:
    """Physics stand-in that moves the root to a scripted balance on every advance."""

    def __init__(self, rig, balances=()):
        self.rig = rig
        self.balances = list(balances)
        self.calls = 0

    def advance(self):
        self.calls += 1
        if self.balances:
            _tilt_to_balance(self.rig.root, self.balances.pop(0))


@pytest.fixture
def make_rig():
    def _make(n=2):
        return JointRig(RootBody(), [Joint(f"j{i}") for i in range(n)])

    return _make


@pytest.fixture
def set_balance():
    return _tilt_to_balance


@pytest.fixture
def scripted_physics():
    return ScriptedPhysics
