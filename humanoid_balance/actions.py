"""
Action application: action vector -> joint drive targets.

target[i] = action[i] * strength. Out-of-range handling is a policy choice:
  passthrough  values reach the actuator unmodified (the actuator enforces its limits)
  clamp        values are clipped to [ACTION_LOW, ACTION_HIGH] first
  reject       any value outside the range rejects the whole step
"""
from typing import Sequence

import numpy as np

from . import config as C
from .body import Joint
from .errors import ContractViolation

ACTION_POLICIES = ("passthrough", "clamp", "reject")


class ActionApplicator:
    def __init__(self, strength: float = C.ACTION_STRENGTH, policy: str = C.ACTION_POLICY):
        if policy not in ACTION_POLICIES:
            raise ValueError(f"unknown action policy {policy!r}, expected one of {ACTION_POLICIES}")
        self.strength = float(strength)
        self.policy = policy

    def prepare(self, action, n_joints: int) -> np.ndarray:
        """Validate an action vector against the contract without touching any joint."""
        try:
            a = np.asarray(action, dtype=np.float64)
        except (TypeError, ValueError) as ex:
            raise ContractViolation(f"action is not a numeric vector: {ex}") from ex

        if a.ndim != 1:
            raise ContractViolation(f"action must be a flat vector, got shape {a.shape}")
        if a.shape[0] != n_joints:
            raise ContractViolation(f"action length {a.shape[0]} != joint count {n_joints}")
        if not np.all(np.isfinite(a)):
            raise ContractViolation("action contains non-finite values")

        if self.policy == "clamp":
            a = np.clip(a, C.ACTION_LOW, C.ACTION_HIGH)
        elif self.policy == "reject" and (np.any(a < C.ACTION_LOW) or np.any(a > C.ACTION_HIGH)):
            raise ContractViolation(f"action outside [{C.ACTION_LOW}, {C.ACTION_HIGH}]")
        return a

    def apply(self, joints: Sequence[Joint], action) -> np.ndarray:
        a = self.prepare(action, len(joints))
        for joint, value in zip(joints, a):
            joint.target = float(value) * self.strength
        return a
