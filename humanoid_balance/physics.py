"""
Demonstration physics backend (stand-in for the external rigid-body engine).

Responsibilities:
- Joint drives: normalized joint position tracks its drive target (first order)
- Root as an inverted pendulum pivoting at the feet: gravity tips it over,
  pitch/roll joint deflections push back, damping + random pushes
- Read gravity from the shared EnvironmentParameter every tick

Good enough to exercise the control loop headless or on screen; not a solver.
"""
import math
from typing import Optional

import numpy as np

from . import config as C
from .body import JointRig, quat_from_axis_angle, tilt_rotation
from .curriculum import EnvironmentParameter


def joint_axis(name: str):
    if "pitch" in name or "knee" in name:
        return (1.0, 0.0, 0.0)
    if "roll" in name:
        return (0.0, 0.0, 1.0)
    return (0.0, 1.0, 0.0)


class TiltPhysics:
    def __init__(
        self,
        rig: JointRig,
        gravity: Optional[EnvironmentParameter] = None,
        dt: float = C.DT,
        seed: Optional[int] = None,
        push_std: float = C.PUSH_STD,
    ):
        self.rig = rig
        self.gravity = gravity if gravity is not None else EnvironmentParameter(C.DEFAULT_GRAVITY)
        self.dt = dt
        self.push_std = push_std
        self.rng = np.random.default_rng(seed)

        self.length = float(rig.initial_position[1]) or C.ROOT_HEIGHT
        self.pivot = rig.initial_position - np.array([0.0, self.length, 0.0])
        names = rig.joint_names
        self._axes = [joint_axis(n) for n in names]
        self._pitch_idx = [i for i, n in enumerate(names) if "pitch" in n or "knee" in n]
        self._roll_idx = [i for i, n in enumerate(names) if "roll" in n]

    def tilt(self):
        """(pitch, roll) of the root, recovered from its up vector."""
        up = self.rig.root.up
        pitch = math.asin(float(np.clip(up[2], -1.0, 1.0)))
        roll = math.atan2(-float(up[0]), float(up[1]))
        return pitch, roll

    def _drive_joints(self):
        max_deflection = math.radians(C.JOINT_TARGET_SCALE)
        for joint, axis in zip(self.rig.joints, self._axes):
            desired = float(np.clip(joint.target / C.JOINT_TARGET_SCALE, -1.0, 1.0))
            vel = (desired - joint.position) * C.JOINT_DRIVE_GAIN
            vel = float(np.clip(vel, -C.JOINT_MAX_VELOCITY, C.JOINT_MAX_VELOCITY))
            joint.velocity = vel
            joint.position += vel * self.dt
            joint.local_rotation = quat_from_axis_angle(axis, joint.position * max_deflection)

    def _mean_position(self, indices) -> float:
        if not indices:
            return 0.0
        return sum(self.rig.joints[i].position for i in indices) / len(indices)

    def advance(self) -> None:
        self._drive_joints()

        root = self.rig.root
        pitch, roll = self.tilt()
        g_over_l = self.gravity.value / self.length
        ang = np.array(root.angular_velocity, dtype=np.float64)
        push = self.rng.normal(0.0, self.push_std, size=2) if self.push_std > 0 else np.zeros(2)

        pitch_acc = (
            g_over_l * math.sin(pitch)
            - C.CORRECTION_GAIN * self._mean_position(self._pitch_idx)
            - C.TILT_DAMPING * ang[0]
            + push[0]
        )
        roll_acc = (
            g_over_l * math.sin(roll)
            - C.CORRECTION_GAIN * self._mean_position(self._roll_idx)
            - C.TILT_DAMPING * ang[2]
            + push[1]
        )

        ang[0] += pitch_acc * self.dt
        ang[2] += roll_acc * self.dt
        pitch += ang[0] * self.dt
        roll += ang[2] * self.dt

        rotation = tilt_rotation(pitch, roll)
        old_position = np.array(root.position, dtype=np.float64)
        root.rotation = rotation
        root.angular_velocity = ang
        root.position = self.pivot + root.up * self.length
        root.velocity = (root.position - old_position) / self.dt
