"""
Body state shared with the physics collaborator.

Responsibilities:
- Root body pose (position, rotation quaternion, linear/angular velocity)
- Actuated joints (normalized position, velocity, drive target, local rotation)
- JointRig: fixed, index-addressed joint sequence + cached reference pose
- Quaternion helpers (w, x, y, z); world up is +Y, body forward is +Z
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

from . import config as C
from .errors import MissingReference

WORLD_UP = np.array([0.0, 1.0, 0.0])
WORLD_FORWARD = np.array([0.0, 0.0, 1.0])
IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])


def quat_rotate(q, v) -> np.ndarray:
    """Rotate vector v by unit quaternion q = (w, x, y, z)."""
    w = q[0]
    u = np.asarray(q[1:], dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quat_multiply(a, b) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ]
    )


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / np.linalg.norm(axis)
    half = 0.5 * angle
    return np.concatenate(([np.cos(half)], np.sin(half) * axis))


def tilt_rotation(pitch: float, roll: float) -> np.ndarray:
    """Root rotation for a pitch (about world X) followed by a roll (about world Z)."""
    q_pitch = quat_from_axis_angle((1.0, 0.0, 0.0), pitch)
    q_roll = quat_from_axis_angle((0.0, 0.0, 1.0), roll)
    return quat_multiply(q_roll, q_pitch)


@dataclass
class RootBody:
    position: np.ndarray = field(default_factory=lambda: np.array([0.0, C.ROOT_HEIGHT, 0.0]))
    rotation: np.ndarray = field(default_factory=lambda: IDENTITY.copy())
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def up(self) -> np.ndarray:
        return quat_rotate(self.rotation, WORLD_UP)

    @property
    def forward(self) -> np.ndarray:
        return quat_rotate(self.rotation, WORLD_FORWARD)

    def teleport(self, position, rotation) -> None:
        self.position = np.array(position, dtype=np.float64)
        self.rotation = np.array(rotation, dtype=np.float64)


@dataclass
class Joint:
    name: str
    position: float = 0.0
    velocity: float = 0.0
    target: float = 0.0
    local_rotation: np.ndarray = field(default_factory=lambda: IDENTITY.copy())


class JointRig:
    """
    The controlled body: one root plus an ordered, fixed joint sequence.

    Joint order is the index mapping shared by the observation encoder and the
    action applicator. The reference pose is captured once, here.
    """

    def __init__(self, root: Optional[RootBody], joints: Sequence[Optional[Joint]]):
        if root is None:
            raise MissingReference("root body reference is missing")
        if joints is None or len(joints) == 0:
            raise MissingReference("no controllable joints configured")
        missing = [i for i, j in enumerate(joints) if j is None]
        if missing:
            raise MissingReference(f"joint reference(s) missing at index {missing}")

        self.root = root
        self.joints: Tuple[Joint, ...] = tuple(joints)
        self.initial_position = np.array(root.position, dtype=np.float64)
        self.initial_rotation = np.array(root.rotation, dtype=np.float64)
        self.initial_local_rotations = [np.array(j.local_rotation, dtype=np.float64) for j in self.joints]
        self.initial_joint_positions = [float(j.position) for j in self.joints]

    def __len__(self):
        return len(self.joints)

    @property
    def joint_names(self):
        return [j.name for j in self.joints]

    def restore(self) -> None:
        """Put the body back in its reference pose with zero motion and zero drive targets."""
        self.root.teleport(self.initial_position, self.initial_rotation)
        self.root.velocity = np.zeros(3)
        self.root.angular_velocity = np.zeros(3)
        for joint, rotation, position in zip(
            self.joints, self.initial_local_rotations, self.initial_joint_positions
        ):
            joint.local_rotation = rotation.copy()
            joint.position = position
            joint.target = 0.0
            joint.velocity = 0.0


def build_rig(joint_names: Sequence[str] = C.JOINT_NAMES) -> JointRig:
    """Reference G1 rig standing upright at the configured pelvis height."""
    return JointRig(RootBody(), [Joint(name) for name in joint_names])
