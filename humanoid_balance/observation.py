"""
Observation encoding.

Layout (float32):
    [0:3]   root up vector (world frame)
    [3:6]   root forward vector (world frame)
    [6:9]   root angular velocity            (dropped when include_angular_velocity=False)
    then    (position, velocity) per joint, in rig order
"""
from typing import Sequence

import numpy as np

from . import config as C
from .body import Joint, RootBody


def observation_size(n_joints: int, include_angular_velocity: bool = C.INCLUDE_ANGULAR_VELOCITY) -> int:
    return 6 + (3 if include_angular_velocity else 0) + 2 * n_joints


def encode_observation(
    root: RootBody,
    joints: Sequence[Joint],
    include_angular_velocity: bool = C.INCLUDE_ANGULAR_VELOCITY,
) -> np.ndarray:
    obs = np.empty(observation_size(len(joints), include_angular_velocity), dtype=np.float32)
    obs[0:3] = root.up
    obs[3:6] = root.forward
    i = 6
    if include_angular_velocity:
        obs[6:9] = root.angular_velocity
        i = 9
    for joint in joints:
        obs[i] = joint.position
        obs[i + 1] = joint.velocity
        i += 2
    return obs
