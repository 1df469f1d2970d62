"""
Episode controller for the static-balance task.

Responsibilities:
- Own the episode state (step count, previous balance, cumulative reward)
- reset(): restore the cached reference pose, Active state
- step(action): actions -> physics advance -> observation -> reward/terminal
- Publish the per-step balance statistic and a HUD snapshot

Host loop (one tick):

    curriculum.update(progress.value)
    obs, reward, terminal = env.step(policy(obs))
    progress.advance()
    if terminal:
        obs = env.reset()
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np

from . import config as C
from .actions import ActionApplicator
from .body import JointRig
from .errors import ContractViolation
from .metrics import StatsRecorder
from .observation import encode_observation, observation_size
from .reward import RewardResult, RewardShaper

ACTIVE = "active"
TERMINATED = "terminated"


@dataclass
class EpisodeState:
    step_count: int = 0
    previous_balance: float = 1.0
    cumulative_reward: float = 0.0
    min_balance: float = 1.0
    terminated: bool = False


@dataclass
class HudSnapshot:
    episode: int
    steps: int
    balance: float
    balance_delta: float
    step_reward: float
    cumulative_reward: float
    gravity: float
    actions: List[float] = field(default_factory=list)


class BalanceEnv:
    def __init__(
        self,
        rig: JointRig,
        *,
        applicator: Optional[ActionApplicator] = None,
        shaper: Optional[RewardShaper] = None,
        physics_step: Optional[Callable[[], None]] = None,
        stats: Optional[StatsRecorder] = None,
        include_angular_velocity: bool = C.INCLUDE_ANGULAR_VELOCITY,
    ):
        self.rig = rig
        self.applicator = applicator or ActionApplicator()
        self.shaper = shaper or RewardShaper()
        self.physics_step = physics_step
        self.stats = stats if stats is not None else StatsRecorder()
        self.include_angular_velocity = include_angular_velocity

        self.state = EpisodeState()
        self.episode = 0
        self.last_actions: Optional[np.ndarray] = None
        self.last_result: Optional[RewardResult] = None

    @property
    def action_size(self) -> int:
        return len(self.rig)

    @property
    def observation_size(self) -> int:
        return observation_size(len(self.rig), self.include_angular_velocity)

    @property
    def step_count(self) -> int:
        return self.state.step_count

    @property
    def terminated(self) -> bool:
        return self.state.terminated

    @property
    def status(self) -> str:
        return TERMINATED if self.state.terminated else ACTIVE

    def observe(self) -> np.ndarray:
        return encode_observation(self.rig.root, self.rig.joints, self.include_angular_velocity)

    def reset(self) -> np.ndarray:
        self.rig.restore()
        self.state = EpisodeState()
        self.episode += 1
        self.last_actions = None
        self.last_result = None
        return self.observe()

    def step(self, action) -> Tuple[np.ndarray, float, bool]:
        if self.state.terminated:
            raise ContractViolation("episode has terminated; call reset() before stepping")

        # validates the whole vector before any joint target is written
        applied = self.applicator.apply(self.rig.joints, action)
        self.last_actions = applied

        if self.physics_step is not None:
            self.physics_step()

        self.state.step_count += 1
        obs = self.observe()

        result = self.shaper.evaluate(self.rig.root.up, self.state.previous_balance)
        self.state.previous_balance = result.balance
        self.state.min_balance = min(self.state.min_balance, result.balance)
        self.stats.add(C.BALANCE_STAT_KEY, result.balance)

        self.state.cumulative_reward += result.reward
        if result.terminal:
            self.state.terminated = True
        self.last_result = result
        return obs, result.reward, result.terminal

    def snapshot(self, gravity: float) -> HudSnapshot:
        res = self.last_result
        return HudSnapshot(
            episode=self.episode,
            steps=self.state.step_count,
            balance=res.balance if res else self.state.previous_balance,
            balance_delta=res.delta if res else 0.0,
            step_reward=res.reward if res else 0.0,
            cumulative_reward=self.state.cumulative_reward,
            gravity=gravity,
            actions=[] if self.last_actions is None else [float(a) for a in self.last_actions],
        )
