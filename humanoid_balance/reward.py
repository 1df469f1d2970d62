"""
Reward shaping for static balance.

Responsibilities:
- Balance metric: cosine between root up and world up (1 = upright)
- Per-step alive reward
- Fall penalty with a dead-band: only when below the punish threshold AND still worsening
- Terminal override when the balance drops below the fall threshold
"""
from dataclasses import dataclass

import numpy as np

from . import config as C
from .body import WORLD_UP


@dataclass
class RewardResult:
    reward: float
    terminal: bool
    balance: float
    delta: float
    penalised: bool = False


def balance_metric(up) -> float:
    return float(np.clip(np.dot(up, WORLD_UP), -1.0, 1.0))


class RewardShaper:
    """Stateless given the previous balance; the episode owns that state."""

    def __init__(
        self,
        alive_reward: float = C.ALIVE_REWARD,
        fall_penalty: float = C.FALL_PENALTY,
        punish_threshold: float = C.PUNISH_THRESHOLD,
        fall_threshold: float = C.FALL_THRESHOLD,
        terminal_penalty: float = C.TERMINAL_PENALTY,
    ):
        self.alive_reward = alive_reward
        self.fall_penalty = fall_penalty
        self.punish_threshold = punish_threshold
        self.fall_threshold = fall_threshold
        self.terminal_penalty = terminal_penalty

        if fall_threshold > punish_threshold:
            print(
                f"⚠️ fall_threshold={fall_threshold} is above punish_threshold={punish_threshold}; "
                "the robot will terminate before the fall penalty can apply"
            )

    def score(self, balance: float, previous_balance: float) -> RewardResult:
        delta = balance - previous_balance
        reward = self.alive_reward
        penalised = balance < self.punish_threshold and delta < 0
        if penalised:
            reward += self.fall_penalty

        if balance < self.fall_threshold:
            return RewardResult(self.terminal_penalty, True, balance, delta, penalised)
        return RewardResult(reward, False, balance, delta, penalised)

    def evaluate(self, up, previous_balance: float) -> RewardResult:
        return self.score(balance_metric(up), previous_balance)
