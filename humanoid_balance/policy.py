"""
Policy boundary: the side of the loop that turns observations into actions.

Responsibilities:
- ActorNet (torch nn.Module): observation -> continuous action in [-1, 1]
- PolicyRunner: numpy in, numpy out, inference only
- random_action() for exploration / smoke runs
"""
import numpy as np
import torch
import torch.nn as nn

from . import config as C


class ActorNet(nn.Module):
    def __init__(self, obs_size: int, action_size: int, hidden: int = C.HIDDEN_SIZE):
        super().__init__()
        self.obs_size = obs_size
        self.action_size = action_size
        self.net = nn.Sequential(
            nn.Linear(obs_size, hidden),
            nn.ReLU(),
            nn.Linear(hidden, hidden),
            nn.ReLU(),
            nn.Linear(hidden, action_size),
            nn.Tanh(),
        )

    def forward(self, x):
        return self.net(x)


class PolicyRunner:
    def __init__(self, actor: ActorNet, device=None):
        self.device = device or torch.device("cpu")
        self.actor = actor.to(self.device)
        self.actor.eval()
        self._obs = torch.empty(actor.obs_size, device=self.device)

    def act(self, obs: np.ndarray) -> np.ndarray:
        self._obs.copy_(torch.from_numpy(np.asarray(obs, dtype=np.float32)))
        with torch.inference_mode():
            action = self.actor(self._obs)
        return action.cpu().numpy().astype(np.float32)


def random_action(n: int, rng: np.random.Generator) -> np.ndarray:
    return rng.uniform(C.ACTION_LOW, C.ACTION_HIGH, size=n).astype(np.float32)


def set_torch_stability():
    # Helps avoid rare pygame+torch multithreading oddities on Windows
    torch.set_num_threads(1)
    torch.set_num_interop_threads(1)
