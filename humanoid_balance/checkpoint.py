"""
Checkpoint load/save.

Responsibilities:
- Save actor weights + run position (global progress, gravity, episode)
- Record the observation/action contract the weights were trained against
- Refuse weights whose contract does not match the current rig
"""
from pathlib import Path

import torch

from . import config as C


def save_checkpoint(actor, path=C.MODEL_PATH, *, global_progress=0, gravity=C.DEFAULT_GRAVITY, episode=0, note=""):
    path = Path(path)
    ckpt = {
        "actor_state": actor.state_dict(),
        "obs_size": int(actor.obs_size),
        "action_size": int(actor.action_size),
        "global_progress": int(global_progress),
        "gravity": float(gravity),
        "episode": int(episode),
        "note": note,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    torch.save(ckpt, path)


def load_checkpoint(actor, path=C.MODEL_PATH):
    path = Path(path)
    if not path.exists():
        return None

    try:
        ckpt = torch.load(path, map_location="cpu")
    except Exception as ex:
        print(f"⚠️ Failed to load checkpoint from {path}: {ex}")
        return None

    sizes = (ckpt.get("obs_size"), ckpt.get("action_size"))
    if sizes != (actor.obs_size, actor.action_size):
        print(
            f"⚠️ Checkpoint {path} was saved for obs/action sizes {sizes}, "
            f"rig needs {(actor.obs_size, actor.action_size)}; ignoring it"
        )
        return None

    actor.load_state_dict(ckpt["actor_state"])
    return ckpt
