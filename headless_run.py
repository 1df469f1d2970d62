"""
Headless run loop for the G1 static-balance environment.

Drives the full tick (curriculum -> env.step -> progress) without pygame for
fast wall-clock runs, records per-episode metrics, and optionally opens the
HUD afterwards. Actions come from a saved actor or a uniform random policy;
training itself belongs to the external learner.
"""
import argparse
import time
from typing import Callable, Optional

import numpy as np
import torch

from humanoid_balance import config as C
from humanoid_balance.body import build_rig
from humanoid_balance.checkpoint import load_checkpoint, save_checkpoint
from humanoid_balance.curriculum import EnvironmentParameter, GlobalProgress, GravityCurriculum, load_stages
from humanoid_balance.env import BalanceEnv
from humanoid_balance.metrics import RunMetrics
from humanoid_balance.physics import TiltPhysics
from humanoid_balance.policy import ActorNet, PolicyRunner, random_action, set_torch_stability


def resolve_device(device_arg: str) -> torch.device:
    if device_arg == "auto":
        return torch.device("cuda" if torch.cuda.is_available() else "cpu")
    return torch.device(device_arg)


def run_episodes(
    env: BalanceEnv,
    curriculum: GravityCurriculum,
    progress: GlobalProgress,
    choose_action: Callable[[np.ndarray], np.ndarray],
    episodes: int,
    max_steps: int = C.MAX_EPISODE_STEPS,
    log_every: int = 1,
    metrics: Optional[RunMetrics] = None,
) -> RunMetrics:
    """Run whole episodes; one tick = curriculum update, env step, progress advance."""
    metrics = metrics or RunMetrics(run_tag=C.RUN_TAG)

    for episode in range(episodes):
        episode_start = time.perf_counter()
        obs = env.reset()
        terminal = False

        while not terminal and (max_steps <= 0 or env.step_count < max_steps):
            curriculum.update(progress.value)
            obs, _, terminal = env.step(choose_action(obs))
            progress.advance()

        state = env.state
        record = metrics.record_episode(
            episode + 1,
            steps=state.step_count,
            total_reward=state.cumulative_reward,
            final_balance=state.previous_balance,
            min_balance=state.min_balance,
            fell=terminal,
            gravity=curriculum.parameter.value,
            global_progress=progress.value,
            wall_time_sec_episode=time.perf_counter() - episode_start,
        )

        if (episode + 1) % log_every == 0 or (episode + 1) == episodes:
            print(
                f"Ep {episode+1:04d}/{episodes:04d} | steps={record.steps:<5d} | "
                f"reward={record.total_reward:7.3f} | balance={record.final_balance:.3f} "
                f"| fell={int(record.fell)} | g={record.gravity:.2f} | total={progress.value} "
                f"| fall_rate={record.rolling_fall_rate:.2f}"
            )

    return metrics


def main():
    parser = argparse.ArgumentParser(description="Headless run for the G1 static-balance environment")
    parser.add_argument("--episodes", type=int, default=C.EPISODES, help="Episodes to run")
    parser.add_argument("--max-steps", type=int, default=C.MAX_EPISODE_STEPS, dest="max_steps", help="Step cap per episode (0 = none)")
    parser.add_argument("--curriculum", type=str, default=None, help="JSON file with gravity curriculum stages")
    parser.add_argument("--policy", type=str, default="actor", choices=["actor", "random"], help="Where actions come from")
    parser.add_argument("--device", type=str, default="auto", choices=["auto", "cpu", "cuda"], help="Device for the actor")
    parser.add_argument("--seed", type=int, default=None, help="Seed for physics pushes and random actions")
    parser.add_argument("--log-every", type=int, default=1, dest="log_every", help="Print metrics every N episodes")
    parser.add_argument("--save-checkpoint", action="store_true", dest="save_checkpoint", help="Save actor + run position at exit")
    parser.add_argument("--visualize", action="store_true", help="Open the HUD after the headless run")
    args = parser.parse_args()

    set_torch_stability()
    device = resolve_device(args.device)

    stages = load_stages(args.curriculum) if args.curriculum else C.CURRICULUM
    gravity = EnvironmentParameter(C.DEFAULT_GRAVITY)
    curriculum = GravityCurriculum(stages, gravity)
    progress = GlobalProgress()

    rig = build_rig()
    physics = TiltPhysics(rig, gravity, seed=args.seed)
    env = BalanceEnv(rig, physics_step=physics.advance)
    rng = np.random.default_rng(args.seed)

    actor = ActorNet(env.observation_size, env.action_size)
    ckpt = load_checkpoint(actor)
    if ckpt:
        progress.advance(int(ckpt.get("global_progress", 0)))
        print(f"Loaded checkpoint from {C.MODEL_PATH} | ep={ckpt.get('episode')} | steps={progress.value}")
        note = ckpt.get("note")
        if note:
            print(f"  note: {note}")

    if args.policy == "actor":
        runner = PolicyRunner(actor, device=device)
        choose_action = runner.act
    else:
        def choose_action(_obs):
            return random_action(env.action_size, rng)

    metrics = RunMetrics(run_tag=C.RUN_TAG)
    interrupted = False
    try:
        run_episodes(
            env,
            curriculum,
            progress,
            choose_action,
            episodes=args.episodes,
            max_steps=args.max_steps,
            log_every=args.log_every,
            metrics=metrics,
        )
    except KeyboardInterrupt:
        interrupted = True
        print("Run interrupted by user; exporting metrics...")
    finally:
        metrics.finalize_and_export(
            out_dir=C.REPORTS_DIR,
            export_csv=C.EXPORT_CSV,
            export_json=C.EXPORT_JSON,
        )

    if args.save_checkpoint:
        try:
            save_checkpoint(
                actor.cpu(),
                C.MODEL_PATH,
                global_progress=progress.value,
                gravity=gravity.value,
                episode=env.episode,
                note=f"headless run, policy={args.policy}",
            )
            print(f"✅ Saved checkpoint to {C.MODEL_PATH} | steps={progress.value}")
        except Exception as ex:
            print(f"⚠️ Failed to save checkpoint to {C.MODEL_PATH}: {ex}")

    if interrupted:
        return

    if args.visualize:
        from humanoid_balance.game_loop import run

        run(stages=stages, episodes=1, use_actor=args.policy == "actor", seed=args.seed)
    else:
        print("Visualization skipped. Use --visualize to watch the robot balance.")


if __name__ == "__main__":
    main()
