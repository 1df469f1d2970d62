from collections import deque

import numpy as np
import pygame
import torch

from . import config as C
from .body import build_rig
from .checkpoint import load_checkpoint
from .curriculum import EnvironmentParameter, GlobalProgress, GravityCurriculum
from .env import BalanceEnv
from .hud import (
    draw_action_bars,
    draw_line_chart,
    draw_robot,
    draw_text_block,
    format_actions,
    hud_lines,
    panel_rect,
)
from .physics import TiltPhysics
from .policy import ActorNet, PolicyRunner, random_action, set_torch_stability


def run(stages=None, episodes=C.EPISODES, use_actor=True, seed=None):
    set_torch_stability()

    pygame.init()
    screen = pygame.display.set_mode((C.WINDOW_WIDTH, C.HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont(None, 22)
    small = pygame.font.SysFont(None, 16)
    world_surf = pygame.Surface((C.WIDTH, C.HEIGHT))
    panel_surf = pygame.Surface((C.PANEL_WIDTH, C.HEIGHT))

    gravity = EnvironmentParameter(C.DEFAULT_GRAVITY)
    curriculum = GravityCurriculum(C.CURRICULUM if stages is None else stages, gravity)
    progress = GlobalProgress()

    rig = build_rig()
    physics = TiltPhysics(rig, gravity, seed=seed)
    env = BalanceEnv(rig, physics_step=physics.advance)
    rng = np.random.default_rng(seed)

    runner = None
    if use_actor:
        actor = ActorNet(env.observation_size, env.action_size)
        ckpt = load_checkpoint(actor)
        if ckpt:
            print(f"Loaded actor from {C.MODEL_PATH} | steps={ckpt.get('global_progress')}")
            progress.advance(int(ckpt.get("global_progress", 0)))
        runner = PolicyRunner(actor, device=torch.device("cpu"))

    balance_hist = deque(maxlen=C.HUD_N)
    reward_hist = deque(maxlen=C.HUD_N)

    def render_scene():
        snap = env.snapshot(gravity.value)
        world_surf.fill((0, 0, 0))
        panel_surf.fill((8, 8, 8))

        pitch, roll = physics.tilt()
        draw_robot(world_surf, (C.WIDTH // 2, C.HEIGHT - 120), pitch, roll, physics.length * C.PIXELS_PER_METER, font)
        if env.terminated:
            warn = font.render("FALLEN", True, (255, 80, 80))
            world_surf.blit(warn, (C.WIDTH // 2 - warn.get_width() // 2, 40))

        y = draw_text_block(panel_surf, C.PANEL_PADDING, C.PANEL_PADDING, hud_lines(snap), font)
        y = draw_text_block(panel_surf, C.PANEL_PADDING, y + 2, [format_actions(snap.actions)[:48]], small, (200, 200, 200))
        y += 8
        draw_line_chart(panel_surf, panel_rect(y, 70), list(balance_hist), C.FALL_THRESHOLD - 0.05, 1.0, "Balance", font)
        y += 80
        draw_line_chart(panel_surf, panel_rect(y, 70), list(reward_hist), C.TERMINAL_PENALTY, C.ALIVE_REWARD, "Step reward", font)
        y += 80
        draw_action_bars(panel_surf, panel_rect(y, C.HEIGHT - y - C.PANEL_PADDING), snap.actions, rig.joint_names, small)

        screen.blit(world_surf, (0, 0))
        screen.blit(panel_surf, (C.WIDTH, 0))
        pygame.draw.line(screen, (90, 90, 90), (C.WIDTH, 0), (C.WIDTH, C.HEIGHT), 2)
        pygame.display.flip()

    for _ in range(episodes):
        obs = env.reset()
        balance_hist.clear()
        reward_hist.clear()

        terminal = False
        while not terminal and env.step_count < C.MAX_EPISODE_STEPS:
            clock.tick(C.FPS)
            for e in pygame.event.get():
                if e.type == pygame.QUIT:
                    pygame.quit()
                    raise SystemExit

            curriculum.update(progress.value)
            action = runner.act(obs) if runner else random_action(env.action_size, rng)
            obs, reward, terminal = env.step(action)
            progress.advance()

            balance_hist.append(env.last_result.balance)
            reward_hist.append(reward)
            render_scene()

        if terminal:
            # hold the fallen pose briefly
            pygame.time.delay(400)

    pygame.quit()
