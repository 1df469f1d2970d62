"""
HUD and explainability overlays.

Responsibilities:
- Text block: episode, steps, balance + variation + status, rewards, gravity, actions
- Line charts (balance, step reward)
- Per-joint action bars
- Side / front stick figure of the root tilt
"""
import math

import pygame

from . import config as C


def balance_status(delta: float, eps: float = C.BALANCE_STABLE_EPS) -> str:
    if delta > eps:
        return "Good!"
    if delta < -eps:
        return "Bad!"
    return "Stable"


def format_actions(actions) -> str:
    if not actions:
        return "Actions: [waiting...]"
    return "Actions: [" + ", ".join(f"{a:.2f}" for a in actions) + "]"


def hud_lines(snap):
    return [
        f"Episode: {snap.episode}",
        f"Steps: {snap.steps}",
        f"Balance: {snap.balance:.3f}",
        f"Balance - Variation: {snap.balance_delta:.4f}",
        f"Balance - Status: {balance_status(snap.balance_delta)}",
        f"Reward: {snap.cumulative_reward:.2f}",
        f"Step reward: {snap.step_reward:.4f}",
        "---",
        f"Gravity: {-snap.gravity:.2f}",
    ]


def panel_rect(y, height, width=None, padding=None):
    """Helper to create a panel-relative rect respecting padding."""

    pad = C.PANEL_PADDING if padding is None else padding
    w = (C.PANEL_WIDTH if width is None else width) - 2 * pad
    return pygame.Rect(pad, y, w, height)


def draw_panel(screen, rect, title, font):
    pygame.draw.rect(screen, (20, 20, 20), rect)
    pygame.draw.rect(screen, (80, 80, 80), rect, 1)
    t = font.render(title, True, (255, 255, 255))
    screen.blit(t, (rect.x + 6, rect.y + 4))


def draw_text_block(screen, x, y, lines, font, color=(255, 255, 255)):
    for line in lines:
        t = font.render(line, True, color)
        screen.blit(t, (x, y))
        y += t.get_height() + 2
    return y


def draw_line_chart(screen, rect, data, vmin, vmax, label, font):
    draw_panel(screen, rect, label, font)
    if len(data) < 2:
        return

    pad_top, pad = 22, 6
    x0, y0 = rect.x + pad, rect.y + pad_top
    w, h = rect.w - 2 * pad, rect.h - pad_top - pad

    def norm(v):
        if vmax == vmin:
            return 0.5
        v = max(min(v, vmax), vmin)
        return (v - vmin) / (vmax - vmin)

    pts = []
    for i, v in enumerate(data):
        x = x0 + (i / (len(data) - 1)) * w
        y = y0 + (1 - norm(v)) * h
        pts.append((x, y))

    pygame.draw.lines(screen, (255, 255, 255), False, pts, 2)

    txt = font.render(f"{data[-1]:.3f}", True, (200, 200, 200))
    screen.blit(txt, (rect.right - txt.get_width() - 6, rect.y + 4))


def draw_action_bars(screen, rect, actions, names, font):
    """One centered bar per joint: right of center = positive action."""
    draw_panel(screen, rect, "Actions", font)
    if not actions:
        return

    pad_top, pad = 22, 6
    x0, y0 = rect.x + pad, rect.y + pad_top
    w = rect.w - 2 * pad
    cx = x0 + w // 2
    bar_h = max(2, (rect.h - pad_top - pad) // len(actions))

    pygame.draw.line(screen, (90, 90, 90), (cx, y0), (cx, y0 + bar_h * len(actions)), 1)
    for i, a in enumerate(actions):
        y = y0 + i * bar_h
        t = max(-1.0, min(1.0, a))
        bw = int(abs(t) * (w // 2))
        color = (120, 255, 120) if t >= 0 else (255, 120, 120)
        if bw > 0:
            x = cx if t >= 0 else cx - bw
            pygame.draw.rect(screen, color, (x, y + 1, bw, bar_h - 2), 0)
        if i < len(names) and bar_h >= 12:
            label = font.render(names[i], True, (150, 150, 150))
            screen.blit(label, (x0, y))


def draw_robot(screen, origin, pitch, roll, length_px, font):
    """Side view (pitch) on the left and front view (roll) on the right of origin."""
    ox, oy = origin
    for offset, angle, title in ((-110, pitch, "side"), (110, roll, "front")):
        base = (ox + offset, oy)
        tip = (base[0] + math.sin(angle) * length_px, base[1] - math.cos(angle) * length_px)
        upright = (base[0], base[1] - length_px)
        pygame.draw.line(screen, (60, 60, 60), base, upright, 1)
        pygame.draw.line(screen, (220, 220, 220), base, tip, 6)
        pygame.draw.circle(screen, (255, 200, 0), (int(tip[0]), int(tip[1])), 10)
        pygame.draw.line(screen, (120, 120, 120), (base[0] - 40, base[1]), (base[0] + 40, base[1]), 3)
        t = font.render(title, True, (180, 180, 180))
        screen.blit(t, (base[0] - t.get_width() // 2, base[1] + 8))
