"""
Central configuration for the balance environment, curriculum, physics and HUD.

Keep ALL constants here so tuning doesn't require hunting through code.
"""
from pathlib import Path

# Window
WIDTH, HEIGHT = 600, 600
PANEL_WIDTH = 320
PANEL_PADDING = 10
WINDOW_WIDTH = WIDTH + PANEL_WIDTH
FPS = 60

# Robot (Unitree G1, lower body + waist)
JOINT_NAMES = [
    "left_hip_pitch",
    "left_hip_roll",
    "left_hip_yaw",
    "left_knee",
    "left_ankle_pitch",
    "left_ankle_roll",
    "right_hip_pitch",
    "right_hip_roll",
    "right_hip_yaw",
    "right_knee",
    "right_ankle_pitch",
    "right_ankle_roll",
    "waist_yaw",
]
N_JOINTS = len(JOINT_NAMES)
ROOT_HEIGHT = 0.78  # pelvis height above ground (m)

# Control
ACTION_STRENGTH = 10.0
ACTION_POLICY = "passthrough"  # passthrough | clamp | reject
ACTION_LOW, ACTION_HIGH = -1.0, 1.0
INCLUDE_ANGULAR_VELOCITY = True

# Reward shaping
ALIVE_REWARD = 0.005
FALL_PENALTY = -0.05
PUNISH_THRESHOLD = 0.95
FALL_THRESHOLD = 0.8
TERMINAL_PENALTY = -1.0
BALANCE_STAT_KEY = "Agent/UprightBonus"
BALANCE_STABLE_EPS = 1e-4

# Curriculum (gravity magnitude, m/s^2)
DEFAULT_GRAVITY = 9.81
CURRICULUM = [
    {"name": "earth", "threshold": 0, "value": 9.81},
    {"name": "light", "threshold": 200_000, "value": 6.0},
    {"name": "moon", "threshold": 500_000, "value": 1.62},
]

# Demonstration physics
DT = 0.02
JOINT_DRIVE_GAIN = 8.0       # first-order tracking of joint targets (1/s)
JOINT_MAX_VELOCITY = 6.0     # normalized units per second
JOINT_TARGET_SCALE = 30.0    # drive target (deg) that maps to normalized position 1.0
TILT_DAMPING = 1.5
CORRECTION_GAIN = 6.0        # rad/s^2 per unit of normalized joint position
PUSH_STD = 0.6               # random disturbance (rad/s^2)

# Run loop
EPISODES = 200
MAX_EPISODE_STEPS = 2000

# Metrics
EP_N = 100
REPORTS_DIR = Path("reports")
EXPORT_CSV = True
EXPORT_JSON = True
RUN_TAG = "g1_static_balance"

# Model persistence
MODEL_PATH = Path("balance_actor.pt")
HIDDEN_SIZE = 128

# HUD
HUD_N = 240
PIXELS_PER_METER = 300
