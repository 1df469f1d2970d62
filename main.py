"""
Entrypoint for the G1 static-balance visual lab.

- Build the rig, demo physics, environment and gravity curriculum
- Drive the policy (saved actor if present) through episodes with the HUD
"""
from humanoid_balance.game_loop import run

if __name__ == "__main__":
    run()
