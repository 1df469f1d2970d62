import numpy as np
import pytest

from humanoid_balance import config as C
from humanoid_balance.actions import ActionApplicator
from humanoid_balance.body import IDENTITY, Joint, JointRig, RootBody, build_rig, tilt_rotation
from humanoid_balance.env import ACTIVE, TERMINATED, BalanceEnv
from humanoid_balance.errors import ContractViolation, MissingReference
from humanoid_balance.metrics import StatsRecorder
from humanoid_balance.reward import RewardShaper


@pytest.fixture
def make_env(scripted_physics):
    def _make(rig, balances=(), **kwargs):
        physics = scripted_physics(rig, balances)
        env = BalanceEnv(
            rig,
            applicator=ActionApplicator(strength=10.0),
            shaper=RewardShaper(0.005, -0.05, 0.95, 0.8, -1.0),
            physics_step=physics.advance,
            **kwargs,
        )
        return env, physics

    return _make


def test_missing_references_fail_at_construction():
    with pytest.raises(MissingReference):
        JointRig(None, [Joint("a")])
    with pytest.raises(MissingReference):
        JointRig(RootBody(), [Joint("a"), None])
    with pytest.raises(MissingReference):
        JointRig(RootBody(), [])


def test_reset_restores_pose_and_episode_state(make_rig, make_env):
    rig = make_rig(2)
    rig.joints[0].position = 0.3
    rig = JointRig(rig.root, rig.joints)  # capture a non-zero reference joint position
    env, _ = make_env(rig, balances=[0.9, 0.85])
    env.reset()
    env.step([0.5, -0.3])
    env.step([0.5, -0.3])

    rig.root.velocity = np.array([1.0, 2.0, 3.0])
    rig.root.angular_velocity = np.array([0.1, 0.2, 0.3])
    rig.joints[1].velocity = 4.0
    rig.joints[1].local_rotation = tilt_rotation(0.4, 0.0)
    rig.joints[0].position = -0.9

    obs = env.reset()
    assert env.status == ACTIVE
    assert env.step_count == 0
    assert env.state.previous_balance == 1.0
    assert env.state.cumulative_reward == 0.0
    np.testing.assert_allclose(rig.root.rotation, IDENTITY)
    np.testing.assert_allclose(rig.root.velocity, 0.0)
    np.testing.assert_allclose(rig.root.angular_velocity, 0.0)
    for joint in rig.joints:
        assert joint.target == 0.0
        assert joint.velocity == 0.0
        np.testing.assert_allclose(joint.local_rotation, IDENTITY)
    assert rig.joints[0].position == pytest.approx(0.3)
    assert obs.shape == (env.observation_size,)


def test_reset_is_idempotent(make_rig, make_env):
    rig = make_rig(3)
    env, _ = make_env(rig)
    a = env.reset()
    b = env.reset()
    np.testing.assert_array_equal(a, b)
    assert env.episode == 2


def test_step_shapes_for_reference_rig():
    rig = build_rig()
    env = BalanceEnv(rig)
    env.reset()
    rng = np.random.default_rng(0)
    for _ in range(5):
        obs, reward, terminal = env.step(rng.uniform(-1, 1, size=C.N_JOINTS))
        assert obs.shape == (9 + 2 * C.N_JOINTS,) == (35,)
        assert isinstance(reward, float)
        assert terminal is False


def test_step_applies_targets(make_rig, make_env):
    rig = make_rig(2)
    env, physics = make_env(rig)
    env.reset()
    env.step([0.5, -0.3])
    assert [j.target for j in rig.joints] == pytest.approx([5.0, -3.0])
    assert physics.calls == 1
    assert env.step_count == 1


def test_penalty_scenario(make_rig, make_env):
    rig = make_rig(2)
    env, _ = make_env(rig, balances=[0.9, 0.85])
    env.reset()
    _, r1, t1 = env.step([0.0, 0.0])
    assert r1 == pytest.approx(0.005 - 0.05)  # 0.9 < 0.95 and fell from 1.0
    assert not t1
    _, r2, t2 = env.step([0.0, 0.0])
    assert r2 == pytest.approx(0.005 - 0.05)
    assert not t2
    assert env.state.previous_balance == pytest.approx(0.85)


def test_terminal_scenario_and_override(make_rig, make_env):
    rig = make_rig(2)
    env, _ = make_env(rig, balances=[0.79])
    env.reset()
    env.state.previous_balance = 0.82
    _, reward, terminal = env.step([0.0, 0.0])
    assert terminal is True
    assert reward == -1.0
    assert env.status == TERMINATED
    assert env.state.cumulative_reward == pytest.approx(-1.0)


def test_step_after_termination_is_rejected(make_rig, make_env):
    rig = make_rig(2)
    env, physics = make_env(rig, balances=[0.5])
    env.reset()
    env.step([0.1, 0.1])
    with pytest.raises(ContractViolation):
        env.step([0.2, 0.2])
    assert env.step_count == 1
    assert physics.calls == 1
    env.reset()
    env.step([0.2, 0.2])
    assert env.step_count == 1


def test_wrong_action_length_does_not_mutate(make_rig, make_env):
    rig = make_rig(2)
    env, physics = make_env(rig, balances=[0.99])
    env.reset()
    with pytest.raises(ContractViolation):
        env.step([0.1, 0.2, 0.3])
    assert env.step_count == 0
    assert physics.calls == 0
    assert env.state.previous_balance == 1.0
    assert [j.target for j in rig.joints] == [0.0, 0.0]


def test_balance_is_recorded_every_step(make_rig, make_env):
    rig = make_rig(2)
    stats = StatsRecorder()
    env, _ = make_env(rig, balances=[0.99, 0.97], stats=stats)
    env.reset()
    env.step([0, 0])
    env.step([0, 0])
    assert stats.values(C.BALANCE_STAT_KEY) == pytest.approx([0.99, 0.97])


def test_previous_balance_tracks_every_step(make_rig, make_env):
    rig = make_rig(1)
    env, _ = make_env(rig, balances=[0.96, 0.98, 0.9])
    env.reset()
    for expected in (0.96, 0.98, 0.9):
        env.step([0.0])
        assert env.state.previous_balance == pytest.approx(expected)


def test_snapshot(make_rig, make_env):
    rig = make_rig(2)
    env, _ = make_env(rig, balances=[0.9])
    env.reset()
    snap = env.snapshot(9.81)
    assert snap.actions == []
    assert snap.balance == 1.0
    env.step([0.5, -0.3])
    snap = env.snapshot(5.0)
    assert snap.episode == 1
    assert snap.steps == 1
    assert snap.balance == pytest.approx(0.9)
    assert snap.balance_delta == pytest.approx(-0.1)
    assert snap.step_reward == pytest.approx(-0.045)
    assert snap.cumulative_reward == pytest.approx(-0.045)
    assert snap.gravity == 5.0
    assert snap.actions == pytest.approx([0.5, -0.3])


def test_without_physics_step_reads_current_pose(make_rig, set_balance):
    rig = make_rig(1)
    env = BalanceEnv(rig)
    env.reset()
    set_balance(rig.root, 0.5)
    _, reward, terminal = env.step([0.0])
    assert terminal
    assert reward == C.TERMINAL_PENALTY


def test_nested_action_does_not_mutate(make_rig, make_env):
    rig = make_rig(2)
    env, physics = make_env(rig, balances=[0.99])
    env.reset()
    with pytest.raises(ContractViolation):
        env.step([[0.5, -0.3]])
    assert env.step_count == 0
    assert physics.calls == 0
    assert [j.target for j in rig.joints] == [0.0, 0.0]
