import json

import pytest

from humanoid_balance import config as C
from humanoid_balance.curriculum import (
    CurriculumStage,
    EnvironmentParameter,
    GlobalProgress,
    GravityCurriculum,
    load_stages,
    sort_stages,
)

STAGES = [(0, 9.81), (1000, 5.0), (5000, 2.0)]


def make(stages=STAGES, value=9.81, default=9.81):
    param = EnvironmentParameter(value)
    return GravityCurriculum(stages, param, default=default, verbose=False), param


@pytest.mark.parametrize(
    "progress,expected",
    [(0, 9.81), (999, 9.81), (1000, 5.0), (1500, 5.0), (4999, 5.0), (5000, 2.0), (10**9, 2.0)],
)
def test_select(progress, expected):
    cur, _ = make()
    assert cur.select(progress) == expected


def test_unsorted_input_is_sorted_on_load():
    cur, _ = make(stages=[(5000, 2.0), (0, 9.81), (1000, 5.0)])
    assert [s.threshold for s in cur.stages] == [0, 1000, 5000]
    assert cur.select(1500) == 5.0


def test_default_when_no_stage_reached():
    cur, _ = make(stages=[(100, 3.0)], default=9.81)
    assert cur.select(99) == 9.81
    assert cur.active_stage(99) is None
    assert cur.select(100) == 3.0


def test_empty_curriculum_uses_default():
    cur, param = make(stages=[], value=9.81, default=9.81)
    assert cur.select(123456) == 9.81
    assert cur.update(123456) is False
    assert param.writes == 0


def test_update_writes_only_on_change():
    cur, param = make()
    assert cur.update(0) is False
    assert param.writes == 0

    assert cur.update(1500) is True
    assert param.value == 5.0
    assert param.writes == 1

    assert cur.update(1500) is False
    assert cur.update(2000) is False
    assert param.writes == 1

    assert cur.update(5000) is True
    assert param.value == 2.0
    assert param.writes == 2


def test_first_update_writes_when_parameter_differs():
    cur, param = make(value=1.0)
    assert cur.update(0) is True
    assert param.value == 9.81


def test_value_is_constant_between_thresholds_and_follows_stage_order():
    cur, _ = make()
    seen = []
    for progress in range(0, 6000, 50):
        value = cur.select(progress)
        if not seen or seen[-1] != value:
            seen.append(value)
    assert seen == [9.81, 5.0, 2.0]
    assert len({cur.select(p) for p in range(1001, 5000)}) == 1


def test_persists_across_episode_resets_via_progress_only():
    cur, param = make()
    progress = GlobalProgress()
    for _ in range(3):  # three "episodes" of 600 ticks
        for _ in range(600):
            cur.update(progress.value)
            progress.advance()
    assert progress.value == 1800
    assert param.value == 5.0


def test_negative_threshold_rejected():
    with pytest.raises(ValueError):
        sort_stages([(-1, 3.0)])


def test_stage_forms():
    stages = sort_stages([{"name": "moon", "threshold": 10, "value": 1.62}, (0, 9.81), [5, 6.0, "mid"]])
    assert stages == [
        CurriculumStage(0, 9.81, ""),
        CurriculumStage(5, 6.0, "mid"),
        CurriculumStage(10, 1.62, "moon"),
    ]


def test_load_stages_from_json(tmp_path):
    path = tmp_path / "curriculum.json"
    path.write_text(json.dumps([
        {"name": "low", "threshold": 5000, "value": 2.0},
        {"name": "earth", "threshold": 0, "value": 9.81},
    ]))
    stages = load_stages(path)
    assert [s.name for s in stages] == ["earth", "low"]

    path.write_text(json.dumps({"stages": [[1000, 5.0]]}))
    assert load_stages(path) == [CurriculumStage(1000, 5.0)]


def test_global_progress_is_monotonic():
    p = GlobalProgress()
    assert p.advance() == 1
    assert p.advance(10) == 11
    with pytest.raises(ValueError):
        p.advance(-1)


def test_stage_change_is_printed(capsys):
    param = EnvironmentParameter(9.81)
    cur = GravityCurriculum([(0, 9.81, "earth"), (10, 1.62, "moon")], param)
    cur.update(10)
    out = capsys.readouterr().out
    assert "moon" in out
    assert "1.62" in out


def test_default_config_table_is_sorted():
    cur = GravityCurriculum(C.CURRICULUM, EnvironmentParameter(), verbose=False)
    thresholds = [s.threshold for s in cur.stages]
    assert thresholds == sorted(thresholds)
    assert cur.select(0) == C.DEFAULT_GRAVITY
