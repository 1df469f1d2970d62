"""
Curriculum learning / difficulty schedule.

Responsibilities:
- Define stages: (activation threshold in global steps, gravity magnitude)
- Sort stages on load; never trust caller order
- Pick the last stage reached by the global progress counter
- Write the shared gravity parameter only when the value actually changes

The schedule knows nothing about episodes; it is indexed by the total number
of steps taken in the run, which the driver passes in on every evaluation.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from . import config as C


@dataclass(frozen=True)
class CurriculumStage:
    threshold: int
    value: float
    name: str = ""


class GlobalProgress:
    """Total steps across all episodes. Only ever moves forward."""

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("progress cannot start below zero")
        self._value = int(start)

    @property
    def value(self) -> int:
        return self._value

    def advance(self, n: int = 1) -> int:
        if n < 0:
            raise ValueError("progress is monotonic; cannot advance by a negative amount")
        self._value += n
        return self._value


class EnvironmentParameter:
    """Shared scalar read by the physics backend (gravity magnitude)."""

    def __init__(self, value: float = C.DEFAULT_GRAVITY, name: str = "gravity"):
        self.name = name
        self.value = float(value)
        self.writes = 0

    def write(self, value: float) -> None:
        self.value = float(value)
        self.writes += 1


def _coerce_stage(raw) -> CurriculumStage:
    if isinstance(raw, CurriculumStage):
        return raw
    if isinstance(raw, dict):
        return CurriculumStage(int(raw["threshold"]), float(raw["value"]), str(raw.get("name", "")))
    threshold, value = raw[0], raw[1]
    name = str(raw[2]) if len(raw) > 2 else ""
    return CurriculumStage(int(threshold), float(value), name)


def sort_stages(stages: Optional[Iterable]) -> List[CurriculumStage]:
    parsed = [_coerce_stage(s) for s in (stages or [])]
    for s in parsed:
        if s.threshold < 0:
            raise ValueError(f"curriculum stage {s.name or s.value!r} has negative threshold {s.threshold}")
    return sorted(parsed, key=lambda s: s.threshold)


def load_stages(path) -> List[CurriculumStage]:
    """Load a JSON list of {"name", "threshold", "value"} objects or [threshold, value] pairs."""
    with Path(path).open() as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("stages", [])
    return sort_stages(raw)


class GravityCurriculum:
    def __init__(
        self,
        stages: Optional[Iterable] = None,
        parameter: Optional[EnvironmentParameter] = None,
        default: float = C.DEFAULT_GRAVITY,
        verbose: bool = True,
    ):
        self.stages = sort_stages(stages)
        self.parameter = parameter if parameter is not None else EnvironmentParameter(default)
        self.default = float(default)
        self.verbose = verbose
        self.applied = self.parameter.value

    def active_stage(self, progress: int) -> Optional[CurriculumStage]:
        active = None
        for stage in self.stages:
            if progress >= stage.threshold:
                active = stage
            else:
                break
        return active

    def select(self, progress: int) -> float:
        stage = self.active_stage(progress)
        return self.default if stage is None else stage.value

    def update(self, progress: int) -> bool:
        """Evaluate once per tick. Returns True when the parameter was written."""
        value = self.select(progress)
        if math.isclose(value, self.applied, rel_tol=0.0, abs_tol=1e-6):
            return False

        self.parameter.write(value)
        self.applied = value
        if self.verbose:
            stage = self.active_stage(progress)
            label = stage.name if stage and stage.name else "default"
            print(f"🌍 Curriculum: {self.parameter.name} -> {value:.2f} (stage={label}, steps={progress})")
        return True
