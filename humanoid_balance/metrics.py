"""
Metrics and reporting helpers.

Responsibilities:
- Per-step statistics sink (key -> appended scalar values)
- Per-episode metrics aggregation
- Rolling windows (fall rate, averages)
- Export to CSV/JSON at exit
"""
from __future__ import annotations

import csv
import json
from collections import defaultdict, deque
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Deque, Dict, List, Optional

from . import config as C


class StatsRecorder:
    """Write-only statistics sink: add(key, value), one call per step."""

    def __init__(self) -> None:
        self._values: Dict[str, List[float]] = defaultdict(list)

    def add(self, key: str, value: float) -> None:
        self._values[key].append(float(value))

    def keys(self) -> List[str]:
        return list(self._values.keys())

    def values(self, key: str) -> List[float]:
        return list(self._values.get(key, []))

    def latest(self, key: str) -> Optional[float]:
        vals = self._values.get(key)
        return vals[-1] if vals else None

    def mean(self, key: str) -> float:
        vals = self._values.get(key)
        if not vals:
            return 0.0
        return sum(vals) / len(vals)

    def clear(self) -> None:
        self._values.clear()


@dataclass
class EpisodeRecord:
    episode: int
    steps: int
    total_reward: float
    final_balance: float
    min_balance: float
    fell: bool
    gravity: float
    global_progress: int
    wall_time_sec_episode: float
    wall_time_sec_cumulative: float
    rolling_fall_rate: float
    rolling_avg_reward: float
    rolling_avg_steps: float


class RunMetrics:
    """Capture per-episode metrics and export them as CSV/JSON."""

    def __init__(self, run_name: Optional[str] = None, run_tag: str = "") -> None:
        self.run_name = run_name or f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.run_tag = run_tag
        self.records: List[EpisodeRecord] = []
        self._fall_window: Deque[bool] = deque(maxlen=C.EP_N)
        self._reward_window: Deque[float] = deque(maxlen=C.EP_N)
        self._steps_window: Deque[int] = deque(maxlen=C.EP_N)
        self._cumulative_wall_time = 0.0

    def record_episode(
        self,
        episode: int,
        *,
        steps: int,
        total_reward: float,
        final_balance: float,
        min_balance: float,
        fell: bool,
        gravity: float,
        global_progress: int,
        wall_time_sec_episode: float,
    ) -> EpisodeRecord:
        """Record metrics for a completed episode."""
        self._cumulative_wall_time += wall_time_sec_episode

        self._fall_window.append(fell)
        self._reward_window.append(total_reward)
        self._steps_window.append(steps)

        record = EpisodeRecord(
            episode=episode,
            steps=steps,
            total_reward=total_reward,
            final_balance=final_balance,
            min_balance=min_balance,
            fell=fell,
            gravity=gravity,
            global_progress=global_progress,
            wall_time_sec_episode=wall_time_sec_episode,
            wall_time_sec_cumulative=self._cumulative_wall_time,
            rolling_fall_rate=self._mean_bool(self._fall_window),
            rolling_avg_reward=self._mean_float(self._reward_window),
            rolling_avg_steps=self._mean_float(self._steps_window),
        )
        self.records.append(record)
        return record

    def export_csv(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(asdict(self.records[0]).keys()))
            writer.writeheader()
            for rec in self.records:
                writer.writerow(asdict(rec))

    def export_json(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload: Dict[str, object] = {
            "run_name": self.run_name,
            "run_tag": self.run_tag,
            "episodes": [asdict(r) for r in self.records],
            "episode_count": len(self.records),
            "created_at": datetime.now().isoformat(),
        }
        with path.open("w") as f:
            json.dump(payload, f, indent=2)

    def finalize_and_export(
        self,
        *,
        out_dir: Path = C.REPORTS_DIR,
        export_csv: bool = True,
        export_json: bool = True,
    ) -> List[Path]:
        if not self.records:
            return []

        out_dir = Path(out_dir)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base_name = f"{self.run_name}_{timestamp}"
        written = []
        if export_csv:
            written.append(out_dir / f"{base_name}.csv")
            self.export_csv(written[-1])
        if export_json:
            written.append(out_dir / f"{base_name}.json")
            self.export_json(written[-1])
        return written

    @staticmethod
    def _mean_bool(values: Deque[bool]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

    @staticmethod
    def _mean_float(values: Deque[float]) -> float:
        if not values:
            return 0.0
        return float(sum(values) / len(values))
