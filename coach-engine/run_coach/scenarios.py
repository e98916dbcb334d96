"""
Scenario Replay

Named telemetry scenarios and a driver that replays them through a fresh
engine on a clock that follows each sample's timestamp. Used by the demo
runner and the tests.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Dict, Optional, Any

from .types import (
    RunMetrics,
    RunnerProfile,
    RunState,
    CoachingOutput,
    ExperienceLevel,
    RunGoal,
)
from .state_detector import detect_run_state
from .engine import CoachingConfig, create_coaching_engine


# Fixed origin so replays are reproducible
SCENARIO_EPOCH = datetime(2024, 1, 1, 7, 0, 0)


class ReplayClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime = SCENARIO_EPOCH):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, when: datetime):
        self.now = when

    def advance(self, seconds: float):
        self.now = self.now + timedelta(seconds=seconds)


@dataclass
class Scenario:
    """A runner profile and the metric samples a tracker would send."""
    name: str
    description: str
    profile: RunnerProfile
    samples: List[RunMetrics] = field(default_factory=list)


@dataclass
class ReplayStep:
    """One update of a replay: what was sent, what was seen, what was said."""
    metrics: RunMetrics
    state: RunState
    output: Optional[CoachingOutput]

    @property
    def emitted(self) -> bool:
        return self.output is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "elapsed_time_sec": self.metrics.elapsed_time_sec,
            "state": self.state.value,
            "output": self.output.to_dict() if self.output else None,
        }


def _sample(
    offset_sec: float,
    elapsed: float,
    distance: float,
    pace: float,
    avg_pace: float,
    speed: float,
    elevation: float,
    elevation_delta: float,
    pace_delta: float
) -> RunMetrics:
    return RunMetrics(
        timestamp=SCENARIO_EPOCH + timedelta(seconds=offset_sec),
        elapsed_time_sec=elapsed,
        distance_meters=distance,
        current_pace_sec_per_km=pace,
        avg_pace_sec_per_km=avg_pace,
        speed_mps=speed,
        elevation_meters=elevation,
        elevation_delta_last_30s=elevation_delta,
        pace_delta_last_30s=pace_delta,
    )


def _real_time_usage() -> Scenario:
    return Scenario(
        name="real_time_usage",
        description="Single update two minutes in, climbing while pace improves",
        profile=RunnerProfile(ExperienceLevel.INTERMEDIATE, 300, RunGoal.EASY),
        samples=[
            _sample(0, 120, 400, 298, 315, 3.36, 125, 18, -2),
        ],
    )


def _uphill_run() -> Scenario:
    return Scenario(
        name="uphill_run",
        description="Beginner on a 12-minute climb, tiring near the top",
        profile=RunnerProfile(ExperienceLevel.BEGINNER, 360, RunGoal.EASY),
        samples=[
            _sample(0, 10, 60, 350, 350, 2.86, 100, 2, 0),
            _sample(180, 180, 540, 355, 356, 2.82, 118, 6, 1),
            _sample(360, 360, 1020, 370, 360, 2.7, 160, 21, 5),
            _sample(540, 540, 1500, 390, 370, 2.56, 220, 20, 8),
            _sample(720, 720, 1950, 410, 375, 2.44, 280, 18, 12),
        ],
    )


def _hit_the_wall() -> Scenario:
    return Scenario(
        name="hit_the_wall",
        description="Long run going from steady to a pace collapse",
        profile=RunnerProfile(ExperienceLevel.INTERMEDIATE, 300, RunGoal.LONG),
        samples=[
            _sample(0, 600, 3000, 300, 300, 3.33, 50, 0, 0),
            _sample(300, 900, 4500, 320, 305, 3.13, 55, 0, 5),
            _sample(600, 1200, 5700, 350, 310, 2.86, 60, 0, 12),
            _sample(900, 1500, 6300, 400, 315, 2.5, 65, 0, 15),
        ],
    )


def _cooldown_test() -> Scenario:
    steady = dict(
        elapsed=300, distance=1500, pace=300, avg_pace=300, speed=3.33,
        elevation=50, elevation_delta=0, pace_delta=0,
    )
    return Scenario(
        name="cooldown_test",
        description="Five identical steady updates five seconds apart",
        profile=RunnerProfile(ExperienceLevel.INTERMEDIATE, 300, RunGoal.EASY),
        samples=[_sample(i * 5, **steady) for i in range(5)],
    )


def _fast_start() -> Scenario:
    return Scenario(
        name="fast_start",
        description="Runner bolts off the line, then settles",
        profile=RunnerProfile(ExperienceLevel.INTERMEDIATE, 300, RunGoal.EASY),
        samples=[
            _sample(0, 20, 150, 260, 260, 3.85, 50, 0, -20),
            _sample(30, 50, 350, 270, 265, 3.7, 55, 1, 5),
        ],
    )


SCENARIOS = {
    s.name: s for s in (
        _real_time_usage(),
        _uphill_run(),
        _hit_the_wall(),
        _cooldown_test(),
        _fast_start(),
    )
}


def get_scenario(name: str) -> Scenario:
    """Look up a built-in scenario. Raises KeyError for unknown names."""
    if name not in SCENARIOS:
        raise KeyError(f"Unknown scenario '{name}'. Available: {', '.join(SCENARIOS)}")
    return SCENARIOS[name]


def replay_scenario(
    scenario: Scenario,
    config: Optional[CoachingConfig] = None
) -> List[ReplayStep]:
    """Run every sample through a fresh engine, clock pinned to sample time."""
    start = scenario.samples[0].timestamp if scenario.samples else SCENARIO_EPOCH
    clock = ReplayClock(start)
    engine = create_coaching_engine(config=config, clock=clock)

    steps = []
    for metrics in scenario.samples:
        clock.set(metrics.timestamp)
        output = engine.update(metrics, scenario.profile)
        steps.append(ReplayStep(
            metrics=metrics,
            state=detect_run_state(metrics, scenario.profile),
            output=output,
        ))
    return steps
