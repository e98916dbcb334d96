"""
State Detection Module

Pure function that analyzes RunMetrics and determines the current RunState.
All detection rules are deterministic and explainable.

State priority (checked in order, first match wins):
1. START (first 10 seconds)
2. FATIGUE, then STRUGGLING (wellbeing)
3. UPHILL / DOWNHILL (terrain overrides pace)
4. SPEEDING_UP, then STRONG (momentum)
5. SLOWING_DOWN
6. STEADY (default)

Non-finite readings (NaN, +/-inf) are treated as unknown: a rule that
depends on an unknown reading never fires.
"""

import math
from typing import Dict, List

from .types import RunMetrics, RunnerProfile, RunState, EffortLevel


# Policy constants. Keep identical unless retuning the model.
THRESHOLDS: Dict[str, float] = {
    "start_window_sec": 10,
    "fatigue_avg_degradation_pct": 15,
    "fatigue_pace_delta": 2,
    "fatigue_min_elapsed_sec": 120,
    "struggling_degradation_pct": 25,
    "struggling_pace_delta": 5,
    "struggling_min_speed_mps": 2.5,    # ~9 km/h
    "uphill_elevation_delta": 15,       # meters gained in 30s
    "downhill_elevation_delta": -15,
    "speeding_up_pace_delta": -1,
    "strong_degradation_pct": -10,
    "strong_min_speed_mps": 5,
    "slowing_down_pace_delta": 0.5,
}

EFFORT_BANDS = {
    "easy_below_mps": 4.0,          # 14.4 km/h
    "moderate_below_mps": 5.5,      # 19.8 km/h
}


def _known(value: float) -> float:
    """Map non-finite readings to NaN so every comparison against them is False."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return math.nan
    return value if math.isfinite(value) else math.nan


def unknown_fields(metrics: RunMetrics, profile: RunnerProfile) -> List[str]:
    """Names of numeric inputs that are NaN or infinite."""
    readings = {
        "elapsed_time_sec": metrics.elapsed_time_sec,
        "current_pace_sec_per_km": metrics.current_pace_sec_per_km,
        "avg_pace_sec_per_km": metrics.avg_pace_sec_per_km,
        "speed_mps": metrics.speed_mps,
        "elevation_delta_last_30s": metrics.elevation_delta_last_30s,
        "pace_delta_last_30s": metrics.pace_delta_last_30s,
        "typical_pace_sec_per_km": profile.typical_pace_sec_per_km,
    }
    return [name for name, value in readings.items() if math.isnan(_known(value))]


def get_pace_deviation(current_pace: float, target_pace: float) -> float:
    """
    How far off target pace the runner is, in percent (positive = slower).

    Returns 0.0 when the target is zero or either pace is non-finite.
    """
    current = _known(current_pace)
    target = _known(target_pace)
    if math.isnan(current) or math.isnan(target) or target == 0:
        return 0.0
    return ((current - target) / target) * 100


def _degradation(pace: float, target_pace: float) -> float:
    # Same formula as get_pace_deviation, but keeps unknowns unknown so the
    # rules that read it stay silent instead of seeing a 0% deviation.
    pace = _known(pace)
    target = _known(target_pace)
    if math.isnan(pace) or math.isnan(target) or target == 0:
        return math.nan
    return ((pace - target) / target) * 100


def get_effort_level(speed_mps: float) -> EffortLevel:
    """Effort band from speed. Unknown speed counts as easy."""
    speed = _known(speed_mps)
    if math.isnan(speed) or speed < EFFORT_BANDS["easy_below_mps"]:
        return EffortLevel.EASY
    if speed < EFFORT_BANDS["moderate_below_mps"]:
        return EffortLevel.MODERATE
    return EffortLevel.HARD


def detect_run_state(metrics: RunMetrics, profile: RunnerProfile) -> RunState:
    """
    Detect the current running state from metrics and profile.

    Rules are evaluated in strict priority order and the first match is
    returned. FINISHING is never produced here.
    """
    t = THRESHOLDS

    elapsed = _known(metrics.elapsed_time_sec)
    current_pace = _known(metrics.current_pace_sec_per_km)
    avg_pace = _known(metrics.avg_pace_sec_per_km)
    speed = _known(metrics.speed_mps)
    elevation_delta = _known(metrics.elevation_delta_last_30s)
    pace_delta = _known(metrics.pace_delta_last_30s)
    typical_pace = profile.typical_pace_sec_per_km

    # Priority 1: START - first 10 seconds of run
    if elapsed < t["start_window_sec"]:
        return RunState.START

    # Priority 2a: FATIGUE - average pace well off typical and still worsening
    avg_degradation = _degradation(avg_pace, typical_pace)
    if (
        avg_degradation > t["fatigue_avg_degradation_pct"]
        and pace_delta > t["fatigue_pace_delta"]
        and elapsed > t["fatigue_min_elapsed_sec"]
    ):
        return RunState.FATIGUE

    # Priority 2b: STRUGGLING - major pace collapse or very low speed
    current_degradation = _degradation(current_pace, typical_pace)
    if (
        current_degradation > t["struggling_degradation_pct"]
        or pace_delta > t["struggling_pace_delta"]
        or speed < t["struggling_min_speed_mps"]
    ):
        return RunState.STRUGGLING

    # Priority 3: terrain
    if elevation_delta > t["uphill_elevation_delta"]:
        return RunState.UPHILL

    if elevation_delta < t["downhill_elevation_delta"]:
        return RunState.DOWNHILL

    # Priority 4a: SPEEDING_UP - faster than average and getting faster
    if current_pace < avg_pace and pace_delta < t["speeding_up_pace_delta"]:
        return RunState.SPEEDING_UP

    # Priority 4b: STRONG - well under typical pace at high speed
    if (
        current_degradation < t["strong_degradation_pct"]
        and speed > t["strong_min_speed_mps"]
    ):
        return RunState.STRONG

    # Priority 5: SLOWING_DOWN - slower than average and getting worse
    if current_pace > avg_pace and pace_delta > t["slowing_down_pace_delta"]:
        return RunState.SLOWING_DOWN

    # TODO: FINISHING needs the run's target distance on RunnerProfile before
    # a rule can be added here.

    return RunState.STEADY
