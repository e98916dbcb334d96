"""
Coaching Engine - Main Orchestrator

Orchestrates state detection, intent mapping, confidence scoring and the
feedback gate (cooldown + duplicate suppression).

Call update() every 2-5 seconds with fresh metrics. Most calls return None:
that is the normal outcome while a cooldown is running or the coach would
only repeat itself.

One engine per run session. The engine is not thread-safe: callers that
share an instance across threads must serialize update()/reset().
"""

import copy
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional

from .types import (
    RunMetrics,
    RunnerProfile,
    RunState,
    CoachingIntent,
    CoachingOutput,
    CoachingUrgency,
    FeedbackHistory,
)
from .state_detector import detect_run_state, get_pace_deviation, unknown_fields
from .intent_mapper import (
    map_state_to_intent,
    get_intent_reason,
    should_suppress_duplicate_feedback,
    COOLDOWN_BY_URGENCY,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass
class CoachingConfig:
    """Tunable engine settings. Defaults give behavioral parity."""
    cooldown_by_urgency: Dict[CoachingUrgency, float] = field(
        default_factory=lambda: dict(COOLDOWN_BY_URGENCY)
    )

    def __post_init__(self):
        missing = [u.value for u in CoachingUrgency if u not in self.cooldown_by_urgency]
        if missing:
            raise ValueError(f"cooldown_by_urgency missing urgencies: {missing}")

        for urgency, seconds in self.cooldown_by_urgency.items():
            if not isinstance(seconds, (int, float)) or not math.isfinite(seconds) or seconds < 0:
                raise ValueError(
                    f"cooldown for {urgency.value} must be a finite number >= 0, got {seconds!r}"
                )

    def cooldown_for(self, intent: Optional[CoachingIntent]) -> float:
        """Seconds required after `intent` was issued. 0 when nothing was issued."""
        if intent is None:
            return 0
        return self.cooldown_by_urgency[intent.urgency]

    def to_dict(self) -> Dict[str, float]:
        return {u.value: s for u, s in self.cooldown_by_urgency.items()}


class CoachingEngine:
    """
    Stateful coaching brain that remembers feedback history.

    Key rules:
    1. Exactly one state per update, picked by the detector's priority order
    2. Wait out the cooldown of the LAST issued intent's urgency
    3. Never repeat the same goal + tone back-to-back
    4. Confidence is always within [0, 1]
    """

    # Empirical tuning constants, not derived from a statistical model
    CONFIDENCE = {
        "start": 1.0,
        "elevation_strong_delta": 25,
        "elevation_strong": 0.95,
        "elevation_clear_delta": 15,
        "elevation_clear": 0.85,
        "elevation_weak": 0.70,
        "struggling_cap": 0.95,
        "struggling_divisor": 20,
        "fatigue_cap": 0.90,
        "fatigue_base": 0.5,
        "fatigue_divisor": 10,
        "strong_cap": 0.95,
        "strong_divisor": 15,
        "steady_stable_delta": 0.5,
        "steady_stable": 0.90,
        "steady_minor_delta": 1,
        "steady_minor": 0.75,
        "steady_noisy": 0.60,
        "default": 0.65,
    }

    def __init__(
        self,
        config: Optional[CoachingConfig] = None,
        clock: Optional[Clock] = None
    ):
        self.config = config or CoachingConfig()
        self._clock: Clock = clock or datetime.now
        self._history = self._fresh_history()

    def _fresh_history(self) -> FeedbackHistory:
        return FeedbackHistory(
            last_feedback_timestamp=self._clock(),
            last_intent=None,
            feedbacks_since_start=0,
        )

    def update(
        self,
        metrics: RunMetrics,
        profile: RunnerProfile
    ) -> Optional[CoachingOutput]:
        """
        Main update function.

        Returns coaching output if feedback should be given, or None if the
        gate is closed (cooldown active or duplicate suppressed).
        """
        unknown = unknown_fields(metrics, profile)
        if unknown:
            logger.warning(f"Non-finite readings treated as unknown: {', '.join(unknown)}")

        # 1. Detect current state
        state = detect_run_state(metrics, profile)

        # 2. Map to coaching intent
        intent = map_state_to_intent(state)

        # 3. Confidence from trend strength
        confidence = self.calculate_confidence(metrics, profile, state)

        # 4. Explanation for the logs
        reason = get_intent_reason(state)

        logger.debug(
            f"Detected {state.value} (confidence {confidence:.2f}): {reason}"
        )

        # 5. Gate
        now = self._clock()
        if not self._should_give_feedback(intent, now):
            return None

        output = CoachingOutput(
            state=state,
            intent=intent,
            confidence=confidence,
            reason=reason,
            timestamp=now,
        )

        self._history.last_feedback_timestamp = now
        self._history.last_intent = intent
        self._history.feedbacks_since_start += 1

        logger.debug(
            f"Feedback #{self._history.feedbacks_since_start}: "
            f"{intent.goal.value}/{intent.tone.value} ({intent.urgency.value})"
        )
        return output

    def _should_give_feedback(self, intent: CoachingIntent, now: datetime) -> bool:
        """Cooldown of the last intent's urgency, then duplicate suppression."""
        last_intent = self._history.last_intent
        elapsed = (now - self._history.last_feedback_timestamp).total_seconds()
        required = self.config.cooldown_for(last_intent)

        if elapsed < required:
            logger.debug(f"Cooldown active, {required - elapsed:.1f}s remaining")
            return False

        if should_suppress_duplicate_feedback(last_intent, intent):
            logger.debug(
                f"Suppressed duplicate {intent.goal.value}/{intent.tone.value}"
            )
            return False

        return True

    def calculate_confidence(
        self,
        metrics: RunMetrics,
        profile: RunnerProfile,
        state: RunState
    ) -> float:
        """
        Confidence (0-1) in this state: clarity of the signal, not correctness.

        Stronger trends give higher confidence. Unknown readings fall back to
        the weakest branch of each rule and the result is clamped to [0, 1].
        """
        c = self.CONFIDENCE

        if state == RunState.START:
            return _clamp_unit(c["start"])

        if state in (RunState.UPHILL, RunState.DOWNHILL):
            elevation_change = abs(metrics.elevation_delta_last_30s)
            if elevation_change > c["elevation_strong_delta"]:
                score = c["elevation_strong"]
            elif elevation_change > c["elevation_clear_delta"]:
                score = c["elevation_clear"]
            else:
                score = c["elevation_weak"]
            return _clamp_unit(score)

        # Pace-based states
        abs_deviation = abs(get_pace_deviation(
            metrics.current_pace_sec_per_km,
            profile.typical_pace_sec_per_km
        ))

        if state == RunState.STRUGGLING:
            return _clamp_unit(min(c["struggling_cap"], abs_deviation / c["struggling_divisor"]))

        if state == RunState.FATIGUE:
            pace_delta = metrics.pace_delta_last_30s
            if not math.isfinite(pace_delta):
                pace_delta = 0.0
            return _clamp_unit(
                min(c["fatigue_cap"], c["fatigue_base"] + pace_delta / c["fatigue_divisor"])
            )

        if state == RunState.STRONG:
            return _clamp_unit(min(c["strong_cap"], abs_deviation / c["strong_divisor"]))

        if state == RunState.STEADY:
            variation = abs(metrics.pace_delta_last_30s)
            if variation < c["steady_stable_delta"]:
                score = c["steady_stable"]
            elif variation < c["steady_minor_delta"]:
                score = c["steady_minor"]
            else:
                score = c["steady_noisy"]
            return _clamp_unit(score)

        return _clamp_unit(c["default"])

    def reset(self):
        """Start a new run session. Prior cooldowns do not carry over."""
        self._history = self._fresh_history()
        logger.debug("Feedback history reset")

    def get_history(self) -> FeedbackHistory:
        """Copy of the feedback history, for diagnostics and UI."""
        return copy.deepcopy(self._history)

    def set_last_feedback_time(self, timestamp: datetime):
        """Force the cooldown clock. For tests and special cases."""
        self._history.last_feedback_timestamp = timestamp

    @property
    def feedbacks_given(self) -> int:
        return self._history.feedbacks_since_start


def _clamp_unit(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def create_coaching_engine(
    config: Optional[CoachingConfig] = None,
    clock: Optional[Clock] = None
) -> CoachingEngine:
    """Create a new coaching engine, one per run."""
    return CoachingEngine(config=config, clock=clock)
