"""
Run Coach Types

Core data structures for the running analysis engine:
- Metrics snapshots delivered by the tracker every few seconds
- The runner's baseline profile
- Run states, coaching intents and the decisions built from them
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Any
from enum import Enum


class RunState(Enum):
    """
    Detected running state - finite set of meaningful situations.

    FINISHING is declared and has an intent, but no detection rule selects
    it yet: it needs the run's target distance, which the metrics snapshot
    does not carry.
    """
    START = "START"                 # First 10 seconds of run
    STEADY = "STEADY"               # Stable pace, comfortable effort
    SPEEDING_UP = "SPEEDING_UP"     # Pace improving, runner getting faster
    SLOWING_DOWN = "SLOWING_DOWN"   # Pace deteriorating, runner tiring
    UPHILL = "UPHILL"               # Significant elevation gain
    DOWNHILL = "DOWNHILL"           # Significant elevation loss
    FATIGUE = "FATIGUE"             # Pace dropping steadily over time
    STRONG = "STRONG"               # Pace faster than typical
    FINISHING = "FINISHING"         # Near the end of the run
    STRUGGLING = "STRUGGLING"       # Major pace drop, needs support


class CoachingGoal(Enum):
    """What the coach should try to accomplish."""
    MAINTAIN = "maintain"
    REDUCE_EFFORT = "reduce_effort"
    INCREASE_EFFORT = "increase_effort"
    STAY_CALM = "stay_calm"
    PREPARE_FINISH = "prepare_finish"


class CoachingTone(Enum):
    """Emotional tone the voice layer should use."""
    CALM = "calm"                   # Reassuring, measured
    MOTIVATIONAL = "motivational"   # Energetic, encouraging
    SUPPORTIVE = "supportive"       # Empathetic, understanding
    CAUTIONARY = "cautionary"       # Warning, be careful


class CoachingUrgency(Enum):
    """How soon feedback should be delivered. Drives the cooldown."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ExperienceLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RunGoal(Enum):
    EASY = "easy"
    TEMPO = "tempo"
    LONG = "long"
    INTERVAL = "interval"


class EffortLevel(Enum):
    """Effort bands by speed."""
    EASY = "easy"           # < 4 m/s
    MODERATE = "moderate"   # 4 - 5.5 m/s
    HARD = "hard"           # >= 5.5 m/s


@dataclass(frozen=True)
class RunMetrics:
    """
    Real-time metrics captured during a run.

    Provided by the tracking system every 2-5 seconds. Deltas and averages
    are already derived by the caller.
    """
    timestamp: datetime
    elapsed_time_sec: float
    distance_meters: float
    current_pace_sec_per_km: float
    avg_pace_sec_per_km: float
    speed_mps: float
    elevation_meters: float
    elevation_delta_last_30s: float     # signed, meters
    pace_delta_last_30s: float          # signed, sec/km, positive = slower

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "elapsed_time_sec": self.elapsed_time_sec,
            "distance_meters": self.distance_meters,
            "current_pace_sec_per_km": self.current_pace_sec_per_km,
            "avg_pace_sec_per_km": self.avg_pace_sec_per_km,
            "speed_mps": self.speed_mps,
            "elevation_meters": self.elevation_meters,
            "elevation_delta_last_30s": self.elevation_delta_last_30s,
            "pace_delta_last_30s": self.pace_delta_last_30s,
        }


@dataclass(frozen=True)
class RunnerProfile:
    """Runner's baseline, set at run start and never changed by the engine."""
    level: ExperienceLevel
    typical_pace_sec_per_km: float  # normal easy pace
    goal: RunGoal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "typical_pace_sec_per_km": self.typical_pace_sec_per_km,
            "goal": self.goal.value,
        }


@dataclass(frozen=True)
class CoachingIntent:
    """
    The coaching decision: what to accomplish and how, not what to say.
    """
    goal: CoachingGoal
    tone: CoachingTone
    urgency: CoachingUrgency

    def to_dict(self) -> Dict[str, str]:
        return {
            "goal": self.goal.value,
            "tone": self.tone.value,
            "urgency": self.urgency.value,
        }


@dataclass
class CoachingOutput:
    """Final output from the engine, ready for the voice layer."""
    state: RunState
    intent: CoachingIntent
    confidence: float  # 0.0 - 1.0, clarity of the signal
    reason: str        # for logs, not for the runner
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "intent": self.intent.to_dict(),
            "confidence": round(self.confidence, 3),
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class FeedbackHistory:
    """Per-session memory used by the cooldown gate."""
    last_feedback_timestamp: datetime
    last_intent: Optional[CoachingIntent] = None
    feedbacks_since_start: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_feedback_timestamp": self.last_feedback_timestamp.isoformat(),
            "last_intent": self.last_intent.to_dict() if self.last_intent else None,
            "feedbacks_since_start": self.feedbacks_since_start,
        }
