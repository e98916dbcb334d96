"""
Run Coach - Real-Time Running Feedback Decisions

A deterministic, explainable decision engine that turns a stream of run
metrics into a sparse stream of coaching decisions.

Layers:
1. Types (metrics, profile, states, intents) - types.py
2. State Detection (metrics -> run state) - state_detector.py
3. Intent Mapping (state -> goal/tone/urgency, cooldowns) - intent_mapper.py
4. Coaching Engine (confidence + feedback gate) - engine.py
5. Scenario Replay (worked examples) - scenarios.py

The engine decides WHAT to say, never the words: turning an intent into
text or audio is the voice layer's job.
"""

from .types import (
    RunMetrics,
    RunnerProfile,
    RunState,
    CoachingGoal,
    CoachingTone,
    CoachingUrgency,
    CoachingIntent,
    CoachingOutput,
    FeedbackHistory,
    ExperienceLevel,
    RunGoal,
    EffortLevel,
)

from .state_detector import (
    detect_run_state,
    get_pace_deviation,
    get_effort_level,
    THRESHOLDS,
)

from .intent_mapper import (
    map_state_to_intent,
    get_intent_reason,
    should_suppress_duplicate_feedback,
    COOLDOWN_BY_URGENCY,
    DEFAULT_INTENT,
)

from .engine import (
    CoachingEngine,
    CoachingConfig,
    create_coaching_engine,
)

from .scenarios import (
    Scenario,
    ReplayStep,
    ReplayClock,
    SCENARIOS,
    get_scenario,
    replay_scenario,
)

__version__ = "0.1.0"
__all__ = [
    # Types
    "RunMetrics",
    "RunnerProfile",
    "RunState",
    "CoachingGoal",
    "CoachingTone",
    "CoachingUrgency",
    "CoachingIntent",
    "CoachingOutput",
    "FeedbackHistory",
    "ExperienceLevel",
    "RunGoal",
    "EffortLevel",
    # State Detection
    "detect_run_state",
    "get_pace_deviation",
    "get_effort_level",
    "THRESHOLDS",
    # Intent Mapping
    "map_state_to_intent",
    "get_intent_reason",
    "should_suppress_duplicate_feedback",
    "COOLDOWN_BY_URGENCY",
    "DEFAULT_INTENT",
    # Engine
    "CoachingEngine",
    "CoachingConfig",
    "create_coaching_engine",
    # Scenarios
    "Scenario",
    "ReplayStep",
    "ReplayClock",
    "SCENARIOS",
    "get_scenario",
    "replay_scenario",
]
