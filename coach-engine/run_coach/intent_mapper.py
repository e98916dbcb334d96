"""
Intent Mapper - Decides What The Coach Tries To Do

Maps RunState -> CoachingIntent. This decides WHAT the coach should try to
accomplish, not what it should SAY (that belongs to the voice layer).

Also owns the cooldown table and the duplicate-suppression rule used by
the engine's feedback gate.
"""

from typing import Dict, Optional

from .types import (
    RunState,
    CoachingIntent,
    CoachingGoal,
    CoachingTone,
    CoachingUrgency,
)


# Fallback for any state missing from the table below
DEFAULT_INTENT = CoachingIntent(
    goal=CoachingGoal.MAINTAIN,
    tone=CoachingTone.CALM,
    urgency=CoachingUrgency.LOW,
)

STATE_INTENTS: Dict[RunState, CoachingIntent] = {
    # Welcome the runner, set expectations
    RunState.START: CoachingIntent(
        CoachingGoal.MAINTAIN, CoachingTone.MOTIVATIONAL, CoachingUrgency.LOW
    ),
    RunState.STEADY: CoachingIntent(
        CoachingGoal.MAINTAIN, CoachingTone.CALM, CoachingUrgency.LOW
    ),
    # Keep the momentum but be smart
    RunState.SPEEDING_UP: CoachingIntent(
        CoachingGoal.MAINTAIN, CoachingTone.MOTIVATIONAL, CoachingUrgency.LOW
    ),
    RunState.STRONG: CoachingIntent(
        CoachingGoal.MAINTAIN, CoachingTone.MOTIVATIONAL, CoachingUrgency.MEDIUM
    ),
    # Pace is drifting, gently encourage a hold
    RunState.SLOWING_DOWN: CoachingIntent(
        CoachingGoal.MAINTAIN, CoachingTone.SUPPORTIVE, CoachingUrgency.LOW
    ),
    # Don't go too hard up the hill
    RunState.UPHILL: CoachingIntent(
        CoachingGoal.REDUCE_EFFORT, CoachingTone.SUPPORTIVE, CoachingUrgency.MEDIUM
    ),
    RunState.DOWNHILL: CoachingIntent(
        CoachingGoal.MAINTAIN, CoachingTone.CALM, CoachingUrgency.LOW
    ),
    # Tiring over time: normalize it
    RunState.FATIGUE: CoachingIntent(
        CoachingGoal.STAY_CALM, CoachingTone.SUPPORTIVE, CoachingUrgency.HIGH
    ),
    # Major difficulty: keep them moving
    RunState.STRUGGLING: CoachingIntent(
        CoachingGoal.STAY_CALM, CoachingTone.SUPPORTIVE, CoachingUrgency.HIGH
    ),
    RunState.FINISHING: CoachingIntent(
        CoachingGoal.PREPARE_FINISH, CoachingTone.MOTIVATIONAL, CoachingUrgency.HIGH
    ),
}

STATE_REASONS: Dict[RunState, str] = {
    RunState.START: "Run has just started",
    RunState.STEADY: "Pace is stable and sustainable",
    RunState.SPEEDING_UP: "Pace improving, momentum building",
    RunState.STRONG: "Running significantly faster than typical",
    RunState.SLOWING_DOWN: "Pace deteriorating, needs encouragement",
    RunState.UPHILL: "Elevation gain detected",
    RunState.DOWNHILL: "Elevation loss detected",
    RunState.FATIGUE: "Sustained pace degradation over time",
    RunState.STRUGGLING: "Major pace collapse, needs immediate support",
    RunState.FINISHING: "Run nearing end, prepare to finish",
}

UNKNOWN_REASON = "Unknown state"

# Seconds to wait after an intent of this urgency before speaking again.
# High urgency gets the shortest wait so critical feedback can recur.
COOLDOWN_BY_URGENCY: Dict[CoachingUrgency, int] = {
    CoachingUrgency.HIGH: 30,
    CoachingUrgency.MEDIUM: 45,
    CoachingUrgency.LOW: 60,
}


def map_state_to_intent(state: RunState) -> CoachingIntent:
    """Map a detected run state to its coaching intent."""
    return STATE_INTENTS.get(state, DEFAULT_INTENT)


def get_intent_reason(state: RunState) -> str:
    """Explain an intent for logging/debugging. Never shown to the runner."""
    return STATE_REASONS.get(state, UNKNOWN_REASON)


def should_suppress_duplicate_feedback(
    last_intent: Optional[CoachingIntent],
    current_intent: CoachingIntent
) -> bool:
    """
    Don't repeat the exact same intent back-to-back, even after cooldown.

    Prevents "slow down... slow down... slow down...". Urgency is ignored:
    only goal and tone decide whether two intents are duplicates.
    """
    if last_intent is None:
        return False

    # Different goal: definitely give feedback
    if last_intent.goal != current_intent.goal:
        return False

    # Same goal, different tone keeps coaching varied
    if last_intent.tone != current_intent.tone:
        return False

    return True
