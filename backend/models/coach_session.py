"""
Coach Session API Models

Pydantic models for the run coaching session endpoints.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime, timezone

from run_coach import (
    RunMetrics,
    RunnerProfile,
    CoachingOutput,
    FeedbackHistory,
    ExperienceLevel,
    RunGoal,
)


class ProfileRequest(BaseModel):
    """API request body to open a run session."""
    level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    typical_pace_sec_per_km: float
    goal: RunGoal = RunGoal.EASY

    def to_profile(self) -> RunnerProfile:
        return RunnerProfile(
            level=self.level,
            typical_pace_sec_per_km=self.typical_pace_sec_per_km,
            goal=self.goal,
        )


class MetricsRequest(BaseModel):
    """API request body for one metrics snapshot (sent every 2-5 seconds)."""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    elapsed_time_sec: float
    distance_meters: float = 0.0
    current_pace_sec_per_km: float
    avg_pace_sec_per_km: float
    speed_mps: float
    elevation_meters: float = 0.0
    elevation_delta_last_30s: float = 0.0
    pace_delta_last_30s: float = 0.0

    def to_metrics(self) -> RunMetrics:
        return RunMetrics(
            timestamp=self.timestamp,
            elapsed_time_sec=self.elapsed_time_sec,
            distance_meters=self.distance_meters,
            current_pace_sec_per_km=self.current_pace_sec_per_km,
            avg_pace_sec_per_km=self.avg_pace_sec_per_km,
            speed_mps=self.speed_mps,
            elevation_meters=self.elevation_meters,
            elevation_delta_last_30s=self.elevation_delta_last_30s,
            pace_delta_last_30s=self.pace_delta_last_30s,
        )


class IntentModel(BaseModel):
    goal: str
    tone: str
    urgency: str


class CoachingOutputModel(BaseModel):
    """What the voice layer receives. `reason` is for logs only."""
    state: str
    intent: IntentModel
    confidence: float
    reason: str
    timestamp: datetime

    @classmethod
    def from_output(cls, output: CoachingOutput) -> "CoachingOutputModel":
        return cls(
            state=output.state.value,
            intent=IntentModel(**output.intent.to_dict()),
            confidence=output.confidence,
            reason=output.reason,
            timestamp=output.timestamp,
        )


class DecisionResponse(BaseModel):
    """API response for a metrics update. `output` is null while the gate is closed."""
    emitted: bool
    output: Optional[CoachingOutputModel] = None


class HistoryResponse(BaseModel):
    session_id: str
    last_feedback_timestamp: datetime
    last_intent: Optional[IntentModel] = None
    feedbacks_since_start: int = 0

    @classmethod
    def from_history(cls, session_id: str, history: FeedbackHistory) -> "HistoryResponse":
        return cls(
            session_id=session_id,
            last_feedback_timestamp=history.last_feedback_timestamp,
            last_intent=IntentModel(**history.last_intent.to_dict()) if history.last_intent else None,
            feedbacks_since_start=history.feedbacks_since_start,
        )


class SessionResponse(BaseModel):
    """API response after opening a session."""
    session_id: str
    profile: ProfileRequest
    cooldowns: Dict[str, float] = {}
    created_at: datetime
