"""
Backend Configuration

Loads environment variables and provides configuration settings.
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv

from run_coach import CoachingConfig, CoachingUrgency, COOLDOWN_BY_URGENCY

logger = logging.getLogger(__name__)

# Load .env.local first (for local development), then .env as fallback
env_local = Path(__file__).parent / '.env.local'
env_file = Path(__file__).parent / '.env'

if env_local.exists():
    load_dotenv(env_local)
elif env_file.exists():
    load_dotenv(env_file)


def _env_seconds(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using default {default}s")
        return default


# Cooldowns (seconds) per urgency of the last issued intent
COOLDOWN_HIGH_SEC = _env_seconds("COACH_COOLDOWN_HIGH_SEC", COOLDOWN_BY_URGENCY[CoachingUrgency.HIGH])
COOLDOWN_MEDIUM_SEC = _env_seconds("COACH_COOLDOWN_MEDIUM_SEC", COOLDOWN_BY_URGENCY[CoachingUrgency.MEDIUM])
COOLDOWN_LOW_SEC = _env_seconds("COACH_COOLDOWN_LOW_SEC", COOLDOWN_BY_URGENCY[CoachingUrgency.LOW])

# Session registry
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))

# Server Config
BACKEND_HOST = os.getenv("BACKEND_HOST", "0.0.0.0")
BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8000"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def coaching_config() -> CoachingConfig:
    """Engine settings for a new session. Raises ValueError on bad cooldowns."""
    return CoachingConfig(cooldown_by_urgency={
        CoachingUrgency.HIGH: COOLDOWN_HIGH_SEC,
        CoachingUrgency.MEDIUM: COOLDOWN_MEDIUM_SEC,
        CoachingUrgency.LOW: COOLDOWN_LOW_SEC,
    })
