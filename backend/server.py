from fastapi import FastAPI, APIRouter, HTTPException, Response
from starlette.middleware.cors import CORSMiddleware
import logging
import uvicorn

from .config import (
    BACKEND_HOST,
    BACKEND_PORT,
    CORS_ORIGINS,
    LOG_LEVEL,
    MAX_SESSIONS,
    coaching_config,
)
from .models.coach_session import (
    ProfileRequest,
    MetricsRequest,
    DecisionResponse,
    CoachingOutputModel,
    HistoryResponse,
    SessionResponse,
)
from .services.session_registry import SessionRegistry, CoachSession


# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create the main app without a prefix
app = FastAPI(title="Run Coach API")

# Create a router with the /api prefix
api_router = APIRouter(prefix="/api")

registry = SessionRegistry(config_factory=coaching_config, max_sessions=MAX_SESSIONS)


def get_session_or_404(session_id: str) -> CoachSession:
    session = registry.get(session_id)
    if session is None:
        logger.warning(f"Unknown session {session_id}")
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


@api_router.get("/")
def root():
    return {"message": "Run Coach API"}


@api_router.get("/health")
def health():
    return {"status": "ok", **registry.stats()}


# ── Coaching Session Endpoints ────────────────────────────────────────────
# Plain `def` handlers run in the threadpool; the registry serializes access
# per session.

@api_router.post("/coach/sessions", response_model=SessionResponse, status_code=201)
def open_session(request: ProfileRequest):
    """Start a run: one engine per session."""
    try:
        session = registry.create(request.to_profile())
    except ValueError as e:
        logger.error(f"Invalid coaching configuration: {e}")
        raise HTTPException(status_code=500, detail="Coaching configuration is invalid")

    return SessionResponse(
        session_id=session.session_id,
        profile=request,
        cooldowns=session.engine.config.to_dict(),
        created_at=session.created_at,
    )


@api_router.post("/coach/sessions/{session_id}/metrics", response_model=DecisionResponse)
def post_metrics(session_id: str, request: MetricsRequest):
    """Feed one metrics snapshot. Returns a decision, or none while the gate is closed."""
    session = get_session_or_404(session_id)
    output = registry.update(session, request.to_metrics())

    if output is None:
        return DecisionResponse(emitted=False)

    logger.info(
        f"Session {session_id}: {output.state.value} -> "
        f"{output.intent.goal.value}/{output.intent.tone.value} ({output.reason})"
    )
    return DecisionResponse(emitted=True, output=CoachingOutputModel.from_output(output))


@api_router.post("/coach/sessions/{session_id}/reset", response_model=HistoryResponse)
def reset_session(session_id: str):
    session = get_session_or_404(session_id)
    history = registry.reset(session)
    logger.info(f"Session {session_id} reset")
    return HistoryResponse.from_history(session_id, history)


@api_router.get("/coach/sessions/{session_id}/history", response_model=HistoryResponse)
def get_history(session_id: str):
    session = get_session_or_404(session_id)
    return HistoryResponse.from_history(session_id, registry.history(session))


@api_router.delete("/coach/sessions/{session_id}", status_code=204)
def close_session(session_id: str):
    if not registry.remove(session_id):
        logger.warning(f"Unknown session {session_id}")
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return Response(status_code=204)


# Include the router in the main app
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


if __name__ == "__main__":
    uvicorn.run(app, host=BACKEND_HOST, port=BACKEND_PORT)
