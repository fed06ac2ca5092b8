import logging
import os
import uuid

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .analysis import run_session_analysis
from .constants import ANALYSIS_TRACKS
from .jury_questions import run_jury_questions
from .models import (
    AnalysisResponse,
    AnalyzeSessionRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    JuryQuestionsResponse,
    SessionStatusResponse,
)
from .segmenter import InvalidSegmentError
from .storage import build_session_store


logger = logging.getLogger("uvicorn.error")

app = FastAPI(title="Pitch Structure Analyzer")
session_store = build_session_store()

frontend_origins = os.getenv(
    "FRONTEND_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in frontend_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validate_track(track: str) -> str:
    if track not in ANALYSIS_TRACKS:
        allowed = ", ".join(sorted(ANALYSIS_TRACKS))
        raise HTTPException(status_code=400, detail=f"Unsupported track {track!r}. Expected one of: {allowed}.")
    return track


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "storage": session_store.storage_name}


@app.post("/api/sessions", response_model=CreateSessionResponse)
def create_session(request: CreateSessionRequest) -> CreateSessionResponse:
    track = _validate_track(request.track)
    session_id = str(uuid.uuid4())
    session_store.create_session(session_id, track=track)
    logger.info("session_id=%s session_created track=%s", session_id, track)
    return CreateSessionResponse(session_id=session_id, status="created")


@app.get("/api/sessions/{session_id}", response_model=SessionStatusResponse)
def get_session_status(session_id: str) -> SessionStatusResponse:
    session = session_store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found.")
    return SessionStatusResponse(
        session_id=session_id,
        track=session.track,
        status=session.status,
        duration_seconds=session.duration_seconds,
        events=session.events,
        primary_issue_key=session.primary_issue_key,
        primary_issue=session.primary_issue,
        baseline_session_id=session.baseline_session_id,
        improvement_summary=session.improvement_summary,
        jury_questions=session.jury_questions,
        error=session.error,
    )


@app.post("/api/sessions/{session_id}/analyze", response_model=AnalysisResponse)
def analyze_session(session_id: str, request: AnalyzeSessionRequest) -> AnalysisResponse:
    session = session_store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found.")
    track = _validate_track(request.track or session.track)

    try:
        return run_session_analysis(
            session_store,
            session_id,
            request.segments,
            track=track,
            duration_seconds=request.duration_seconds,
            baseline_session_id=request.baseline_session_id,
        )
    except InvalidSegmentError as exc:
        logger.warning("session_id=%s analysis_rejected error=%s", session_id, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Session not found.") from exc


@app.post("/api/sessions/{session_id}/jury-questions", response_model=JuryQuestionsResponse)
def create_jury_questions(session_id: str) -> JuryQuestionsResponse:
    try:
        result = run_jury_questions(session_store, session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Session not found.") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return JuryQuestionsResponse(session_id=session_id, jury_questions=result)
