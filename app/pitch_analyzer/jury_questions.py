from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from .constants import JURY_QUESTION_TRACKS, MAX_JURY_QUESTIONS, MIN_JURY_TRANSCRIPT_CHARS
from .llm_gptsapi import fill_prompt, parse_json_object, request_chat_completion, truncate
from .models import JuryQuestions
from .prompts.jury import JURY_QUESTIONS_VERSION, SYSTEM_PROMPT, USER_PROMPT_TEMPLATE
from .storage import SessionStore


logger = logging.getLogger("uvicorn.error")


def build_user_prompt(transcript_full_text: str, events: Any, primary_issue_key: str) -> str:
    return fill_prompt(
        USER_PROMPT_TEMPLATE,
        {
            "transcript_full_text": transcript_full_text.strip(),
            "events_json": json.dumps(events or {}, indent=2, sort_keys=True),
            "primary_issue_key": primary_issue_key or "none",
        },
    )


def validate_jury_questions(payload: dict) -> JuryQuestions:
    try:
        result = JuryQuestions.model_validate(payload)
    except ValidationError as exc:
        raise RuntimeError(f"Jury questions do not match the expected schema: {exc}") from exc
    if not result.questions:
        raise RuntimeError("Jury questions payload must contain at least one question.")
    if len(result.questions) > MAX_JURY_QUESTIONS:
        result = JuryQuestions(summary=result.summary, questions=result.questions[:MAX_JURY_QUESTIONS])
    return result


def generate_jury_questions(transcript_full_text: str, events: Any, primary_issue_key: str) -> JuryQuestions:
    raw_content = request_chat_completion(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_user_prompt(transcript_full_text, events, primary_issue_key),
        temperature=0.5,
        max_tokens=1500,
        response_format={"type": "json_object"},
    )
    return validate_jury_questions(parse_json_object(raw_content, "Jury questions"))


def run_jury_questions(session_store: SessionStore, session_id: str) -> JuryQuestions:
    session = session_store.get_session(session_id)
    if not session:
        raise KeyError(f"Session {session_id} not found.")
    if session.track not in JURY_QUESTION_TRACKS:
        raise ValueError(f"Jury questions are only available for the hackathon_jury track (got {session.track}).")
    transcript = (session.transcript_full_text or "").strip()
    if len(transcript) < MIN_JURY_TRANSCRIPT_CHARS:
        raise ValueError("Transcript is too short to generate jury questions.")

    try:
        result = generate_jury_questions(transcript, session.events, session.primary_issue_key or "none")
    except Exception as exc:
        message = truncate(str(exc))
        logger.warning("session_id=%s jury_questions_failed error=%s", session_id, message)
        raise

    session_store.update_session(session_id, jury_questions=result.model_dump())
    logger.info(
        "session_id=%s jury_questions_done count=%s version=%s",
        session_id,
        len(result.questions),
        JURY_QUESTIONS_VERSION,
    )
    return result
