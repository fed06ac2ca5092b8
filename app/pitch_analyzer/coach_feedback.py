from __future__ import annotations

import json
import logging

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI
from pydantic import ValidationError

from .issues import guideline_for
from .llm_gptsapi import (
    base_url,
    extract_content,
    fill_prompt,
    get_api_key,
    model_name,
    parse_json_object,
    timeout_seconds,
)
from .models import CoachFeedback, PrimaryIssue
from .prompts.coach import COACH_FEEDBACK_VERSION, SYSTEM_PROMPT, USER_PROMPT_TEMPLATE


logger = logging.getLogger("uvicorn.error")


def _build_client() -> OpenAI:
    return OpenAI(base_url=base_url(), api_key=get_api_key(), timeout=timeout_seconds())


def _status_message(exc: APIStatusError) -> str:
    return (getattr(exc, "message", "") or str(exc)).lower()


def _unsupported_response_format(exc: APIStatusError) -> bool:
    message = _status_message(exc)
    return "response_format" in message or "json_object" in message


def _unsupported_temperature(exc: APIStatusError) -> bool:
    message = _status_message(exc)
    return "temperature" in message and "default (1)" in message


def build_user_prompt(primary_issue: PrimaryIssue, duration_seconds: float, track: str) -> str:
    evidence_timestamp = (
        "null" if primary_issue.evidence_timestamp is None else f"{primary_issue.evidence_timestamp:g}"
    )
    return fill_prompt(
        USER_PROMPT_TEMPLATE,
        {
            "track": track,
            "duration_seconds": f"{duration_seconds:g}",
            "issue_key": primary_issue.key,
            "title": primary_issue.title,
            "guideline": guideline_for(primary_issue.key),
            "evidence_timestamp": evidence_timestamp,
            "evidence_quote": primary_issue.evidence_quote or "",
            "next_action": primary_issue.next_action,
        },
    )


def _request_coach_content(user_prompt: str) -> str:
    client = _build_client()
    base_kwargs = {
        "model": model_name(),
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ],
        "max_tokens": 800,
        "temperature": 0.7,
        "response_format": {"type": "json_object"},
    }

    attempts = [
        dict(base_kwargs),
        {k: v for k, v in base_kwargs.items() if k != "temperature"},
        {k: v for k, v in base_kwargs.items() if k != "response_format"},
        {k: v for k, v in base_kwargs.items() if k not in {"temperature", "response_format"}},
    ]
    seen_signatures: set[str] = set()
    last_status_error: APIStatusError | None = None

    for kwargs in attempts:
        signature = json.dumps(sorted(kwargs.keys()))
        if signature in seen_signatures:
            continue
        seen_signatures.add(signature)

        try:
            response = client.chat.completions.create(**kwargs)
        except APIStatusError as exc:
            last_status_error = exc
            if _unsupported_response_format(exc) or _unsupported_temperature(exc):
                continue
            status_code = getattr(exc, "status_code", None)
            detail = getattr(exc, "message", None) or str(exc)
            raise RuntimeError(f"Coach feedback request failed ({status_code}): {detail}") from exc
        except APITimeoutError as exc:
            raise RuntimeError("Coach feedback request timed out.") from exc
        except APIConnectionError as exc:
            raise RuntimeError(f"Failed to connect to LLM provider: {exc}") from exc

        choice = response.choices[0] if response.choices else None
        if choice is None:
            raise RuntimeError("Coach feedback response did not contain choices.")
        content = extract_content(choice.message.content)
        if not content:
            raise RuntimeError("Coach feedback response content is empty.")
        return content

    if last_status_error is not None:
        detail = getattr(last_status_error, "message", None) or str(last_status_error)
        raise RuntimeError(f"Coach feedback request failed: {detail}")
    raise RuntimeError("Coach feedback request failed before receiving a response.")


def validate_coach_feedback(payload: dict) -> CoachFeedback:
    try:
        feedback = CoachFeedback.model_validate(payload)
    except ValidationError as exc:
        raise RuntimeError(f"Coach feedback does not match the expected schema: {exc}") from exc
    for field in ("headline", "one_change_to_try"):
        if not getattr(feedback, field).strip():
            raise RuntimeError(f'Coach feedback must contain a non-empty "{field}".')
    return feedback


def generate_coach_feedback(
    primary_issue: PrimaryIssue,
    duration_seconds: float,
    track: str = "hackathon_jury",
) -> CoachFeedback:
    """Ask the LLM for one short coaching message about the primary issue.

    Raises RuntimeError on any provider or schema failure; callers decide
    whether to degrade.
    """
    user_prompt = build_user_prompt(primary_issue, duration_seconds, track)
    raw_content = _request_coach_content(user_prompt)
    feedback = validate_coach_feedback(parse_json_object(raw_content, "Coach feedback"))
    logger.info(
        "coach_feedback_done issue_key=%s version=%s",
        primary_issue.key,
        COACH_FEEDBACK_VERSION,
    )
    return feedback
