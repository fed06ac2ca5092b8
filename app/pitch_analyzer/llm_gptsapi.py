import json
import os
import re
from typing import Any, Dict, List

import httpx

from .constants import MAX_ERROR_CHARS


DEFAULT_BASE_URL = "https://api.gptsapi.net/v1"
DEFAULT_MODEL = "gpt-5.1-chat"
DEFAULT_TIMEOUT_SECONDS = 120.0
PLACEHOLDER = re.compile(r"\{([a-z_]+)\}")


def truncate(text: str, max_chars: int = MAX_ERROR_CHARS) -> str:
    value = (text or "").strip()
    if len(value) <= max_chars:
        return value
    return value[: max_chars - 3] + "..."


def fill_prompt(template: str, values: Dict[str, str]) -> str:
    """Substitute known {name} placeholders in one pass.

    Inserted values are never rescanned, so user text containing a
    placeholder name stays as written. Unknown braces (JSON schemas) are kept.
    """
    return PLACEHOLDER.sub(lambda match: values.get(match.group(1), match.group(0)), template)


def get_api_key() -> str:
    api_key = os.getenv("GPTSAPI_KEY", "").strip()
    if not api_key:
        raise RuntimeError(
            "Missing GPTSAPI_KEY. Set it before requesting coach feedback or jury questions "
            '(example: export GPTSAPI_KEY="YOUR_KEY_HERE").'
        )
    return api_key


def base_url() -> str:
    return os.getenv("GPTSAPI_BASE_URL", DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL


def model_name() -> str:
    return os.getenv("GPTSAPI_MODEL", DEFAULT_MODEL).strip() or DEFAULT_MODEL


def timeout_seconds() -> float:
    return float(os.getenv("GPTSAPI_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))


def _auth_headers() -> Dict[str, str]:
    api_key = get_api_key()
    mode = os.getenv("GPTSAPI_AUTH_MODE", "authorization").strip().lower()
    headers = {"Content-Type": "application/json"}
    if mode == "x-api-key":
        headers["x-api-key"] = api_key
    else:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def extract_content(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        parts: List[str] = []
        for item in value:
            if isinstance(item, dict):
                text = item.get("text")
                if text:
                    parts.append(str(text))
        return "\n".join(parts).strip()
    return str(value or "").strip()


def parse_json_object(raw_content: str, label: str) -> dict:
    """Parse model output that should be a JSON object.

    Tolerates markdown code fences and stray text around the object.
    """
    content = (raw_content or "").strip()
    if content.startswith("```json"):
        content = content[len("```json") :]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    content = content.strip()

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        start = content.find("{")
        end = content.rfind("}")
        if start == -1 or end <= start:
            raise RuntimeError(f"{label} output is not valid JSON.")
        try:
            parsed = json.loads(content[start : end + 1])
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"{label} output could not be repaired into valid JSON.") from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(f"{label} JSON root must be an object.")
    return parsed


def _is_temperature_unsupported(error_message: str) -> bool:
    lowered = (error_message or "").lower()
    return "temperature" in lowered and "default (1)" in lowered


def _is_response_format_unsupported(error_message: str) -> bool:
    lowered = (error_message or "").lower()
    return "response_format" in lowered or "json_object" in lowered


# Checked in order; only the first matching parameter is dropped per retry.
DROPPABLE_PARAMS = (
    ("response_format", _is_response_format_unsupported),
    ("temperature", _is_temperature_unsupported),
)
MAX_PARAM_RETRIES = 2


def _provider_error_detail(response: httpx.Response) -> str:
    try:
        error_payload = response.json()
    except ValueError:
        return response.text or ""
    if not isinstance(error_payload, dict):
        return ""
    error = error_payload.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or "")
    return str(error or "")


def _without_unsupported_param(payload: Dict[str, Any], detail: str) -> Dict[str, Any] | None:
    for name, is_unsupported in DROPPABLE_PARAMS:
        if name in payload and is_unsupported(detail):
            return {key: value for key, value in payload.items() if key != name}
    return None


def _completion_content(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError as exc:
        raise RuntimeError("GPTsAPI returned a non-JSON HTTP response.") from exc

    choices = body.get("choices") if isinstance(body, dict) else None
    if not choices or not isinstance(choices, list):
        raise RuntimeError("GPTsAPI response did not contain choices.")

    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = extract_content(message.get("content") if isinstance(message, dict) else "")
    if not content:
        raise RuntimeError("GPTsAPI returned empty assistant content.")
    return content


def request_chat_completion(
    *,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.3,
    max_tokens: int = 1800,
    response_format: Dict[str, Any] | None = None,
) -> str:
    """POST one chat completion and return the assistant text.

    Providers that reject ``response_format`` or a non-default ``temperature``
    with a 400 are retried without that parameter. Every failure surfaces as
    RuntimeError with a truncated provider message.
    """
    payload: Dict[str, Any] = {
        "model": model_name(),
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if response_format is not None:
        payload["response_format"] = response_format

    timeout = timeout_seconds()
    endpoint = base_url().rstrip("/") + "/chat/completions"

    def _send(json_payload: Dict[str, Any]) -> httpx.Response:
        try:
            return httpx.post(endpoint, headers=_auth_headers(), json=json_payload, timeout=timeout)
        except httpx.TimeoutException as exc:
            raise RuntimeError(f"GPTsAPI request timed out after {int(timeout)} seconds.") from exc
        except httpx.HTTPError as exc:
            raise RuntimeError(f"Failed to call GPTsAPI: {exc}") from exc

    response = _send(payload)
    retries = 0
    while response.status_code == 400 and retries < MAX_PARAM_RETRIES:
        reduced = _without_unsupported_param(payload, _provider_error_detail(response))
        if reduced is None:
            break
        payload = reduced
        retries += 1
        response = _send(payload)

    if response.status_code == 429:
        raise RuntimeError("GPTsAPI rate limit exceeded, please try again later.")
    if response.status_code >= 400:
        detail = truncate(_provider_error_detail(response) or "Unknown provider error")
        raise RuntimeError(f"GPTsAPI error {response.status_code}: {detail}")

    return _completion_content(response)
