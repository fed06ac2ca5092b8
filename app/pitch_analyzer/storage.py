import json
import os
import threading
from typing import Any, Dict, List, Optional, Protocol

from .constants import UNSET
from .models import BaselineRecord, SessionRecord, utc_now

try:
    import psycopg
    from psycopg.types.json import Jsonb
except Exception:  # pragma: no cover - only relevant when Postgres is enabled.
    psycopg = None
    Jsonb = None


JSON_FIELDS = ("events", "primary_issue", "improvement_summary", "jury_questions")


def normalize_database_url(database_url: str) -> str:
    if database_url.startswith("postgres://"):
        return "postgresql://" + database_url[len("postgres://") :]
    return database_url


class SessionStore(Protocol):
    storage_name: str

    def create_session(self, session_id: str, *, track: str) -> None:
        pass

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        pass

    def update_session(
        self,
        session_id: str,
        *,
        status: Optional[str] = None,
        track: object = UNSET,
        transcript_full_text: object = UNSET,
        duration_seconds: object = UNSET,
        events: object = UNSET,
        primary_issue_key: object = UNSET,
        primary_issue: object = UNSET,
        baseline_session_id: object = UNSET,
        improvement_summary: object = UNSET,
        jury_questions: object = UNSET,
        error: object = UNSET,
    ) -> None:
        pass

    def get_baseline(self, session_id: str) -> Optional[BaselineRecord]:
        pass

    def delete_session(self, session_id: str) -> None:
        pass


def _collect_updates(**fields: Any) -> Dict[str, Any]:
    return {name: value for name, value in fields.items() if value is not UNSET}


class InMemorySessionStore:
    storage_name = "memory"

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def create_session(self, session_id: str, *, track: str) -> None:
        now = utc_now()
        with self._lock:
            self._sessions[session_id] = SessionRecord(
                created_at=now,
                updated_at=now,
                track=track,
                status="created",
            )

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._sessions.get(session_id)

    def update_session(
        self,
        session_id: str,
        *,
        status: Optional[str] = None,
        track: object = UNSET,
        transcript_full_text: object = UNSET,
        duration_seconds: object = UNSET,
        events: object = UNSET,
        primary_issue_key: object = UNSET,
        primary_issue: object = UNSET,
        baseline_session_id: object = UNSET,
        improvement_summary: object = UNSET,
        jury_questions: object = UNSET,
        error: object = UNSET,
    ) -> None:
        updates = _collect_updates(
            track=track,
            transcript_full_text=transcript_full_text,
            duration_seconds=duration_seconds,
            events=events,
            primary_issue_key=primary_issue_key,
            primary_issue=primary_issue,
            baseline_session_id=baseline_session_id,
            improvement_summary=improvement_summary,
            jury_questions=jury_questions,
            error=error,
        )
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise KeyError(f"Session {session_id} not found.")
            if status is not None:
                session.status = status
            for name, value in updates.items():
                setattr(session, name, value)
            session.updated_at = utc_now()

    def get_baseline(self, session_id: str) -> Optional[BaselineRecord]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            return BaselineRecord(events=session.events, primary_issue_key=session.primary_issue_key)

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)


def _load_json(value: Any) -> Any:
    if value is not None and isinstance(value, str):
        return json.loads(value)
    return value


class PostgresSessionStore:
    storage_name = "postgres"

    def __init__(self, database_url: str) -> None:
        if psycopg is None or Jsonb is None:
            raise RuntimeError("psycopg is required when DATABASE_URL is set.")
        self._database_url = normalize_database_url(database_url)
        self._ensure_schema()

    def _connect(self):
        return psycopg.connect(self._database_url, autocommit=True)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS practice_sessions (
                        session_id TEXT PRIMARY KEY,
                        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                        track TEXT NOT NULL,
                        status TEXT NOT NULL,
                        transcript_full_text TEXT NULL,
                        duration_seconds DOUBLE PRECISION NULL,
                        events JSONB NULL,
                        primary_issue_key TEXT NULL,
                        primary_issue JSONB NULL,
                        baseline_session_id TEXT NULL,
                        improvement_summary JSONB NULL,
                        jury_questions JSONB NULL,
                        error TEXT NULL
                    )
                    """
                )
                cur.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_practice_sessions_created_at
                    ON practice_sessions (created_at DESC)
                    """
                )

    def create_session(self, session_id: str, *, track: str) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO practice_sessions (session_id, track, status)
                    VALUES (%s, %s, %s)
                    """,
                    (session_id, track, "created"),
                )

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT
                        created_at,
                        updated_at,
                        track,
                        status,
                        transcript_full_text,
                        duration_seconds,
                        events,
                        primary_issue_key,
                        primary_issue,
                        baseline_session_id,
                        improvement_summary,
                        jury_questions,
                        error
                    FROM practice_sessions
                    WHERE session_id = %s
                    """,
                    (session_id,),
                )
                row = cur.fetchone()
                if row is None:
                    return None

                (
                    created_at,
                    updated_at,
                    track,
                    status,
                    transcript_full_text,
                    duration_seconds,
                    events,
                    primary_issue_key,
                    primary_issue,
                    baseline_session_id,
                    improvement_summary,
                    jury_questions,
                    error,
                ) = row

                return SessionRecord(
                    created_at=created_at,
                    updated_at=updated_at,
                    track=track,
                    status=status,
                    transcript_full_text=transcript_full_text,
                    duration_seconds=duration_seconds,
                    events=_load_json(events),
                    primary_issue_key=primary_issue_key,
                    primary_issue=_load_json(primary_issue),
                    baseline_session_id=baseline_session_id,
                    improvement_summary=_load_json(improvement_summary),
                    jury_questions=_load_json(jury_questions),
                    error=error,
                )

    def update_session(
        self,
        session_id: str,
        *,
        status: Optional[str] = None,
        track: object = UNSET,
        transcript_full_text: object = UNSET,
        duration_seconds: object = UNSET,
        events: object = UNSET,
        primary_issue_key: object = UNSET,
        primary_issue: object = UNSET,
        baseline_session_id: object = UNSET,
        improvement_summary: object = UNSET,
        jury_questions: object = UNSET,
        error: object = UNSET,
    ) -> None:
        updates = _collect_updates(
            track=track,
            transcript_full_text=transcript_full_text,
            duration_seconds=duration_seconds,
            events=events,
            primary_issue_key=primary_issue_key,
            primary_issue=primary_issue,
            baseline_session_id=baseline_session_id,
            improvement_summary=improvement_summary,
            jury_questions=jury_questions,
            error=error,
        )
        if status is not None:
            updates["status"] = status

        assignments: List[str] = []
        values: List[Any] = []
        for name, value in updates.items():
            assignments.append(f"{name} = %s")
            if name in JSON_FIELDS:
                values.append(Jsonb(value) if value is not None else None)
            else:
                values.append(value)

        assignments.append("updated_at = NOW()")
        values.append(session_id)

        query = f"UPDATE practice_sessions SET {', '.join(assignments)} WHERE session_id = %s"

        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(query, values)
                if cur.rowcount == 0:
                    raise KeyError(f"Session {session_id} not found.")

    def get_baseline(self, session_id: str) -> Optional[BaselineRecord]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT events, primary_issue_key FROM practice_sessions WHERE session_id = %s",
                    (session_id,),
                )
                row = cur.fetchone()
                if row is None:
                    return None
                events, primary_issue_key = row
                return BaselineRecord(events=_load_json(events), primary_issue_key=primary_issue_key)

    def delete_session(self, session_id: str) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM practice_sessions WHERE session_id = %s", (session_id,))


def build_session_store() -> SessionStore:
    database_url = os.getenv("DATABASE_URL", "").strip()
    if database_url:
        return PostgresSessionStore(database_url=database_url)
    return InMemorySessionStore()
