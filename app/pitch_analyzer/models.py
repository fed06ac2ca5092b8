from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator


EventType = Literal["problem", "innovation", "technical", "business_model", "solution"]
EventStatus = Literal["found", "missing", "late"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Segment(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: float
    end: float
    text: str


@dataclass(frozen=True)
class Sentence:
    start: float
    end: float
    text: str
    normalized: str


class DetectedEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: EventType
    timestamp: float
    quote: str
    confidence: float
    status: EventStatus

    @model_validator(mode="after")
    def _check_consistency(self) -> "DetectedEvent":
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1] (got {self.confidence})")
        if self.status == "missing" and self.timestamp != -1:
            raise ValueError("missing events must have timestamp -1")
        if self.status != "missing" and self.timestamp < 0:
            raise ValueError(f"{self.status} events need a timestamp >= 0")
        return self


class PrimaryIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    evidence_timestamp: Optional[float]
    evidence_quote: Optional[str]
    next_action: str
    severity: float


class ImprovementSummary(BaseModel):
    issue_key: str
    before: str
    after: str
    improved: bool
    before_timestamp: Optional[float]
    after_timestamp: Optional[float]


class StructureAnalysis(BaseModel):
    events: Dict[str, DetectedEvent]
    primary_issue: PrimaryIssue


class CoachEvidence(BaseModel):
    timestamp: Optional[float] = None
    quote: str = ""


class CoachFeedback(BaseModel):
    headline: str
    what_i_noticed: str
    why_it_matters: str
    evidence: CoachEvidence
    one_change_to_try: str
    encouragement: str


class JuryQuestion(BaseModel):
    category: Literal["Problem", "Innovation", "Technical Feasibility", "Business Model", "Risk"]
    question: str
    why_they_ask: str


class JuryQuestions(BaseModel):
    summary: str
    questions: List[JuryQuestion]


@dataclass
class BaselineRecord:
    events: Optional[dict]
    primary_issue_key: Optional[str]


@dataclass
class SessionRecord:
    created_at: datetime
    updated_at: datetime
    track: str
    status: str
    transcript_full_text: Optional[str] = None
    duration_seconds: Optional[float] = None
    events: Optional[dict] = None
    primary_issue_key: Optional[str] = None
    primary_issue: Optional[dict] = None
    baseline_session_id: Optional[str] = None
    improvement_summary: Optional[dict] = None
    jury_questions: Optional[dict] = None
    error: Optional[str] = None


class CreateSessionRequest(BaseModel):
    track: str = "hackathon_jury"


class CreateSessionResponse(BaseModel):
    session_id: str
    status: str


class AnalyzeSessionRequest(BaseModel):
    track: Optional[str] = None
    segments: Any = None
    duration_seconds: Optional[float] = None
    baseline_session_id: Optional[str] = None


class AnalysisResponse(BaseModel):
    session_id: str
    events: Dict[str, DetectedEvent]
    primary_issue: PrimaryIssue
    coach_feedback: Optional[CoachFeedback]
    improvement_summary: Optional[ImprovementSummary]


class JuryQuestionsResponse(BaseModel):
    session_id: str
    jury_questions: JuryQuestions


class SessionStatusResponse(BaseModel):
    session_id: str
    track: str
    status: str
    duration_seconds: Optional[float]
    events: Optional[Dict[str, object]]
    primary_issue_key: Optional[str]
    primary_issue: Optional[Dict[str, object]]
    baseline_session_id: Optional[str]
    improvement_summary: Optional[Dict[str, object]]
    jury_questions: Optional[Dict[str, object]]
    error: Optional[str]
