from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping

from .constants import PROBLEM_LATE_AFTER_SECONDS, PROBLEM_LATE_FULL_SEVERITY_SECONDS
from .models import DetectedEvent, PrimaryIssue


NONE_ISSUE_KEY = "none"

ISSUE_GUIDELINES: Dict[str, Dict[str, str]] = {
    "problem_missing": {
        "title": "State the problem clearly",
        "guideline": "Every hackathon pitch must start with a clear problem statement within the first 20 seconds.",
        "next_action": (
            "Start with WHO has the problem and WHAT pain they experience. "
            'Example: "Developers waste 3 hours daily on manual code reviews."'
        ),
    },
    "problem_late": {
        "title": "Lead with the problem sooner",
        "guideline": "The problem statement should appear in the first 20 seconds to hook the jury.",
        "next_action": "Move your problem statement to the opening of your pitch to capture attention immediately.",
    },
    "innovation_missing": {
        "title": "Explain what makes this different",
        "guideline": "Juries need to understand what sets your solution apart from existing approaches.",
        "next_action": (
            "Add a sentence comparing your approach to existing solutions. "
            "What's new or unique about your solution?"
        ),
    },
    "business_model_missing": {
        "title": "Show real-world impact",
        "guideline": "Even hackathon projects should demonstrate potential real-world value or impact.",
        "next_action": (
            "Explain who will use this and how it creates value. "
            "Even for hackathons, juries want to see potential impact."
        ),
    },
    "technical_feasibility_missing": {
        "title": "Mention your technical approach",
        "guideline": "Technical details build credibility and show your solution is actually buildable.",
        "next_action": "Briefly describe what you built and how. This builds confidence that your solution is real.",
    },
    "structure_out_of_order": {
        "title": "Reorder: Problem before Solution",
        "guideline": "Always establish the problem context before presenting your solution.",
        "next_action": "Lead with the pain point to create context for your solution.",
    },
}

DEFAULT_GUIDELINE = {
    "title": "Improve your pitch",
    "guideline": "Ensure all key elements are present in your pitch.",
    "next_action": "Review your pitch structure and ensure all key elements are present.",
}

NONE_ISSUE = PrimaryIssue(
    key=NONE_ISSUE_KEY,
    title="Great pitch structure!",
    evidence_timestamp=None,
    evidence_quote=None,
    next_action="Your pitch covers all key elements. Focus on delivery and confidence.",
    severity=0.0,
)

Events = Mapping[str, DetectedEvent]


@dataclass(frozen=True)
class IssueRule:
    priority: int
    key: str
    category: str
    applies: Callable[[Events], bool]
    severity: Callable[[Events], float]


@dataclass(frozen=True)
class IssueCandidate:
    priority: int
    key: str
    severity: float
    event: DetectedEvent

    @property
    def weight(self) -> float:
        return self.severity * self.event.confidence


def _status(events: Events, category: str) -> str:
    return events[category].status


def _problem_lateness(events: Events) -> float:
    window = PROBLEM_LATE_FULL_SEVERITY_SECONDS - PROBLEM_LATE_AFTER_SECONDS
    return min(1.0, (events["problem"].timestamp - PROBLEM_LATE_AFTER_SECONDS) / window)


def _solution_before_problem(events: Events) -> bool:
    solution = events["solution"]
    problem = events["problem"]
    return (
        solution.status == "found"
        and problem.status == "found"
        and solution.timestamp < problem.timestamp
    )


ISSUE_RULES: List[IssueRule] = [
    IssueRule(1, "problem_missing", "problem", lambda e: _status(e, "problem") == "missing", lambda e: 1.0),
    IssueRule(2, "problem_late", "problem", lambda e: _status(e, "problem") == "late", _problem_lateness),
    IssueRule(3, "innovation_missing", "innovation", lambda e: _status(e, "innovation") == "missing", lambda e: 0.8),
    IssueRule(
        4,
        "business_model_missing",
        "business_model",
        lambda e: _status(e, "business_model") == "missing",
        lambda e: 0.7,
    ),
    IssueRule(
        5,
        "technical_feasibility_missing",
        "technical",
        lambda e: _status(e, "technical") == "missing",
        lambda e: 0.6,
    ),
    IssueRule(6, "structure_out_of_order", "solution", _solution_before_problem, lambda e: 0.5),
]

ISSUE_CATEGORY_BY_KEY: Dict[str, str] = {rule.key: rule.category for rule in ISSUE_RULES}


def collect_candidates(events: Events, rules: List[IssueRule] = ISSUE_RULES) -> List[IssueCandidate]:
    candidates = [
        IssueCandidate(
            priority=rule.priority,
            key=rule.key,
            severity=min(1.0, max(0.0, rule.severity(events))),
            event=events[rule.category],
        )
        for rule in rules
        if rule.applies(events)
    ]
    candidates.sort(key=lambda candidate: (candidate.priority, -candidate.weight))
    return candidates


def build_primary_issue(candidate: IssueCandidate) -> PrimaryIssue:
    info = ISSUE_GUIDELINES.get(candidate.key, DEFAULT_GUIDELINE)
    event = candidate.event
    return PrimaryIssue(
        key=candidate.key,
        title=info["title"],
        evidence_timestamp=event.timestamp if event.timestamp >= 0 else None,
        evidence_quote=event.quote or None,
        next_action=info["next_action"],
        severity=round(candidate.severity, 4),
    )


def select_primary_issue(events: Events, rules: List[IssueRule] = ISSUE_RULES) -> PrimaryIssue:
    candidates = collect_candidates(events, rules)
    if not candidates:
        return NONE_ISSUE
    return build_primary_issue(candidates[0])


def guideline_for(issue_key: str) -> str:
    return ISSUE_GUIDELINES.get(issue_key, DEFAULT_GUIDELINE)["guideline"]
