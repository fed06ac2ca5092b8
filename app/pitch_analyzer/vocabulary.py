"""Lowercase keyword vocabularies used by the structure detectors.

Matching is plain substring containment against the lowercased sentence, so
multi-word entries such as "business model" match as phrases. Short tokens
also match inside longer words ("ai" in "said"); detectors keep that behavior.
"""

WHO_TOKENS = (
    "users",
    "people",
    "teams",
    "companies",
    "businesses",
    "students",
    "hospitals",
    "patients",
    "developers",
    "communities",
    "customers",
    "clients",
)

PAIN_TOKENS = (
    "struggle",
    "waste",
    "hard",
    "difficult",
    "slow",
    "expensive",
    "manual",
    "confusing",
    "broken",
    "inefficient",
    "frustrating",
    "problem",
    "issue",
    "challenge",
    "fail",
    "painful",
)

IMPACT_TOKENS = (
    "time",
    "cost",
    "effort",
    "access",
    "quality",
    "risk",
    "errors",
    "money",
    "hours",
    "days",
    "productivity",
)

INNOVATION_TOKENS = (
    "new",
    "novel",
    "innovative",
    "first",
    "unique",
    "different",
    "unlike",
    "alternative",
    "instead of",
    "replaces",
    "breakthrough",
    "revolutionize",
    "transform",
)

COMPARISON_TOKENS = (
    "existing",
    "current",
    "today",
    "traditional",
    "manual",
    "competitors",
    "other solutions",
    "before",
    "previously",
    "old",
    "legacy",
)

TECHNICAL_TOKENS = (
    "we built",
    "prototype",
    "demo",
    "architecture",
    "system",
    "algorithm",
    "model",
    "api",
    "backend",
    "frontend",
    "database",
    "stack",
    "trained",
    "implemented",
    "developed",
    "coded",
    "created",
    "machine learning",
    "ai",
    "neural",
    "framework",
)

BUSINESS_TOKENS = (
    "users",
    "customers",
    "adoption",
    "value",
    "benefit",
    "save",
    "reduce",
    "improve",
    "scale",
    "revenue",
    "cost",
    "impact",
    "sustainability",
    "market",
    "growth",
    "opportunity",
    "monetize",
    "business model",
)

SOLUTION_TOKENS = (
    "we built",
    "our solution",
    "our product",
    "this app",
    "this platform",
    "this system",
    "our approach",
    "we created",
    "we developed",
    "introducing",
)


def has_token(text: str, tokens) -> bool:
    return any(token in text for token in tokens)


def count_tokens(text: str, tokens) -> int:
    return sum(1 for token in tokens if token in text)
