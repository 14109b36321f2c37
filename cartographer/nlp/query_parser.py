"""
Deterministic question parser.

Classifies a free-text question into one of five intents with a single
target token (a path-like or identifier-like string). Patterns are tried
in a fixed priority order and the first match wins. Unmatched phrasing is
left for the planner rather than forced into an intent.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Tuple


class QueryIntent(str, Enum):
    """Intents recognised by the deterministic parser."""
    DEPENDENCIES = "DEPENDENCIES"
    USAGE = "USAGE"
    HISTORY = "HISTORY"
    RISKS = "RISKS"
    EXPLAIN = "EXPLAIN"


@dataclass(frozen=True)
class ParsedQuery:
    intent: QueryIntent
    target: str
    confidence: float


# ─────────────────────────────────────────────
# Intent Patterns
# ─────────────────────────────────────────────

_TARGET = r"([a-zA-Z0-9_\-\./]+)"

PARSER_CONFIDENCE = 0.9

# Priority order matters: the first intent with a matching pattern wins
_INTENT_PATTERNS: List[Tuple[QueryIntent, List[Pattern]]] = [
    (QueryIntent.DEPENDENCIES, [
        re.compile(r"(?:dependencies|imports)(?:\s+of|\s+in|\s+for)?\s+" + _TARGET),
        re.compile(r"what does\s+" + _TARGET + r"\s+import"),
    ]),
    (QueryIntent.USAGE, [
        re.compile(r"(?:who calls|usage of|callers of|references to)\s+" + _TARGET),
        re.compile(r"where is\s+" + _TARGET + r"\s+used"),
    ]),
    (QueryIntent.HISTORY, [
        re.compile(r"(?:history|changes|commits|evolution)(?:\s+of|\s+in|\s+for)?\s+" + _TARGET),
        re.compile(r"who touched\s+" + _TARGET),
    ]),
    (QueryIntent.RISKS, [
        re.compile(r"(?:risks|issues|problems|vulnerabilities)(?:\s+of|\s+in|\s+with)?\s+" + _TARGET),
    ]),
    (QueryIntent.EXPLAIN, [
        re.compile(r"(?:explain|document|describe|complexity of)\s+" + _TARGET),
    ]),
]


class QueryParser:
    """
    Regex-based intent classifier.

    Matching is done on the lower-cased, trimmed question; the target is
    cut from the trimmed original so identifiers keep their case
    ("who calls computeTotal" -> USAGE / "computeTotal").
    """

    def parse(self, question: str) -> Optional[ParsedQuery]:
        if not question:
            return None

        original = question.strip()
        normalized = original.lower()

        for intent, patterns in _INTENT_PATTERNS:
            for pattern in patterns:
                match = pattern.search(normalized)
                if match:
                    return ParsedQuery(
                        intent=intent,
                        target=_original_case(original, normalized, match),
                        confidence=PARSER_CONFIDENCE,
                    )

        return None


def _original_case(original: str, normalized: str, match) -> str:
    # lower() can change the length of some non-ASCII text
    if len(original) != len(normalized):
        return match.group(1)
    start, end = match.span(1)
    return original[start:end]
