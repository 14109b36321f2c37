"""
Fallback query planner.

Used only when the deterministic parser finds no match. Classifies the
question into one of the graph-query intents by keyword matching and
pulls out a function name where the intent needs one.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class PlanIntent(str, Enum):
    """Graph operations a question can be planned onto."""
    BLAST_RADIUS = "blast_radius"
    CENTRAL_FUNCTIONS = "central_functions"
    IMPORTANT_FILES = "important_files"
    FIND_FUNCTION = "find_function"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class QueryPlan:
    intent: PlanIntent
    function_name: Optional[str] = None


# ─────────────────────────────────────────────
# Intent Detection
# ─────────────────────────────────────────────

# Keyword patterns per intent (case-insensitive), tried in this order
_INTENT_PATTERNS: List[Tuple[PlanIntent, List[str]]] = [
    (PlanIntent.BLAST_RADIUS, [
        r"\bblast\s*radius\b", r"\bimpact(?:ed|s)?\b", r"\baffect(?:s|ed)?\b",
        r"\bbreak(?:s|ing)?\b", r"\bdepends?\s+on\b", r"\bdependents\b",
        r"\bripple\b", r"\bif\s+i\s+(?:change|modify|edit|delete|remove)\b",
    ]),
    (PlanIntent.CENTRAL_FUNCTIONS, [
        r"\bcentral(?:ity)?\b", r"\bmost\s+(?:called|connected|used)\b",
        r"\bcore\s+functions?\b", r"\bkey\s+functions?\b", r"\bhubs?\b",
        r"\bimportant\s+functions?\b",
    ]),
    (PlanIntent.IMPORTANT_FILES, [
        r"\bimportant\s+files?\b", r"\bkey\s+files?\b", r"\bcritical\s+files?\b",
        r"\bmost\s+imported\b", r"\bfile\s+importance\b", r"\bload[-\s]bearing\b",
        r"\bmain\s+files\b",
    ]),
    (PlanIntent.FIND_FUNCTION, [
        r"\bwhere\s+is\b.*\bdefined\b", r"\bfind\b", r"\blocate\b",
        r"\bshow\s+(?:me\s+)?(?:the\s+)?function\b", r"\bwhere(?:'s|\s+is)\b",
    ]),
]

_NEEDS_FUNCTION = {PlanIntent.BLAST_RADIUS, PlanIntent.FIND_FUNCTION}

# ─────────────────────────────────────────────
# Function Name Extraction
# ─────────────────────────────────────────────

_IDENT = r"([A-Za-z_][A-Za-z0-9_\.]*)"

# Explicit name markers: `quoted` and call syntax name()
_NAME_PATTERNS = [
    re.compile(r"[`'\"]" + _IDENT + r"[`'\"]"),
    re.compile(_IDENT + r"\s*\(\s*\)"),
]

_TOKEN = re.compile(_IDENT)

# "the load function", "parse method"
_KIND_WORDS = {"function", "method"}

# "changing load", "blast radius of load", "find parse"
_TRIGGER_WORDS = {
    "function", "method", "change", "changing", "modify", "modifying",
    "edit", "editing", "of", "to", "on", "find", "locate", "is", "for",
}

_STOPWORDS = {
    "a", "an", "the", "this", "that", "it", "i", "me", "my", "we", "our",
    "is", "of", "to", "on", "for", "if", "in", "what", "which", "who", "where",
    "does", "do", "would", "will", "be", "are", "was", "change", "changing",
    "modify", "modifying", "edit", "editing", "function", "functions",
    "method", "methods", "defined", "code", "file", "files", "blast",
    "radius", "impact", "affected", "depends", "called", "used", "happens",
    "break", "breaks", "all", "any", "find", "locate", "show",
}

_BARE_IDENTIFIER = re.compile(r"\b([A-Za-z_]+[a-z0-9]*(?:_[A-Za-z0-9]+|[A-Z][a-z0-9]+)+)\b")


class QueryPlanner:
    """
    Keyword-based planner producing a QueryPlan.

    Never fails: unmatched phrasing yields PlanIntent.UNKNOWN, which the
    orchestrator routes to its general-question path.
    """

    def plan(self, question: str) -> QueryPlan:
        text = (question or "").strip()
        lowered = text.lower()

        intent = detect_plan_intent(lowered)
        if intent in _NEEDS_FUNCTION:
            return QueryPlan(intent=intent, function_name=extract_function_name(text))
        return QueryPlan(intent=intent)


def detect_plan_intent(question: str) -> PlanIntent:
    """First intent, in priority order, with a matching keyword pattern."""
    question = question.lower()
    for intent, patterns in _INTENT_PATTERNS:
        if any(re.search(p, question) for p in patterns):
            return intent
    return PlanIntent.UNKNOWN


def extract_function_name(question: str) -> Optional[str]:
    """
    Pull the most likely function name out of a question.

    Quoted names and "name()" win over names that merely follow a trigger
    word. A dotted name ("Parser.parse") is reduced to its last segment.
    """
    for pattern in _NAME_PATTERNS:
        for match in pattern.finditer(question):
            name = _accept(match.group(1))
            if name:
                return name

    tokens = _TOKEN.findall(question)

    for index, token in enumerate(tokens[1:], start=1):
        if token.lower() in _KIND_WORDS:
            name = _accept(tokens[index - 1])
            if name:
                return name

    for index, token in enumerate(tokens[:-1]):
        if token.lower() in _TRIGGER_WORDS:
            name = _accept(tokens[index + 1])
            if name:
                return name

    # snake_case or camelCase tokens are identifiers even without a trigger
    for match in _BARE_IDENTIFIER.finditer(question):
        name = _accept(match.group(1))
        if name:
            return name

    return None


def _accept(candidate: str) -> Optional[str]:
    name = _clean_name(candidate)
    if not name or name.lower() in _STOPWORDS:
        return None
    return name


def _clean_name(name: str) -> str:
    name = name.strip(".")
    if "." in name:
        name = name.rsplit(".", 1)[-1]
    return name
