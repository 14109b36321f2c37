"""
NLP module - Question classification.

The parser recognises five fixed phrasings deterministically; the planner
is the keyword fallback that maps other questions onto graph queries.
"""

from .query_parser import (
    QueryIntent,
    ParsedQuery,
    QueryParser
)

from .query_planner import (
    PlanIntent,
    QueryPlan,
    QueryPlanner,
    detect_plan_intent,
    extract_function_name
)

__all__ = [
    # Parser
    "QueryIntent",
    "ParsedQuery",
    "QueryParser",
    # Planner
    "PlanIntent",
    "QueryPlan",
    "QueryPlanner",
    "detect_plan_intent",
    "extract_function_name",
]
