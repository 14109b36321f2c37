"""
AI module - LLM-backed explanations of query results.

LangChain providers are imported lazily by the factory, so importing this
package does not require any provider package to be installed.
"""

from .explainer import (
    Explainer,
    NullExplainer,
    LLMExplainer,
    create_explainer
)

from .llm_factory import create_llm

__all__ = [
    "Explainer",
    "NullExplainer",
    "LLMExplainer",
    "create_explainer",
    "create_llm",
]
