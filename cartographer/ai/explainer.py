"""
Natural-language explainer for query results.

The explainer is a capability handed to the orchestrator and the
translator agent. It never decides what is relevant; it only phrases
results that the graph queries have already fixed.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .llm_factory import create_llm
from .prompts import (
    ANSWER_QUESTION_PROMPT,
    EXPLAIN_RESULT_PROMPT,
    SUMMARIZE_FILE_PROMPT,
    format_listing,
)

# (relative path, content) pairs handed to answer_question()
ProjectFile = Tuple[str, str]


class Explainer(ABC):
    """Capability interface. Implementations return None when they have nothing to say."""

    @property
    @abstractmethod
    def available(self) -> bool:
        ...

    @abstractmethod
    def explain_result(
        self,
        question: str,
        intent: str,
        files: Sequence[str],
        functions: Sequence[str],
        metadata: Dict[str, Any],
        context_preview: str = "",
    ) -> Optional[str]:
        ...

    @abstractmethod
    def answer_question(self, question: str, project_files: List[ProjectFile]) -> Optional[str]:
        ...

    @abstractmethod
    def summarize_file(self, path: str, content: str) -> Optional[str]:
        ...


class NullExplainer(Explainer):
    """Explainer used when AI is disabled or no model is configured."""

    @property
    def available(self) -> bool:
        return False

    def explain_result(self, question, intent, files, functions, metadata, context_preview=""):
        return None

    def answer_question(self, question, project_files):
        return None

    def summarize_file(self, path, content):
        return None


class LLMExplainer(Explainer):
    """
    Explainer backed by a LangChain chat model.

    Each call pipes a prompt template into the model and returns the text
    content. Model errors are logged and reported as None.
    """

    def __init__(self, llm):
        self.llm = llm

    @property
    def available(self) -> bool:
        return self.llm is not None

    def explain_result(
        self,
        question: str,
        intent: str,
        files: Sequence[str],
        functions: Sequence[str],
        metadata: Dict[str, Any],
        context_preview: str = "",
    ) -> Optional[str]:
        return self._invoke(EXPLAIN_RESULT_PROMPT, {
            "question": question,
            "intent": intent,
            "file_count": len(files),
            "files": format_listing(list(files)),
            "function_count": len(functions),
            "functions": format_listing(list(functions)),
            "metadata": json.dumps(metadata, indent=2, default=str) if metadata else "(none)",
            "context_preview": context_preview or "(none)",
        })

    def answer_question(self, question: str, project_files: List[ProjectFile]) -> Optional[str]:
        code_context = "\n".join(
            f"=== {path} ===\n{content}\n" for path, content in project_files
        )
        return self._invoke(ANSWER_QUESTION_PROMPT, {
            "question": question,
            "code_context": code_context or "(no files could be read)",
        })

    def summarize_file(self, path: str, content: str) -> Optional[str]:
        return self._invoke(SUMMARIZE_FILE_PROMPT, {"path": path, "content": content})

    def _invoke(self, prompt, variables: Dict[str, Any]) -> Optional[str]:
        if not self.available:
            return None
        try:
            chain = prompt | self.llm
            response = chain.invoke(variables)
        except Exception as e:
            print(f"[Explainer] LLM call failed: {e}")
            return None
        text = getattr(response, "content", response)
        if isinstance(text, list):
            # Some chat models return content blocks
            text = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in text
            )
        return text or None


def create_explainer(disable_ai: bool = False, provider: Optional[str] = None) -> Explainer:
    """Build the explainer for this process, falling back to NullExplainer."""
    if disable_ai:
        print("[Explainer] AI disabled. Results will not be enriched.")
        return NullExplainer()

    llm = create_llm(temperature=0.3, provider=provider)
    if llm is None:
        return NullExplainer()
    return LLMExplainer(llm)
