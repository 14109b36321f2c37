"""
Analysis context and registry.

An AnalysisContext bundles everything produced by one build. It is never
mutated after construction; a rebuild produces a new context which the
registry swaps in, so queries already running keep reading the old graph.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from .ai.explainer import Explainer, NullExplainer
from .config import AnalysisConfig
from .graph import GraphQueries, KnowledgeGraph
from .knowledge import KnowledgeBase
from .orchestrator import QueryOrchestrator


@dataclass(frozen=True)
class AnalysisContext:
    workspace_path: str
    graph: KnowledgeGraph
    knowledge: KnowledgeBase
    queries: GraphQueries
    orchestrator: QueryOrchestrator
    config: AnalysisConfig
    built_at: float = field(default_factory=time.time)

    @classmethod
    def create(
        cls,
        workspace_path: str,
        graph: KnowledgeGraph,
        knowledge: Optional[KnowledgeBase] = None,
        explainer: Optional[Explainer] = None,
        config: Optional[AnalysisConfig] = None,
    ) -> "AnalysisContext":
        knowledge = knowledge or KnowledgeBase()
        config = config or AnalysisConfig(workspace_path=workspace_path)
        return cls(
            workspace_path=workspace_path,
            graph=graph,
            knowledge=knowledge,
            queries=GraphQueries(graph),
            orchestrator=QueryOrchestrator(
                graph,
                knowledge=knowledge,
                explainer=explainer or NullExplainer(),
                config=config,
            ),
            config=config,
        )


class ContextRegistry:
    """Holds the current AnalysisContext; swaps are atomic."""

    def __init__(self):
        self._lock = threading.Lock()
        self._current: Optional[AnalysisContext] = None

    def current(self) -> Optional[AnalysisContext]:
        with self._lock:
            return self._current

    def swap(self, context: AnalysisContext) -> Optional[AnalysisContext]:
        """Install a new context and return the previous one."""
        with self._lock:
            previous, self._current = self._current, context
        return previous

    def clear(self) -> None:
        with self._lock:
            self._current = None
