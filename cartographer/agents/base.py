"""
Agent base class and coordinator.

Agents are the collaborators of one analysis run. Each explores the
workspace, reads the findings of agents that ran before it, and stores
exactly one typed finding in the shared KnowledgeBase.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional, Sequence, Tuple

from ..config import AnalysisConfig
from ..knowledge import AgentFinding, Collaborator, KnowledgeBase


class Agent(ABC):
    """
    One collaborator.

    Subclasses set `collaborator` and `priority` (lower runs first) and
    implement `explore()`.
    """
    collaborator: Collaborator
    priority: int = 100

    def __init__(self, knowledge: KnowledgeBase, config: Optional[AnalysisConfig] = None):
        self.knowledge = knowledge
        self.config = config or AnalysisConfig()

    @property
    def name(self) -> str:
        return self.collaborator.value

    @abstractmethod
    async def explore(self, workspace_path: str) -> None:
        """Analyse the workspace and store this agent's finding."""

    def log(self, message: str) -> None:
        print(f"[{self.name}] {message}")

    async def read_files(self, files: Sequence[str]) -> AsyncIterator[Tuple[str, str]]:
        """
        Yield (path, content) for readable files.

        Files are read in batches of `scan_batch_size`; control returns to
        the event loop between batches. Unreadable files are logged and
        skipped.
        """
        batch_size = max(1, self.config.scan_batch_size)
        for start in range(0, len(files), batch_size):
            for path in files[start:start + batch_size]:
                content = read_text(path)
                if content is None:
                    self.log(f"Skipping unreadable file: {path}")
                    continue
                yield path, content
            await asyncio.sleep(0)


class AgentCoordinator:
    """
    Runs registered agents sequentially in priority order.

    A failing agent is logged and skipped; its finding stays absent and the
    agents after it still run.
    """

    def __init__(self, knowledge: KnowledgeBase):
        self.knowledge = knowledge
        self._agents: List[Agent] = []

    def register_agent(self, agent: Agent) -> None:
        self._agents.append(agent)
        self._agents.sort(key=lambda a: a.priority)

    def get_agent(self, name: str) -> Optional[Agent]:
        for agent in self._agents:
            if agent.name == name:
                return agent
        return None

    @property
    def agents(self) -> List[Agent]:
        return list(self._agents)

    async def run_all(self, workspace_path: str) -> Dict[str, AgentFinding]:
        print(f"[Coordinator] Running {len(self._agents)} agents on {workspace_path}")

        for agent in self._agents:
            print(f"[Coordinator] Running agent: {agent.name}")
            try:
                await agent.explore(workspace_path)
            except Exception as e:
                print(f"[Coordinator] Agent {agent.name} failed: {e}")

        print("[Coordinator] Exploration complete.")
        return self.knowledge.get_all()


def read_text(path: str) -> Optional[str]:
    """File content as text, or None if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError:
        return None
