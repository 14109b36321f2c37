"""
Findings store shared by the collaborators of one analysis run.

Keyed by collaborator identity; the last write for a collaborator wins.
"""

from typing import Dict, Optional, Type, TypeVar

from .findings import AgentFinding, Collaborator

F = TypeVar("F", bound=AgentFinding)


class KnowledgeBase:
    """
    Typed findings bus.

    Usage:
        kb = KnowledgeBase()
        kb.store(WorkspaceFinding(files=[...]))
        workspace = kb.get(WorkspaceFinding)   # WorkspaceFinding or None
    """

    def __init__(self):
        self._storage: Dict[Collaborator, AgentFinding] = {}

    def store(self, finding: AgentFinding) -> None:
        """Store the finding of one collaborator, replacing any earlier one."""
        self._storage[finding.source] = finding

    def get(self, finding_type: Type[F]) -> Optional[F]:
        """Get the finding of the collaborator owning `finding_type`, if any."""
        finding = self._storage.get(finding_type.source)
        if isinstance(finding, finding_type):
            return finding
        return None

    def has(self, collaborator: Collaborator) -> bool:
        return collaborator in self._storage

    def get_all(self) -> Dict[str, AgentFinding]:
        """All findings keyed by collaborator name."""
        return {source.value: finding for source, finding in self._storage.items()}

    def to_dict(self) -> Dict[str, Dict]:
        return {name: finding.to_dict() for name, finding in self.get_all().items()}

    def clear(self) -> None:
        self._storage.clear()
