"""
Abstract base class for graph stores.

Defines the contract that all graph storage implementations (NetworkX,
plain in-memory adjacency lists) must follow. KnowledgeGraph talks to
storage only through this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

# (source, target, edge type value)
EdgeTuple = Tuple[str, str, str]


class BaseGraphStore(ABC):
    """
    Abstract graph store interface.

    Implementations must support a directed multigraph: parallel edges
    with the same endpoints and type are kept, and edges may reference
    node ids that were never added.
    """

    # ─────────────────────────────────────────────
    # Node Operations
    # ─────────────────────────────────────────────

    @abstractmethod
    def add_node(self, node_id: str, node_type: str, data: Dict[str, Any]) -> None:
        """Add a node, or overwrite the data of an existing one."""
        ...

    @abstractmethod
    def has_node(self, node_id: str) -> bool:
        """Check if a node was added (edge endpoints alone do not count)."""
        ...

    @abstractmethod
    def get_node_type(self, node_id: str) -> str:
        """Get the stored type value of a node. Returns "" if not found."""
        ...

    @abstractmethod
    def get_node_data(self, node_id: str) -> Dict[str, Any]:
        """Get the data of a node. Returns {} if node not found."""
        ...

    @abstractmethod
    def number_of_nodes(self) -> int:
        """Return total number of added nodes."""
        ...

    # ─────────────────────────────────────────────
    # Edge Operations
    # ─────────────────────────────────────────────

    @abstractmethod
    def add_edge(self, source: str, target: str, edge_type: str) -> None:
        """Append a directed edge. No uniqueness or existence check."""
        ...

    @abstractmethod
    def number_of_edges(self) -> int:
        """Return total number of edges, parallel edges included."""
        ...

    # ─────────────────────────────────────────────
    # Adjacency
    # ─────────────────────────────────────────────

    @abstractmethod
    def out_edges(self, node_id: str) -> List[EdgeTuple]:
        """Edges leaving a node. Returns [] for unknown ids."""
        ...

    @abstractmethod
    def in_edges(self, node_id: str) -> List[EdgeTuple]:
        """Edges entering a node. Returns [] for unknown ids."""
        ...

    # ─────────────────────────────────────────────
    # Bulk Operations
    # ─────────────────────────────────────────────

    @abstractmethod
    def clear(self) -> None:
        """Remove all nodes and edges."""
        ...
