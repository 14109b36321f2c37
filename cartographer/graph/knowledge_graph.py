"""
Typed knowledge graph of a workspace's structural entities.

Files, folders and functions are nodes; IMPORTS, DEFINES and CALLS are
directed edges. The graph is populated once per build (additions only)
and then only read.
"""

from typing import Dict, List, Optional, Union

from .base_graph_store import BaseGraphStore
from .graph_store_factory import create_graph_store
from .models import Edge, EdgeType, Node, NodeType


class KnowledgeGraph:
    """
    Knowledge graph for structural code analysis.

    Uses a pluggable graph store backend (NetworkX by default) and keeps a
    per-type index of node ids in insertion order.
    """

    def __init__(self, store: Optional[BaseGraphStore] = None):
        self.store = store or create_graph_store()
        self._ids_by_type: Dict[NodeType, List[str]] = {t: [] for t in NodeType}
        self._edge_type_counts: Dict[str, int] = {}

    # ─── Mutation (build pass only) ───────────────

    def add_node(self, node: Node) -> None:
        """Insert a node, or overwrite its data if the id already exists."""
        existing_type = self.store.get_node_type(node.id)
        if existing_type:
            # The first inserted type sticks; only data is replaced
            self.store.add_node(node.id, existing_type, node.data)
            return
        self.store.add_node(node.id, node.type.value, node.data)
        self._ids_by_type[node.type].append(node.id)

    def add_edge(self, edge: Edge) -> None:
        """Append a directed edge. Endpoints are not checked."""
        self.store.add_edge(edge.source, edge.target, edge.type.value)
        key = edge.type.value
        self._edge_type_counts[key] = self._edge_type_counts.get(key, 0) + 1

    # ─── Lookup ───────────────────────────────────

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by id, or None if it was never added."""
        node_type = self.store.get_node_type(node_id)
        if not node_type:
            return None
        return Node(
            id=node_id,
            type=NodeType(node_type),
            data=self.store.get_node_data(node_id),
        )

    def has_node(self, node_id: str) -> bool:
        return self.store.has_node(node_id)

    def get_nodes_by_type(self, node_type: Union[NodeType, str]) -> List[Node]:
        """All nodes of one type, in insertion order."""
        node_type = _as_node_type(node_type)
        if node_type is None:
            return []
        nodes = []
        for node_id in self._ids_by_type[node_type]:
            node = self.get_node(node_id)
            if node is not None:
                nodes.append(node)
        return nodes

    def get_outgoing_edges(self, node_id: str) -> List[Edge]:
        return [_to_edge(e) for e in self.store.out_edges(node_id)]

    def get_incoming_edges(self, node_id: str) -> List[Edge]:
        return [_to_edge(e) for e in self.store.in_edges(node_id)]

    def get_node_count(self) -> int:
        return self.store.number_of_nodes()

    def get_edge_count(self) -> int:
        return self.store.number_of_edges()

    def get_statistics(self) -> Dict:
        """Get graph statistics."""
        return {
            "nodes": self.get_node_count(),
            "edges": self.get_edge_count(),
            "node_types": {t.value: len(ids) for t, ids in self._ids_by_type.items()},
            "edge_types": dict(self._edge_type_counts),
        }


def _as_node_type(value: Union[NodeType, str]) -> Optional[NodeType]:
    if isinstance(value, NodeType):
        return value
    try:
        return NodeType(value)
    except ValueError:
        return None


def _to_edge(edge_tuple) -> Edge:
    source, target, edge_type = edge_tuple
    return Edge(source=source, target=target, type=EdgeType(edge_type))
