"""
NetworkX implementation of the graph store.

Wraps a NetworkX MultiDiGraph behind the BaseGraphStore interface.
This is the default backend.
"""

import copy
from typing import Any, Dict, List

import networkx as nx

from .base_graph_store import BaseGraphStore, EdgeTuple


class NetworkXStore(BaseGraphStore):
    """Graph store backed by NetworkX (in-memory directed multigraph)."""

    def __init__(self):
        self._graph = nx.MultiDiGraph()
        self._node_count = 0

    # ─── Node Operations ──────────────────────────

    def add_node(self, node_id: str, node_type: str, data: Dict[str, Any]) -> None:
        if not self.has_node(node_id):
            self._node_count += 1
        self._graph.add_node(node_id, node_type=node_type, data=copy.deepcopy(data))

    def has_node(self, node_id: str) -> bool:
        # add_edge() creates bare endpoint nodes; only typed nodes count
        return node_id in self._graph and "node_type" in self._graph.nodes[node_id]

    def get_node_type(self, node_id: str) -> str:
        if node_id in self._graph:
            return self._graph.nodes[node_id].get("node_type", "")
        return ""

    def get_node_data(self, node_id: str) -> Dict[str, Any]:
        if node_id in self._graph:
            return copy.deepcopy(self._graph.nodes[node_id].get("data", {}))
        return {}

    def number_of_nodes(self) -> int:
        return self._node_count

    # ─── Edge Operations ──────────────────────────

    def add_edge(self, source: str, target: str, edge_type: str) -> None:
        self._graph.add_edge(source, target, type=edge_type)

    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()

    # ─── Adjacency ────────────────────────────────

    def out_edges(self, node_id: str) -> List[EdgeTuple]:
        if node_id not in self._graph:
            return []
        return [
            (u, v, attrs.get("type", ""))
            for u, v, attrs in self._graph.out_edges(node_id, data=True)
        ]

    def in_edges(self, node_id: str) -> List[EdgeTuple]:
        if node_id not in self._graph:
            return []
        return [
            (u, v, attrs.get("type", ""))
            for u, v, attrs in self._graph.in_edges(node_id, data=True)
        ]

    # ─── Bulk Operations ──────────────────────────

    def clear(self) -> None:
        self._graph.clear()
        self._node_count = 0
