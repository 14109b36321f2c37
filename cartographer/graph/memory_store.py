"""
Plain in-memory implementation of the graph store.

Keeps precomputed adjacency lists in both directions. Edges are returned
in exact insertion order, which NetworkX groups by neighbor.
"""

import copy
from typing import Any, Dict, List

from .base_graph_store import BaseGraphStore, EdgeTuple


class MemoryStore(BaseGraphStore):
    """Graph store backed by dictionaries of adjacency lists."""

    def __init__(self):
        self._types: Dict[str, str] = {}
        self._data: Dict[str, Dict[str, Any]] = {}
        self._outgoing: Dict[str, List[EdgeTuple]] = {}
        self._incoming: Dict[str, List[EdgeTuple]] = {}
        self._edge_count = 0

    def add_node(self, node_id: str, node_type: str, data: Dict[str, Any]) -> None:
        self._types[node_id] = node_type
        self._data[node_id] = copy.deepcopy(data)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._types

    def get_node_type(self, node_id: str) -> str:
        return self._types.get(node_id, "")

    def get_node_data(self, node_id: str) -> Dict[str, Any]:
        return copy.deepcopy(self._data.get(node_id, {}))

    def number_of_nodes(self) -> int:
        return len(self._types)

    def add_edge(self, source: str, target: str, edge_type: str) -> None:
        edge = (source, target, edge_type)
        self._outgoing.setdefault(source, []).append(edge)
        self._incoming.setdefault(target, []).append(edge)
        self._edge_count += 1

    def number_of_edges(self) -> int:
        return self._edge_count

    def out_edges(self, node_id: str) -> List[EdgeTuple]:
        return list(self._outgoing.get(node_id, []))

    def in_edges(self, node_id: str) -> List[EdgeTuple]:
        return list(self._incoming.get(node_id, []))

    def clear(self) -> None:
        self._types.clear()
        self._data.clear()
        self._outgoing.clear()
        self._incoming.clear()
        self._edge_count = 0
