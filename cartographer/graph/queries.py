"""
Structural queries over the knowledge graph.

All operations are pure reads. Unknown ids and empty graphs produce
empty results; nothing here raises for control flow.
"""

import os
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .knowledge_graph import KnowledgeGraph
from .models import EdgeType, Node, NodeType


# File importance weights
IMPORTANCE_WEIGHTS = {
    'functions': 1.0,    # per function the file defines
    'importers': 2.0,    # per distinct file importing it
}


@dataclass
class BlastRadius:
    """
    Transitive dependents of a function.

    Attributes:
        function_id: The function being changed
        affected_functions: Dependents in BFS discovery order
        affected_files: Defining files of the dependents, first-seen order
        depth: Deepest BFS level that discovered a dependent
    """
    function_id: str
    affected_functions: List[str] = field(default_factory=list)
    affected_files: List[str] = field(default_factory=list)
    depth: int = 0

    def to_dict(self) -> Dict:
        return {
            "function_id": self.function_id,
            "affected_functions": self.affected_functions,
            "affected_files": self.affected_files,
            "depth": self.depth,
            "affected_count": len(self.affected_functions),
        }


@dataclass
class FunctionCentrality:
    function_id: str
    centrality: int
    in_degree: int
    out_degree: int

    def to_dict(self) -> Dict:
        return {
            "id": self.function_id,
            "centrality": self.centrality,
            "in_degree": self.in_degree,
            "out_degree": self.out_degree,
        }


@dataclass
class FileImportance:
    file_id: str
    importance: float
    function_count: int
    importer_count: int

    def to_dict(self) -> Dict:
        return {
            "file": self.file_id,
            "importance": round(self.importance, 3),
            "function_count": self.function_count,
            "importer_count": self.importer_count,
        }


class GraphQueries:
    """
    Read-only algorithms over a KnowledgeGraph.

    Usage:
        queries = GraphQueries(graph)
        radius = queries.function_blast_radius("src/a.py::load::3")
        print(radius.affected_functions, radius.depth)
    """

    def __init__(self, graph: KnowledgeGraph):
        self.graph = graph

    # ─── Blast radius ─────────────────────────────

    def function_blast_radius(self, function_id: str) -> BlastRadius:
        """
        Find everything that depends on a function, transitively.

        Breadth-first traversal over incoming CALLS edges. The visited set
        is seeded with the start node so call cycles terminate and the
        start is never reported.
        """
        result = BlastRadius(function_id=function_id)
        if not self.graph.has_node(function_id):
            return result

        visited: Set[str] = {function_id}
        seen_files: Set[str] = set()
        queue = deque([(function_id, 0)])

        while queue:
            current, level = queue.popleft()
            for edge in self.graph.get_incoming_edges(current):
                if edge.type != EdgeType.CALLS or edge.source in visited:
                    continue
                visited.add(edge.source)
                result.affected_functions.append(edge.source)
                result.depth = max(result.depth, level + 1)
                queue.append((edge.source, level + 1))

                file_path = self._defining_file(edge.source)
                if file_path and file_path not in seen_files:
                    seen_files.add(file_path)
                    result.affected_files.append(file_path)

        return result

    # ─── Centrality ───────────────────────────────

    def function_centrality(self) -> List[FunctionCentrality]:
        """
        Degree centrality over CALLS edges for every function.

        Sorted by centrality descending, ties by id ascending.
        """
        scores = []
        for node in self.graph.get_nodes_by_type(NodeType.FUNCTION):
            in_degree = self._count_edges(self.graph.get_incoming_edges(node.id), EdgeType.CALLS)
            out_degree = self._count_edges(self.graph.get_outgoing_edges(node.id), EdgeType.CALLS)
            scores.append(FunctionCentrality(
                function_id=node.id,
                centrality=in_degree + out_degree,
                in_degree=in_degree,
                out_degree=out_degree,
            ))

        scores.sort(key=lambda s: (-s.centrality, s.function_id))
        return scores

    # ─── File importance ──────────────────────────

    def file_importance(self) -> List[FileImportance]:
        """
        Composite importance for every file.

        Weighs the number of functions a file defines (DEFINES out-degree)
        and the number of distinct files importing it. Sorted by importance
        descending, ties by id ascending.
        """
        scores = []
        for node in self.graph.get_nodes_by_type(NodeType.FILE):
            function_count = self._count_edges(
                self.graph.get_outgoing_edges(node.id), EdgeType.DEFINES
            )
            importer_count = len(self.file_importers(node.id))
            importance = (
                function_count * IMPORTANCE_WEIGHTS['functions'] +
                importer_count * IMPORTANCE_WEIGHTS['importers']
            )
            scores.append(FileImportance(
                file_id=node.id,
                importance=importance,
                function_count=function_count,
                importer_count=importer_count,
            ))

        scores.sort(key=lambda s: (-s.importance, s.file_id))
        return scores

    # ─── Lookup ───────────────────────────────────

    def find_function_by_name(self, name: str) -> List[Node]:
        """Exact, case-sensitive match on function name, insertion order."""
        if not name:
            return []
        return [
            node for node in self.graph.get_nodes_by_type(NodeType.FUNCTION)
            if node.data.get("name") == name
        ]

    def find_files_by_name(self, name: str) -> List[Node]:
        """
        Files whose id is `name`, or whose path ends with it.

        Falls back to matching on the base name alone, so "b.py" finds
        "/repo/pkg/b.py".
        """
        if not name:
            return []
        files = self.graph.get_nodes_by_type(NodeType.FILE)

        exact = [node for node in files if node.id == name]
        if exact:
            return exact

        wanted = _normalise_path(name)
        by_suffix = [
            node for node in files
            if _path_ends_with(_normalise_path(_node_path(node)), wanted)
        ]
        if by_suffix:
            return by_suffix

        # A folder target ("src/") has no base name and names no file
        base_name = os.path.basename(wanted)
        if not base_name:
            return []
        return [
            node for node in files
            if os.path.basename(_normalise_path(_node_path(node))) == base_name
        ]

    # ─── Direct adjacency ─────────────────────────

    def file_dependencies(self, file_id: str) -> List[str]:
        """Files imported by a file, in edge order (duplicates kept)."""
        return [
            edge.target for edge in self.graph.get_outgoing_edges(file_id)
            if edge.type == EdgeType.IMPORTS
        ]

    def file_importers(self, file_id: str) -> List[str]:
        """Distinct files importing a file, first-seen order."""
        importers: List[str] = []
        for edge in self.graph.get_incoming_edges(file_id):
            if edge.type == EdgeType.IMPORTS and edge.source not in importers:
                importers.append(edge.source)
        return importers

    def functions_defined_in(self, file_id: str) -> List[str]:
        return [
            edge.target for edge in self.graph.get_outgoing_edges(file_id)
            if edge.type == EdgeType.DEFINES
        ]

    def function_callers(self, function_id: str) -> List[str]:
        return [
            edge.source for edge in self.graph.get_incoming_edges(function_id)
            if edge.type == EdgeType.CALLS
        ]

    def function_callees(self, function_id: str) -> List[str]:
        return [
            edge.target for edge in self.graph.get_outgoing_edges(function_id)
            if edge.type == EdgeType.CALLS
        ]

    # ─── Cycles ───────────────────────────────────

    def find_cycles(
        self,
        dependencies: Optional[Iterable[Tuple[str, str]]] = None
    ) -> List[List[str]]:
        """
        Circular import chains.

        Args:
            dependencies: (from, to) import pairs. Defaults to the graph's
                own IMPORTS edges.
        """
        if dependencies is None:
            dependencies = [
                (edge.source, edge.target)
                for node in self.graph.get_nodes_by_type(NodeType.FILE)
                for edge in self.graph.get_outgoing_edges(node.id)
                if edge.type == EdgeType.IMPORTS
            ]
        return find_cycles(dependencies)

    def graph_statistics(self) -> Dict:
        """Node and edge counts, overall and by type."""
        stats = self.graph.get_statistics()
        stats["cycles"] = len(self.find_cycles())
        return stats

    # ─── Helpers ──────────────────────────────────

    def _defining_file(self, function_id: str) -> Optional[str]:
        node = self.graph.get_node(function_id)
        if node is None:
            return None
        return node.data.get("file")

    @staticmethod
    def _count_edges(edges, edge_type: EdgeType) -> int:
        return sum(1 for edge in edges if edge.type == edge_type)


class _Frame:
    """One DFS stack entry: a node and the index of its next neighbor."""
    __slots__ = ("node", "next_index")

    def __init__(self, node: str):
        self.node = node
        self.next_index = 0


def find_cycles(dependencies: Iterable[Tuple[str, str]]) -> List[List[str]]:
    """
    Enumerate cycles in a directed dependency list.

    Depth-first search from every unvisited node, using an explicit stack
    so deep import chains cannot hit the recursion limit. When a neighbor
    that is still on the stack is reached, the path from that neighbor's
    position to the current node is emitted, closed with the neighbor:
    A→B, B→C, C→A yields [A, B, C, A]. Fully explored nodes are never
    re-entered. The same cycle is reported again if a parallel edge closes
    it a second time.
    """
    adjacency: Dict[str, List[str]] = {}
    for source, target in dependencies:
        adjacency.setdefault(source, []).append(target)

    cycles: List[List[str]] = []
    visited: Set[str] = set()
    on_stack: Set[str] = set()

    for root in list(adjacency):
        if root in visited:
            continue

        visited.add(root)
        on_stack.add(root)
        path = [root]
        stack = [_Frame(root)]

        while stack:
            frame = stack[-1]
            neighbors = adjacency.get(frame.node, [])

            if frame.next_index >= len(neighbors):
                stack.pop()
                path.pop()
                on_stack.discard(frame.node)
                continue

            neighbor = neighbors[frame.next_index]
            frame.next_index += 1

            if neighbor not in visited:
                visited.add(neighbor)
                on_stack.add(neighbor)
                path.append(neighbor)
                stack.append(_Frame(neighbor))
            elif neighbor in on_stack:
                start = path.index(neighbor)
                cycles.append(path[start:] + [neighbor])

    return cycles


def _node_path(node: Node) -> str:
    return node.data.get("path") or node.id


def _normalise_path(file_path: str) -> str:
    return file_path.replace("\\", "/").lower()


def _path_ends_with(file_path: str, suffix: str) -> bool:
    if file_path == suffix:
        return True
    return file_path.endswith("/" + suffix.lstrip("/"))
