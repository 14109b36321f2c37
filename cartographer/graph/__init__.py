"""
Graph module - Knowledge graph storage and structural queries.

This module holds the typed node/edge graph of a workspace and the
read-only algorithms over it: blast radius, centrality, file importance,
cycle detection and name lookup.
"""

from .models import (
    NodeType,
    EdgeType,
    Node,
    Edge,
    function_node_id
)

from .knowledge_graph import KnowledgeGraph

from .queries import (
    GraphQueries,
    BlastRadius,
    FunctionCentrality,
    FileImportance,
    find_cycles
)

__all__ = [
    # Models
    "NodeType",
    "EdgeType",
    "Node",
    "Edge",
    "function_node_id",
    # Graph
    "KnowledgeGraph",
    # Queries
    "GraphQueries",
    "BlastRadius",
    "FunctionCentrality",
    "FileImportance",
    "find_cycles",
]
