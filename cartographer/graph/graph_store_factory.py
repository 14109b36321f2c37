"""
Graph store factory.

Returns the appropriate graph store backend based on configuration.
Default is NetworkX.

Set GRAPH_STORE_BACKEND env var to switch:
    - "networkx" → NetworkX MultiDiGraph (default)
    - "memory"   → plain adjacency lists (exact edge insertion order)
"""

import os
from typing import Optional

from .base_graph_store import BaseGraphStore


def create_graph_store(backend: Optional[str] = None) -> BaseGraphStore:
    """
    Create and return a graph store instance.

    Args:
        backend: "networkx" or "memory". If None, reads from
                 GRAPH_STORE_BACKEND env var (default: "networkx").

    Returns:
        A BaseGraphStore implementation.
    """
    backend = (backend or os.getenv("GRAPH_STORE_BACKEND", "networkx")).lower()

    if backend == "networkx":
        from .networkx_store import NetworkXStore
        return NetworkXStore()

    elif backend == "memory":
        from .memory_store import MemoryStore
        return MemoryStore()

    else:
        raise ValueError(
            f"Unknown graph store backend: '{backend}'. "
            f"Supported: 'networkx', 'memory'"
        )
