"""
Cartographer - a structural knowledge graph of a codebase.

Files, folders and functions become typed nodes; imports, definitions and
calls become edges. Questions in plain language are mapped onto
deterministic graph queries (blast radius, centrality, file importance,
cycles), optionally explained by an LLM afterwards.
"""

__version__ = "1.0.0"
