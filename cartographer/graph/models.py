"""
Node and edge models for the codebase knowledge graph.

This module defines the node types and relationship types that can
exist between structural entities of a workspace.
"""

from dataclasses import dataclass, field
from typing import Any, Dict
from enum import Enum


class NodeType(str, Enum):
    """Kinds of structural entities stored in the graph."""
    FILE = "File"
    FOLDER = "Folder"
    FUNCTION = "Function"


class EdgeType(str, Enum):
    """
    Types of relationships between structural entities.

    These represent the edges in the knowledge graph.
    """
    IMPORTS = "IMPORTS"     # File imports another workspace file
    DEFINES = "DEFINES"     # File defines a function
    CALLS = "CALLS"         # Function calls another function


@dataclass
class Node:
    """
    A structural entity in the knowledge graph.

    Attributes:
        id: Globally unique id (absolute path for files/folders,
            "<file>::<name>::<line>" for functions)
        type: Kind of entity; fixed at first insertion
        data: Type-specific attributes (path, name, file, start_line, calls)
    """
    id: str
    type: NodeType
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            id=data["id"],
            type=NodeType(data["type"]),
            data=dict(data.get("data", {})),
        )


@dataclass(frozen=True)
class Edge:
    """
    A directed relationship between two node ids.

    Endpoints are not required to exist in the graph.
    """
    source: str
    target: str
    type: EdgeType

    def to_dict(self) -> Dict[str, str]:
        return {
            "from": self.source,
            "to": self.target,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        return cls(
            source=data["from"],
            target=data["to"],
            type=EdgeType(data["type"]),
        )


def function_node_id(file_path: str, name: str, start_line: int) -> str:
    """Build the composite id of a function node."""
    return f"{file_path}::{name}::{start_line}"
