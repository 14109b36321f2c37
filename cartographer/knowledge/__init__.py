"""
Knowledge module - Findings handed from collaborators to the graph build.
"""

from .findings import (
    Collaborator,
    Dependency,
    FunctionRecord,
    RiskItem,
    FileHistory,
    FileDocumentation,
    ArchitectureInsight,
    AgentFinding,
    WorkspaceFinding,
    ExtractionFinding,
    RiskFinding,
    HistoryFinding,
    DocumentationFinding,
    ArchitectureFinding,
    FINDING_TYPES
)

from .knowledge_base import KnowledgeBase

__all__ = [
    # Records
    "Collaborator",
    "Dependency",
    "FunctionRecord",
    "RiskItem",
    "FileHistory",
    "FileDocumentation",
    "ArchitectureInsight",
    # Findings
    "AgentFinding",
    "WorkspaceFinding",
    "ExtractionFinding",
    "RiskFinding",
    "HistoryFinding",
    "DocumentationFinding",
    "ArchitectureFinding",
    "FINDING_TYPES",
    # Store
    "KnowledgeBase",
]
