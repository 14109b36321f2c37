"""
Graph build.

Runs the collaborators over a workspace, then turns their findings into a
knowledge graph: File and Folder nodes, IMPORTS edges, and for every
extracted function a Function node, a DEFINES edge from its file and the
CALLS edges its call sites resolve to.
"""

import os
from typing import Dict, List, Optional

from .agents import create_coordinator
from .ai.explainer import Explainer, NullExplainer
from .config import AnalysisConfig
from .context import AnalysisContext
from .graph import Edge, EdgeType, KnowledgeGraph, Node, NodeType
from .graph.graph_store_factory import create_graph_store
from .knowledge import (
    ExtractionFinding,
    FunctionRecord,
    KnowledgeBase,
    WorkspaceFinding,
)


class WorkspaceNotFoundError(Exception):
    """The workspace does not exist or could not be mapped."""


class GraphBuilder:
    """
    Populates a KnowledgeGraph from collaborator findings.

    Call names are resolved when their function is inserted, against the
    Function nodes already in the graph: a node whose name equals the call
    first, then a node whose id names it after a "::" separator (the name
    segment, or its last dotted part, equal to the call). The earliest inserted
    match wins; unresolved calls are dropped.
    """

    def __init__(self, graph: KnowledgeGraph):
        self.graph = graph
        self._first_by_name: Dict[str, str] = {}
        self._function_ids: List[str] = []

    def build(self, knowledge: KnowledgeBase) -> KnowledgeGraph:
        workspace = knowledge.get(WorkspaceFinding)
        if workspace is None:
            print("[Builder] No workspace finding. Graph left empty.")
            return self.graph

        for file_path in workspace.files:
            self.graph.add_node(Node(id=file_path, type=NodeType.FILE, data={"path": file_path}))
        for folder in workspace.folders:
            self.graph.add_node(Node(id=folder, type=NodeType.FOLDER, data={"path": folder}))

        extraction = knowledge.get(ExtractionFinding)
        if extraction is None:
            print("[Builder] No extraction finding. Skipping imports and functions.")
        else:
            for dependency in extraction.dependencies:
                self.graph.add_edge(Edge(dependency.from_file, dependency.to_file, EdgeType.IMPORTS))
            for record in extraction.functions:
                self.add_function(record)

        stats = self.graph.get_statistics()
        print(
            f"[Builder] Graph built: {stats['nodes']} nodes, {stats['edges']} edges "
            f"({stats['node_types']}, {stats['edge_types']})"
        )
        return self.graph

    def add_function(self, record: FunctionRecord) -> None:
        self.graph.add_node(Node(id=record.id, type=NodeType.FUNCTION, data=record.to_data()))
        if record.name not in self._first_by_name:
            self._first_by_name[record.name] = record.id
        if record.id not in self._function_ids:
            self._function_ids.append(record.id)

        self.graph.add_edge(Edge(record.file, record.id, EdgeType.DEFINES))

        for call in record.calls:
            target = self.resolve_call(call)
            if target is not None:
                self.graph.add_edge(Edge(record.id, target, EdgeType.CALLS))

    def resolve_call(self, call: str) -> Optional[str]:
        if call in self._first_by_name:
            return self._first_by_name[call]
        for function_id in self._function_ids:
            if _id_names(function_id, call):
                return function_id
        return None


def _id_names(function_id: str, call: str) -> bool:
    # "<file>::<name>::<line>"; compared as whole segments
    segments = function_id.split("::")
    if len(segments) < 3:
        return False
    name = segments[-2]
    return name == call or name.rsplit(".", 1)[-1] == call


async def build_analysis_context(
    workspace_path: str,
    explainer: Optional[Explainer] = None,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisContext:
    """
    Analyse a workspace and return a ready-to-query context.

    Raises:
        WorkspaceNotFoundError: if the path is not a directory or the
            workspace could not be mapped
    """
    root = os.path.abspath(workspace_path)
    if not os.path.isdir(root):
        raise WorkspaceNotFoundError(f"Workspace not found: {root}")

    config = config or AnalysisConfig(workspace_path=root)
    explainer = explainer or NullExplainer()

    print(f"[Builder] Analysing workspace: {root}")
    knowledge = KnowledgeBase()
    coordinator = create_coordinator(knowledge, config, explainer)
    await coordinator.run_all(root)

    if knowledge.get(WorkspaceFinding) is None:
        raise WorkspaceNotFoundError(f"Workspace could not be mapped: {root}")

    graph = KnowledgeGraph(create_graph_store(config.graph_backend))
    GraphBuilder(graph).build(knowledge)

    return AnalysisContext.create(
        workspace_path=root,
        graph=graph,
        knowledge=knowledge,
        explainer=explainer,
        config=config,
    )
