"""
Query orchestrator.

Turns a free-text question into one deterministic graph read:

    question → QueryParser ──hit──→ parser-intent handler → result
                   │
                  miss
                   ↓
               QueryPlanner → blast radius / centrality / importance /
                              function lookup / general question

The explainer runs only after the facts of a result are fixed and may set
nothing but `context_preview`. Not-found conditions are reported in
`metadata["error"]`; nothing here raises for them.
"""

import copy
import dataclasses
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .ai.explainer import Explainer, NullExplainer
from .config import AnalysisConfig
from .graph import GraphQueries, KnowledgeGraph, Node, NodeType
from .knowledge import (
    DocumentationFinding,
    HistoryFinding,
    KnowledgeBase,
    RiskFinding,
)
from .nlp import ParsedQuery, PlanIntent, QueryIntent, QueryParser, QueryPlan, QueryPlanner

GENERAL_QUERY = "general_query"
UNKNOWN = "unknown"


@dataclass(frozen=True)
class QueryResult:
    """
    Answer to one question. Immutable once returned.

    Attributes:
        intent: Parser intent (e.g. "USAGE"), planner intent
            (e.g. "blast_radius"), "general_query" or "unknown"
        files: Relevant file ids
        functions: Relevant function ids
        metadata: Intent-specific facts; "error" / "warning" on failure
        context_preview: Human-readable summary or explanation
    """
    intent: str
    files: Tuple[str, ...] = ()
    functions: Tuple[str, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)
    context_preview: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "files", tuple(self.files))
        object.__setattr__(self, "functions", tuple(self.functions))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def error(self) -> Optional[str]:
        return self.metadata.get("error")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "files": list(self.files),
            "functions": list(self.functions),
            "metadata": dict(self.metadata),
            "contextPreview": self.context_preview,
        }


class QueryOrchestrator:
    """
    Answers questions against one knowledge graph.

    Usage:
        orchestrator = QueryOrchestrator(graph, knowledge, explainer)
        result = orchestrator.run_query("what breaks if I change parse_config")
    """

    def __init__(
        self,
        graph: KnowledgeGraph,
        knowledge: Optional[KnowledgeBase] = None,
        explainer: Optional[Explainer] = None,
        config: Optional[AnalysisConfig] = None,
    ):
        self.graph = graph
        self.knowledge = knowledge or KnowledgeBase()
        self.explainer = explainer or NullExplainer()
        self.config = config or AnalysisConfig()
        self.queries = GraphQueries(graph)
        self.parser = QueryParser()
        self.planner = QueryPlanner()

    def run_query(self, question: str) -> QueryResult:
        parsed = self.parser.parse(question)
        if parsed is not None:
            print(f"[Orchestrator] Parsed intent: {parsed.intent.value}, target: {parsed.target}")
            return self._handle_parsed(parsed)

        plan = self.planner.plan(question)
        print(f"[Orchestrator] Planned intent: {plan.intent.value}, function: {plan.function_name}")

        if plan.intent == PlanIntent.BLAST_RADIUS:
            result = self._handle_blast_radius(plan)
        elif plan.intent == PlanIntent.CENTRAL_FUNCTIONS:
            result = self._handle_central_functions()
        elif plan.intent == PlanIntent.IMPORTANT_FILES:
            result = self._handle_important_files()
        elif plan.intent == PlanIntent.FIND_FUNCTION:
            result = self._handle_find_function(plan)
        else:
            return self._handle_general_query(question)

        return self._enrich(question, result)

    # ─── Enrichment ───────────────────────────────

    def _enrich(self, question: str, result: QueryResult) -> QueryResult:
        """Let the explainer phrase a result; the facts stay untouched."""
        if not self.explainer.available:
            return result
        try:
            explanation = self.explainer.explain_result(
                question,
                result.intent,
                list(result.files),
                list(result.functions),
                copy.deepcopy(dict(result.metadata)),
                self.build_context_preview(result.files),
            )
        except Exception as e:
            print(f"[Orchestrator] Explanation failed: {e}")
            return result

        if not explanation:
            return result
        return dataclasses.replace(result, context_preview=explanation)

    def build_context_preview(self, files: Sequence[str]) -> str:
        """First lines of the leading result files; unreadable files are skipped."""
        previews = []
        for file_path in list(files)[:self.config.preview_files]:
            try:
                with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                    head = [line for _, line in zip(range(self.config.preview_lines), f)]
            except OSError:
                continue
            previews.append(f"File: {file_path}\n{''.join(head).rstrip()}\n---")
        return "\n\n".join(previews)

    # ─── Planner intents ──────────────────────────

    def _handle_blast_radius(self, plan: QueryPlan) -> QueryResult:
        intent = PlanIntent.BLAST_RADIUS.value
        if not plan.function_name:
            return QueryResult(intent, metadata={"error": "Function name not found in question"})

        matches = self.queries.find_function_by_name(plan.function_name)
        if not matches:
            return QueryResult(intent, metadata={"error": f'Function "{plan.function_name}" not found'})

        function_id = matches[0].id
        blast = self.queries.function_blast_radius(function_id)
        return QueryResult(
            intent,
            files=blast.affected_files,
            functions=blast.affected_functions,
            metadata={
                "function_id": function_id,
                "depth": blast.depth,
                "affected_count": len(blast.affected_functions),
            },
        )

    def _handle_central_functions(self) -> QueryResult:
        top = self.queries.function_centrality()[:self.config.top_central_functions]

        files: List[str] = []
        for entry in top:
            node = self.graph.get_node(entry.function_id)
            file_path = node.data.get("file") if node else None
            if file_path and file_path not in files:
                files.append(file_path)

        return QueryResult(
            PlanIntent.CENTRAL_FUNCTIONS.value,
            files=files,
            functions=[entry.function_id for entry in top],
            metadata={"functions": [entry.to_dict() for entry in top]},
        )

    def _handle_important_files(self) -> QueryResult:
        top = self.queries.file_importance()[:self.config.top_important_files]
        return QueryResult(
            PlanIntent.IMPORTANT_FILES.value,
            files=[entry.file_id for entry in top],
            metadata={"files": [entry.to_dict() for entry in top]},
        )

    def _handle_find_function(self, plan: QueryPlan) -> QueryResult:
        intent = PlanIntent.FIND_FUNCTION.value
        if not plan.function_name:
            return QueryResult(intent, metadata={"error": "Function name not found in question"})

        matches = self.queries.find_function_by_name(plan.function_name)
        if not matches:
            return QueryResult(intent, metadata={"error": f'Function "{plan.function_name}" not found'})

        return QueryResult(
            intent,
            files=_unique(node.data.get("file") for node in matches),
            functions=[node.id for node in matches],
            metadata={"functions": [_describe_function(node) for node in matches]},
        )

    # ─── General questions ────────────────────────

    def _handle_general_query(self, question: str) -> QueryResult:
        if not self.explainer.available:
            return QueryResult(
                UNKNOWN,
                context_preview=(
                    "This question does not match a structural query, and no LLM is "
                    "configured to answer it. Set GOOGLE_API_KEY (or LLM_PROVIDER=bedrock) "
                    "to enable free-form questions."
                ),
            )

        important = [entry.file_id for entry in self.queries.file_importance()[:15]]
        all_files = [node.id for node in self.graph.get_nodes_by_type(NodeType.FILE)]
        to_read = _unique(important + all_files[:self.config.general_max_files])
        to_read = to_read[:self.config.general_max_files]

        try:
            answer = self.explainer.answer_question(question, self._read_project_files(to_read))
        except Exception as e:
            print(f"[Orchestrator] General query failed: {e}")
            return QueryResult(GENERAL_QUERY, context_preview=f"Error: {e}")

        return QueryResult(
            GENERAL_QUERY,
            files=to_read,
            context_preview=answer or "The explainer could not answer this question.",
        )

    def _read_project_files(self, files: Sequence[str]) -> List[Tuple[str, str]]:
        project_files = []
        budget = self.config.general_max_chars
        workspace = self.config.workspace_path

        for file_path in files:
            try:
                with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                    content = f.read()
            except OSError as e:
                print(f"[Orchestrator] Failed to read {file_path}: {e}")
                continue

            label = os.path.relpath(file_path, workspace) if workspace else file_path
            if len(content) > budget:
                project_files.append((label, content[:budget] + "\n... (truncated)"))
                break
            project_files.append((label, content))
            budget -= len(content)

        return project_files

    # ─── Parser intents ───────────────────────────

    def _handle_parsed(self, parsed: ParsedQuery) -> QueryResult:
        handlers = {
            QueryIntent.DEPENDENCIES: self._handle_dependencies,
            QueryIntent.USAGE: self._handle_usage,
            QueryIntent.HISTORY: self._handle_history,
            QueryIntent.RISKS: self._handle_risks,
            QueryIntent.EXPLAIN: self._handle_explain,
        }
        return handlers[parsed.intent](parsed.target)

    def _handle_dependencies(self, target: str) -> QueryResult:
        intent = QueryIntent.DEPENDENCIES.value
        files = self.queries.find_files_by_name(target)
        if not files:
            return QueryResult(intent, metadata={"error": f'File "{target}" not found'})

        file_id = files[0].id
        dependencies = self.queries.file_dependencies(file_id)
        listing = "\n".join(f"- {os.path.basename(d)}" for d in dependencies) or "(none)"
        return QueryResult(
            intent,
            files=[file_id],
            context_preview=f"Dependencies of {os.path.basename(file_id)}:\n{listing}",
            metadata={"count": len(dependencies), "dependencies": dependencies},
        )

    def _handle_usage(self, target: str) -> QueryResult:
        intent = QueryIntent.USAGE.value
        functions = self.queries.find_function_by_name(target)
        if functions:
            function = functions[0]
            caller_ids = self.queries.function_callers(function.id)
            callers = [self._function_name(caller) for caller in caller_ids]
            listing = "\n".join(f"- {c}" for c in callers) or "(no callers found)"
            return QueryResult(
                intent,
                files=_unique([function.data.get("file")]),
                functions=[function.id],
                context_preview=f"Function {target} is called by:\n{listing}",
                metadata={"count": len(callers), "callers": callers, "caller_ids": caller_ids},
            )

        files = self.queries.find_files_by_name(target)
        if files:
            file_id = files[0].id
            importers = self.queries.file_importers(file_id)
            listing = "\n".join(f"- {os.path.basename(i)}" for i in importers) or "(not imported)"
            return QueryResult(
                intent,
                files=[file_id],
                context_preview=f"{os.path.basename(file_id)} is imported by:\n{listing}",
                metadata={"count": len(importers), "importers": importers},
            )

        return QueryResult(intent, metadata={"error": f'Function "{target}" not found'})

    def _handle_history(self, target: str) -> QueryResult:
        intent = QueryIntent.HISTORY.value
        history = self.knowledge.get(HistoryFinding)
        if history is None:
            return QueryResult(
                intent,
                context_preview=f"No git history is available for {target}.",
                metadata={"warning": "History finding absent (not a git repository or history timed out)"},
            )

        entries = [h for h in history.files if _path_matches(h.file, target)]
        if not entries:
            return QueryResult(intent, metadata={"error": f'No history found for "{target}"'})

        lines = []
        for entry in entries:
            modified = entry.last_modified.strftime("%Y-%m-%d") if entry.last_modified else "unknown"
            lines.append(
                f"- {os.path.basename(entry.file)}: {entry.commits} commits by "
                f"{', '.join(entry.authors)} (last modified {modified})"
            )
        return QueryResult(
            intent,
            files=[entry.file for entry in entries],
            context_preview=f"History of {target}:\n" + "\n".join(lines),
            metadata={"history": [entry.to_dict() for entry in entries]},
        )

    def _handle_risks(self, target: str) -> QueryResult:
        intent = QueryIntent.RISKS.value
        finding = self.knowledge.get(RiskFinding)
        if finding is None:
            return QueryResult(
                intent,
                context_preview=f"No risk assessment is available for {target}.",
                metadata={"warning": "Risk finding absent"},
            )

        risks = [r for r in finding.risks if _path_matches(r.file, target)]
        if not risks:
            files = self.queries.find_files_by_name(target)
            if not files:
                return QueryResult(intent, metadata={"error": f'File "{target}" not found'})
            return QueryResult(
                intent,
                files=[files[0].id],
                context_preview=f"No risks found in {os.path.basename(files[0].id)}.",
                metadata={"count": 0, "risks": []},
            )

        lines = [
            f"- [{r.severity}] {r.message} ({os.path.basename(r.file)}:{r.line})"
            for r in risks
        ]
        return QueryResult(
            intent,
            files=_unique(r.file for r in risks),
            context_preview=f"Risks in {target}:\n" + "\n".join(lines),
            metadata={"count": len(risks), "risks": [dataclasses.asdict(r) for r in risks]},
        )

    def _handle_explain(self, target: str) -> QueryResult:
        intent = QueryIntent.EXPLAIN.value

        functions = self.queries.find_function_by_name(target)
        if functions:
            function = functions[0]
            callers = [self._function_name(f) for f in self.queries.function_callers(function.id)]
            callees = [self._function_name(f) for f in self.queries.function_callees(function.id)]
            file_path = function.data.get("file")
            return QueryResult(
                intent,
                files=_unique([file_path]),
                functions=[function.id],
                context_preview=(
                    f"Function {target} ({os.path.basename(file_path or '')}:"
                    f"{function.data.get('start_line')})\n"
                    f"Called by: {', '.join(callers) or '(nothing)'}\n"
                    f"Calls: {', '.join(callees) or '(nothing)'}"
                ),
                metadata={"function": _describe_function(function), "callers": callers, "callees": callees},
            )

        files = self.queries.find_files_by_name(target)
        if not files:
            return QueryResult(intent, metadata={"error": f'"{target}" not found'})

        file_id = files[0].id
        defined = self.queries.functions_defined_in(file_id)
        dependencies = self.queries.file_dependencies(file_id)
        importers = self.queries.file_importers(file_id)

        lines = [
            f"File {os.path.basename(file_id)}",
            f"Defines {len(defined)} functions: "
            f"{', '.join(self._function_name(f) for f in defined) or '(none)'}",
            f"Imports: {', '.join(os.path.basename(d) for d in dependencies) or '(none)'}",
            f"Imported by: {', '.join(os.path.basename(i) for i in importers) or '(nothing)'}",
        ]
        metadata = {
            "functions": defined,
            "dependencies": dependencies,
            "importers": importers,
        }

        docs = self.knowledge.get(DocumentationFinding)
        if docs is not None:
            for doc in docs.docs:
                if doc.file == file_id:
                    lines.append(f"Summary: {doc.summary}")
                    metadata["summary"] = doc.summary
                    break

        return QueryResult(
            intent,
            files=[file_id],
            functions=defined,
            context_preview="\n".join(lines),
            metadata=metadata,
        )

    # ─── Helpers ──────────────────────────────────

    def _function_name(self, function_id: str) -> str:
        node = self.graph.get_node(function_id)
        if node is not None and node.data.get("name"):
            return node.data["name"]
        return function_id


def _describe_function(node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "name": node.data.get("name"),
        "file": node.data.get("file"),
        "start_line": node.data.get("start_line"),
    }


def _unique(values) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def _path_matches(file_path: str, target: str) -> bool:
    path = file_path.replace("\\", "/").lower()
    wanted = target.replace("\\", "/").lower().strip("/")
    if not wanted:
        return False
    return path == wanted or path.endswith("/" + wanted)
