"""
Tests for the query orchestrator.

Run with: python -m cartographer.tests.test_orchestrator
"""

import os
import tempfile
from datetime import datetime, timezone

from cartographer.ai.explainer import Explainer
from cartographer.config import AnalysisConfig
from cartographer.graph import Edge, EdgeType, KnowledgeGraph, Node, NodeType
from cartographer.graph.memory_store import MemoryStore
from cartographer.knowledge import (
    FileHistory,
    HistoryFinding,
    KnowledgeBase,
    RiskFinding,
    RiskItem,
)
from cartographer.orchestrator import QueryOrchestrator, QueryResult

A = "/ws/a.py::load::1"
B = "/ws/b.py::parse::1"
C = "/ws/c.py::run::1"


class FakeExplainer(Explainer):
    """Explainer returning canned text and recording what it was shown."""

    def __init__(self, text="explained", fail=False):
        self.text = text
        self.fail = fail
        self.calls = []

    @property
    def available(self):
        return True

    def explain_result(self, question, intent, files, functions, metadata, context_preview=""):
        self.calls.append((question, intent))
        if self.fail:
            raise RuntimeError("model unavailable")
        return self.text

    def answer_question(self, question, project_files):
        self.calls.append((question, "answer"))
        if self.fail:
            raise RuntimeError("model unavailable")
        return f"answer from {len(project_files)} files"

    def summarize_file(self, path, content):
        return None


def _graph():
    graph = KnowledgeGraph(MemoryStore())
    for path in ("/ws/a.py", "/ws/b.py", "/ws/c.py"):
        graph.add_node(Node(id=path, type=NodeType.FILE, data={"path": path}))
    for function_id in (A, B, C):
        file_path, name, line = function_id.split("::")
        graph.add_node(Node(
            id=function_id,
            type=NodeType.FUNCTION,
            data={"name": name, "file": file_path, "start_line": int(line), "calls": []},
        ))
        graph.add_edge(Edge(file_path, function_id, EdgeType.DEFINES))
    graph.add_edge(Edge(B, A, EdgeType.CALLS))
    graph.add_edge(Edge(C, B, EdgeType.CALLS))
    graph.add_edge(Edge("/ws/b.py", "/ws/a.py", EdgeType.IMPORTS))
    graph.add_edge(Edge("/ws/c.py", "/ws/b.py", EdgeType.IMPORTS))
    return graph


def _orchestrator(explainer=None, knowledge=None):
    return QueryOrchestrator(_graph(), knowledge=knowledge, explainer=explainer)


# ─── Planner intents ──────────────────────────

def test_blast_radius_query():
    result = _orchestrator().run_query("what breaks if I change load")

    assert result.intent == "blast_radius"
    assert result.functions == (B, C)
    assert result.files == ("/ws/b.py", "/ws/c.py")
    assert result.metadata["function_id"] == A
    assert result.metadata["depth"] == 2
    assert result.metadata["affected_count"] == 2

    print("Blast radius query: PASSED")


def test_blast_radius_not_found():
    result = _orchestrator().run_query("what breaks if I change missing_fn")
    assert result.intent == "blast_radius"
    assert result.files == () and result.functions == ()
    assert result.metadata["error"] == 'Function "missing_fn" not found'

    result = _orchestrator().run_query("what is the blast radius")
    assert result.metadata["error"] == "Function name not found in question"

    print("Blast radius not found: PASSED")


def test_central_functions_query():
    result = _orchestrator().run_query("show the most called functions")
    assert result.intent == "central_functions"
    assert result.functions == (B, A, C)
    assert result.files == ("/ws/b.py", "/ws/a.py", "/ws/c.py")
    assert result.metadata["functions"][0]["centrality"] == 2

    print("Central functions query: PASSED")


def test_important_files_query():
    result = _orchestrator().run_query("what are the important files")
    assert result.intent == "important_files"
    assert result.files == ("/ws/a.py", "/ws/b.py", "/ws/c.py")
    assert [f["importance"] for f in result.metadata["files"]] == [3.0, 3.0, 1.0]

    print("Important files query: PASSED")


def test_find_function_query():
    result = _orchestrator().run_query("where is parse defined")
    assert result.intent == "find_function"
    assert result.functions == (B,)
    assert result.files == ("/ws/b.py",)
    assert result.metadata["functions"][0]["start_line"] == 1

    print("Find function query: PASSED")


# ─── Parser intents ───────────────────────────

def test_folder_target_is_not_a_file():
    for folder in ("src/", "ws/"):
        result = _orchestrator().run_query(f"dependencies of {folder}")
        assert result.intent == "DEPENDENCIES"
        assert result.files == ()
        assert result.metadata["error"] == f'File "{folder}" not found'

    print("Folder target: PASSED")


def test_usage_query():
    result = _orchestrator().run_query("who calls load")
    assert result.intent == "USAGE"
    assert result.functions == (A,)
    assert result.files == ("/ws/a.py",)
    assert result.metadata["callers"] == ["parse"]
    assert "parse" in result.context_preview

    missing = _orchestrator().run_query("who calls nothing_here")
    assert missing.metadata["error"] == 'Function "nothing_here" not found'
    assert missing.files == ()

    print("Usage query: PASSED")


def test_dependencies_query():
    result = _orchestrator().run_query("dependencies of c.py")
    assert result.intent == "DEPENDENCIES"
    assert result.files == ("/ws/c.py",)
    assert result.metadata["dependencies"] == ["/ws/b.py"]
    assert result.context_preview == "Dependencies of c.py:\n- b.py"

    missing = _orchestrator().run_query("dependencies of nope.py")
    assert missing.metadata["error"] == 'File "nope.py" not found'

    print("Dependencies query: PASSED")


def test_history_and_risks_without_findings():
    history = _orchestrator().run_query("history of a.py")
    assert history.intent == "HISTORY"
    assert history.files == ()
    assert "warning" in history.metadata

    risks = _orchestrator().run_query("risks in a.py")
    assert risks.intent == "RISKS"
    assert "warning" in risks.metadata

    print("History and risks without findings: PASSED")


def test_history_and_risks_from_findings():
    knowledge = KnowledgeBase()
    knowledge.store(HistoryFinding(files=[
        FileHistory("/ws/a.py", 4, ["ana", "ben"], datetime(2024, 5, 1, tzinfo=timezone.utc)),
        FileHistory("/ws/b.py", 1, ["ana"]),
    ]))
    knowledge.store(RiskFinding(risks=[
        RiskItem("/ws/a.py", 3, "SECURITY", "Potential hardcoded password", "HIGH"),
    ]))
    orchestrator = _orchestrator(knowledge=knowledge)

    history = orchestrator.run_query("history of a.py")
    assert history.files == ("/ws/a.py",)
    assert history.metadata["history"][0]["commits"] == 4
    assert "2024-05-01" in history.context_preview

    risks = orchestrator.run_query("risks in a.py")
    assert risks.files == ("/ws/a.py",)
    assert risks.metadata["count"] == 1
    assert risks.metadata["risks"][0]["severity"] == "HIGH"

    clean = orchestrator.run_query("risks in c.py")
    assert clean.files == ("/ws/c.py",)
    assert clean.metadata["count"] == 0

    print("History and risks from findings: PASSED")


def test_explain_query():
    result = _orchestrator().run_query("explain b.py")
    assert result.intent == "EXPLAIN"
    assert result.files == ("/ws/b.py",)
    assert result.functions == (B,)
    assert result.metadata["dependencies"] == ["/ws/a.py"]
    assert result.metadata["importers"] == ["/ws/c.py"]

    function = _orchestrator().run_query("describe parse")
    assert function.functions == (B,)
    assert function.metadata["callers"] == ["run"]
    assert function.metadata["callees"] == ["load"]

    print("Explain query: PASSED")


# ─── Enrichment ───────────────────────────────

def test_enrichment_only_changes_context_preview():
    question = "what breaks if I change load"
    plain = _orchestrator().run_query(question)
    enriched = _orchestrator(FakeExplainer("it ripples to run")).run_query(question)
    failed = _orchestrator(FakeExplainer(fail=True)).run_query(question)

    for result in (enriched, failed):
        assert result.intent == plain.intent
        assert result.files == plain.files
        assert result.functions == plain.functions
        assert dict(result.metadata) == dict(plain.metadata)

    assert enriched.context_preview == "it ripples to run"
    assert failed.context_preview == plain.context_preview

    print("Enrichment invariant: PASSED")


class MutatingExplainer(FakeExplainer):
    """Explainer that edits whatever it is handed."""

    def explain_result(self, question, intent, files, functions, metadata, context_preview=""):
        for value in metadata.values():
            if isinstance(value, list):
                value.clear()
        metadata["injected"] = True
        return "rewritten"


def test_explainer_cannot_change_metadata():
    question = "show the most called functions"
    plain = _orchestrator().run_query(question)
    enriched = _orchestrator(MutatingExplainer()).run_query(question)

    assert enriched.context_preview == "rewritten"
    assert len(enriched.metadata["functions"]) == 3
    assert "injected" not in enriched.metadata
    assert dict(enriched.metadata) == dict(plain.metadata)

    print("Explainer cannot change metadata: PASSED")


def test_parser_results_are_not_enriched():
    explainer = FakeExplainer()
    result = _orchestrator(explainer).run_query("who calls load")
    assert result.context_preview.startswith("Function load is called by")
    assert explainer.calls == []

    print("Parser results not enriched: PASSED")


def test_general_query():
    result = _orchestrator().run_query("tell me a joke")
    assert result.intent == "unknown"
    assert result.files == ()
    assert result.context_preview

    explainer = FakeExplainer()
    answered = _orchestrator(explainer).run_query("tell me a joke")
    assert answered.intent == "general_query"
    assert answered.files == ("/ws/a.py", "/ws/b.py", "/ws/c.py")
    # None of the /ws files exist on disk
    assert answered.context_preview == "answer from 0 files"

    failing = _orchestrator(FakeExplainer(fail=True)).run_query("tell me a joke")
    assert failing.intent == "general_query"
    assert failing.context_preview.startswith("Error:")

    print("General query: PASSED")


def test_general_query_caps_characters_read():
    with tempfile.TemporaryDirectory() as workspace:
        paths = []
        for name in ("one.py", "two.py"):
            path = os.path.join(workspace, name)
            with open(path, "w") as f:
                f.write("x = 1\n" * 10)
            paths.append(path)

        graph = KnowledgeGraph(MemoryStore())
        for path in paths:
            graph.add_node(Node(id=path, type=NodeType.FILE, data={"path": path}))

        config = AnalysisConfig(workspace_path=workspace, general_max_chars=80)
        orchestrator = QueryOrchestrator(graph, explainer=FakeExplainer(), config=config)
        project_files = orchestrator._read_project_files(paths)

        assert [label for label, _ in project_files] == ["one.py", "two.py"]
        assert project_files[0][1] == "x = 1\n" * 10
        assert project_files[1][1].endswith("... (truncated)")

    print("General query character cap: PASSED")


def test_result_is_immutable():
    result = QueryResult("blast_radius", files=["a"], metadata={"depth": 1})
    assert result.files == ("a",)
    try:
        result.metadata["depth"] = 2
    except TypeError:
        pass
    else:
        raise AssertionError("metadata should be read-only")
    assert result.to_dict()["contextPreview"] is None

    print("Immutable result: PASSED")


def run_tests():
    """Run all tests."""
    print("=" * 60)
    print("QUERY ORCHESTRATOR TESTS")
    print("=" * 60)

    print("\n--- Planner Intents ---")
    test_blast_radius_query()
    test_blast_radius_not_found()
    test_central_functions_query()
    test_important_files_query()
    test_find_function_query()

    print("\n--- Parser Intents ---")
    test_usage_query()
    test_dependencies_query()
    test_folder_target_is_not_a_file()
    test_history_and_risks_without_findings()
    test_history_and_risks_from_findings()
    test_explain_query()

    print("\n--- Enrichment ---")
    test_enrichment_only_changes_context_preview()
    test_explainer_cannot_change_metadata()
    test_parser_results_are_not_enriched()
    test_general_query()
    test_general_query_caps_characters_read()
    test_result_is_immutable()

    print("\nALL TESTS PASSED")


if __name__ == "__main__":
    run_tests()
