from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import dataclasses
import os
from typing import Optional

from cartographer.ai.explainer import Explainer, create_explainer
from cartographer.builder import WorkspaceNotFoundError, build_analysis_context
from cartographer.config import AnalysisConfig
from cartographer.context import AnalysisContext, ContextRegistry
from cartographer.knowledge import ArchitectureFinding, HistoryFinding, RiskFinding, WorkspaceFinding
from cartographer.snapshot import build_snapshot, list_snapshots, load_snapshot, save_snapshot

app = FastAPI(
    title="Cartographer",
    description="Structural knowledge graph of a codebase with natural-language queries",
    version="1.0.0"
)

# Enable CORS (so an editor extension or dashboard can talk to this)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- STATE ---
# One analysed workspace at a time; rebuilds swap the whole context
registry = ContextRegistry()
state = {
    "config": None,      # AnalysisConfig
    "explainer": None,   # Explainer shared across rebuilds
}
startup_error: Optional[str] = None


def _config() -> AnalysisConfig:
    if state["config"] is None:
        state["config"] = AnalysisConfig.from_env()
    return state["config"]


def _explainer() -> Explainer:
    if state["explainer"] is None:
        state["explainer"] = create_explainer(disable_ai=_config().disable_ai)
    return state["explainer"]


def _require_context() -> AnalysisContext:
    context = registry.current()
    if context is None:
        raise HTTPException(
            status_code=503,
            detail=startup_error or "Workspace has not been analysed yet"
        )
    return context


async def _rebuild(workspace_path: str) -> AnalysisContext:
    # The configured workspace only changes once a build succeeds
    config = dataclasses.replace(_config(), workspace_path=os.path.abspath(workspace_path))
    context = await build_analysis_context(config.workspace_path, explainer=_explainer(), config=config)
    state["config"] = config
    registry.swap(context)
    return context


@app.on_event("startup")
async def load_workspace():
    """Analyse WORKSPACE_PATH on startup."""
    global startup_error
    config = _config()
    try:
        context = await _rebuild(config.workspace_path)
        startup_error = None
        print(f"[Startup] Loaded graph: {context.graph.get_node_count()} nodes, "
              f"{context.graph.get_edge_count()} edges")
    except WorkspaceNotFoundError as e:
        startup_error = str(e)
        print(f"[Startup] {e}")
    except Exception as e:
        import traceback
        traceback.print_exc()
        startup_error = str(e)
        print(f"[Startup] Error building graph: {e}")


# --- CORE ENDPOINTS ---

@app.get("/")
def health_check():
    context = registry.current()
    return {
        "status": "active" if context else "degraded",
        "system": "Cartographer",
        "workspace": context.workspace_path if context else _config().workspace_path,
        "built_at": context.built_at if context else None,
        "ai_enabled": _explainer().available,
        "startup_error": startup_error,
    }


class QueryRequest(BaseModel):
    question: str


@app.post("/query")
def run_query(request: QueryRequest):
    """Answer a free-text question about the workspace."""
    context = _require_context()
    if not request.question.strip():
        raise HTTPException(status_code=400, detail="Question must not be empty")
    return context.orchestrator.run_query(request.question).to_dict()


@app.get("/graph")
def get_graph():
    """Nodes and links for visualization"""
    context = _require_context()
    return build_snapshot(context.graph, context.knowledge)


@app.get("/graph/stats")
def get_graph_stats():
    return _require_context().queries.graph_statistics()


@app.post("/graph/snapshot")
def create_snapshot():
    """Write the current graph to the snapshot directory."""
    context = _require_context()
    path = save_snapshot(context.graph, context.config.resolved_snapshot_dir, context.knowledge)
    return {"status": "saved", "filename": os.path.basename(path), "path": path}


@app.get("/graph/snapshots")
def get_snapshots():
    context = _require_context()
    return {"snapshots": list_snapshots(context.config.resolved_snapshot_dir)}


@app.get("/graph/snapshots/{filename}")
def get_snapshot(filename: str):
    context = _require_context()
    payload = load_snapshot(context.config.resolved_snapshot_dir, filename)
    if payload is None:
        raise HTTPException(status_code=404, detail=f"Snapshot '{filename}' not found")
    return payload


@app.get("/blast-radius/{function_name}")
def get_blast_radius(function_name: str):
    """Functions and files that depend on a function, by name (first match)."""
    context = _require_context()
    matches = context.queries.find_function_by_name(function_name)
    if not matches:
        raise HTTPException(status_code=404, detail=f"Function '{function_name}' not found")

    blast = context.queries.function_blast_radius(matches[0].id)
    result = blast.to_dict()
    result["matches"] = [node.id for node in matches]
    return result


@app.get("/insights")
def get_insights():
    """Summary of what the collaborators found."""
    context = _require_context()
    knowledge = context.knowledge

    workspace = knowledge.get(WorkspaceFinding)
    risks = knowledge.get(RiskFinding)
    history = knowledge.get(HistoryFinding)
    architecture = knowledge.get(ArchitectureFinding)

    risk_counts = {}
    if risks is not None:
        for risk in risks.risks:
            risk_counts[risk.severity] = risk_counts.get(risk.severity, 0) + 1

    hotspots = []
    if history is not None:
        hotspots = [
            h.to_dict() for h in sorted(history.files, key=lambda h: h.commits, reverse=True)[:5]
        ]

    return {
        "collaborators": sorted(knowledge.get_all()),
        "languages": workspace.languages if workspace else {},
        "entry_points": workspace.entry_points if workspace else [],
        "risk_counts": risk_counts,
        "hotspots": hotspots,
        "architecture": [
            {"type": i.type, "message": i.message, "details": i.details, "severity": i.severity}
            for i in architecture.insights
        ] if architecture else [],
        "central_functions": [c.to_dict() for c in context.queries.function_centrality()[:10]],
        "important_files": [f.to_dict() for f in context.queries.file_importance()[:10]],
    }


class RebuildRequest(BaseModel):
    workspace_path: Optional[str] = None


@app.post("/rebuild")
async def rebuild(request: Optional[RebuildRequest] = None):
    """Re-analyse the workspace (or another one) and swap in the new graph."""
    global startup_error
    workspace_path = (request.workspace_path if request else None) or _config().workspace_path
    try:
        context = await _rebuild(workspace_path)
    except WorkspaceNotFoundError as e:
        raise HTTPException(status_code=503, detail=str(e))

    startup_error = None
    return {
        "status": "rebuilt",
        "workspace": context.workspace_path,
        "nodes": context.graph.get_node_count(),
        "edges": context.graph.get_edge_count(),
    }
