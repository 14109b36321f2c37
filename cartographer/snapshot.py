"""
Graph snapshots.

A snapshot is the graph as a node/link payload (files and functions, with
IMPORTS and CALLS links) decorated with per-file risk and per-function
call centrality, written to `snapshot-<timestamp>.json`.
"""

import json
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .graph import EdgeType, KnowledgeGraph, NodeType
from .knowledge import KnowledgeBase, RiskFinding, RiskItem

SNAPSHOT_PREFIX = "snapshot-"

_SNAPSHOT_NAME = re.compile(r"^snapshot-[\w\-]+\.json$")
_SEVERITY_RANK = {"LOW": 0, "MEDIUM": 1, "HIGH": 2}


def build_snapshot(graph: KnowledgeGraph, knowledge: Optional[KnowledgeBase] = None) -> Dict[str, List[Dict]]:
    """
    Build the {nodes, links} payload.

    Nodes that end up with no link at all are marked isolated and get
    risk "ISOLATED".
    """
    risk_by_file = _worst_risk_per_file(knowledge)
    nodes: List[Dict[str, Any]] = []
    links: List[Dict[str, str]] = []

    file_nodes = graph.get_nodes_by_type(NodeType.FILE)
    function_nodes = graph.get_nodes_by_type(NodeType.FUNCTION)

    for node in file_nodes:
        file_path = node.data.get("path") or node.id
        risk = risk_by_file.get(file_path)
        nodes.append({
            "id": node.id,
            "label": os.path.basename(file_path),
            "type": NodeType.FILE.value,
            "risk": risk.severity if risk else "LOW",
            "riskMessage": risk.message if risk else None,
            "riskType": risk.type if risk else None,
            "centrality": 0,
            "filePath": file_path,
            "isolated": False,
        })

    for node in function_nodes:
        calls_in = sum(1 for e in graph.get_incoming_edges(node.id) if e.type == EdgeType.CALLS)
        calls_out = sum(1 for e in graph.get_outgoing_edges(node.id) if e.type == EdgeType.CALLS)
        centrality = calls_in + calls_out
        nodes.append({
            "id": node.id,
            "label": node.data.get("name") or node.id,
            "type": NodeType.FUNCTION.value,
            "risk": "LOW",
            "centrality": centrality,
            "filePath": node.data.get("file"),
            "isolated": centrality == 0,
        })

    for node in file_nodes + function_nodes:
        for edge in graph.get_outgoing_edges(node.id):
            if edge.type in (EdgeType.CALLS, EdgeType.IMPORTS):
                links.append({"source": edge.source, "target": edge.target, "type": edge.type.value})

    connected = set()
    for link in links:
        connected.add(link["source"])
        connected.add(link["target"])
    for entry in nodes:
        if entry["id"] not in connected:
            entry["isolated"] = True
            entry["risk"] = "ISOLATED"

    return {"nodes": nodes, "links": links}


def save_snapshot(
    graph: KnowledgeGraph,
    directory: str,
    knowledge: Optional[KnowledgeBase] = None,
) -> str:
    """Write a snapshot into `directory` (created if needed); returns the file path."""
    os.makedirs(directory, exist_ok=True)
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    timestamp = re.sub(r"[:.+]", "-", timestamp)
    path = os.path.join(directory, f"{SNAPSHOT_PREFIX}{timestamp}.json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(build_snapshot(graph, knowledge), f, indent=2)

    print(f"[Snapshot] Saved {path}")
    return path


def list_snapshots(directory: str) -> List[str]:
    """Snapshot file names, newest first."""
    if not os.path.isdir(directory):
        return []
    names = [name for name in os.listdir(directory) if _SNAPSHOT_NAME.match(name)]
    return sorted(names, reverse=True)


def load_snapshot(directory: str, name: str) -> Optional[Dict]:
    """Read a saved snapshot by file name; None if absent or not a snapshot name."""
    if not _SNAPSHOT_NAME.match(name):
        return None
    path = os.path.join(directory, name)
    if not os.path.isfile(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _worst_risk_per_file(knowledge: Optional[KnowledgeBase]) -> Dict[str, RiskItem]:
    if knowledge is None:
        return {}
    finding = knowledge.get(RiskFinding)
    if finding is None:
        return {}

    worst: Dict[str, RiskItem] = {}
    for risk in finding.risks:
        current = worst.get(risk.file)
        if current is None or _SEVERITY_RANK.get(risk.severity, 0) > _SEVERITY_RANK.get(current.severity, 0):
            worst[risk.file] = risk
    return worst
