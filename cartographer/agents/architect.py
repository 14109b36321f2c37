"""
Architect: structural insights synthesised from earlier findings.
"""

from typing import List

from ..graph.queries import find_cycles
from ..knowledge import (
    ArchitectureFinding,
    ArchitectureInsight,
    Collaborator,
    ExtractionFinding,
    WorkspaceFinding,
)
from .base import Agent

MONOLITH_MIN_FILES = 50
MONOLITH_MAX_FOLDERS = 3


class ArchitectAgent(Agent):
    collaborator = Collaborator.ARCHITECT
    priority = 6

    async def explore(self, workspace_path: str) -> None:
        self.log("Starting architectural analysis...")
        insights: List[ArchitectureInsight] = []

        extraction = self.knowledge.get(ExtractionFinding)
        if extraction is not None:
            cycles = find_cycles((d.from_file, d.to_file) for d in extraction.dependencies)
            if cycles:
                insights.append(ArchitectureInsight(
                    type="CYCLE",
                    message=f"Found {len(cycles)} circular dependencies",
                    details=[" -> ".join(cycle) for cycle in cycles],
                    severity="HIGH",
                ))
        else:
            self.log("No dependency finding. Skipping cycle check.")

        workspace = self.knowledge.get(WorkspaceFinding)
        if workspace is not None:
            if len(workspace.files) > MONOLITH_MIN_FILES and len(workspace.folders) < MONOLITH_MAX_FOLDERS:
                insights.append(ArchitectureInsight(
                    type="STRUCTURE",
                    message="Potential monolithic structure detected",
                    details=["Low folder count relative to file count. Consider grouping by feature."],
                    severity="MEDIUM",
                ))

        self.knowledge.store(ArchitectureFinding(insights=insights))
        self.log(f"Architecture analysis complete. Found {len(insights)} insights.")
