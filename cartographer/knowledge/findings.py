"""
Collaborator findings.

Each collaborator contributes exactly one finding per analysis run. The
set of findings is closed: one dataclass per collaborator, each carrying
its own concrete record types, so consumers never cast an untyped payload.
"""

import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional


class Collaborator(str, Enum):
    """Identity of each collaborator feeding the graph build."""
    ARCHAEOLOGIST = "archaeologist"
    DETECTIVE = "detective"
    RISK_ASSESSOR = "risk-assessor"
    HISTORIAN = "historian"
    TRANSLATOR = "translator"
    ARCHITECT = "architect"


def _now_ms() -> int:
    return int(time.time() * 1000)


# ─────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Dependency:
    """An import between two workspace files, already resolved."""
    from_file: str
    to_file: str
    type: str = "IMPORTS"


@dataclass(frozen=True)
class FunctionRecord:
    """
    One function-like unit extracted from a file.

    Attributes:
        id: Composite node id ("<file>::<name>::<start_line>")
        name: Bare function name
        file: Defining file path
        start_line: 1-based line of the definition
        calls: Unresolved callee names, as written at call sites
    """
    id: str
    name: str
    file: str
    start_line: int
    calls: List[str] = field(default_factory=list)

    def to_data(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "file": self.file,
            "start_line": self.start_line,
            "calls": list(self.calls),
        }


@dataclass(frozen=True)
class RiskItem:
    file: str
    line: int
    type: str          # SECURITY | TECH_DEBT | COMPLEXITY
    message: str
    severity: str      # LOW | MEDIUM | HIGH


@dataclass(frozen=True)
class FileHistory:
    file: str
    commits: int
    authors: List[str]
    last_modified: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "commits": self.commits,
            "authors": list(self.authors),
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
        }


@dataclass(frozen=True)
class FileDocumentation:
    file: str
    summary: str
    complexity_score: float


@dataclass(frozen=True)
class ArchitectureInsight:
    type: str          # CYCLE | LAYERING | STRUCTURE
    message: str
    details: List[str]
    severity: str      # MEDIUM | HIGH


# ─────────────────────────────────────────────
# Findings (one variant per collaborator)
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class AgentFinding:
    """Base of all findings. `source` identifies the variant."""
    source: ClassVar[Collaborator]
    timestamp: int = field(default_factory=_now_ms)

    def payload(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("timestamp", None)
        return data

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source.value,
            "timestamp": self.timestamp,
            "data": _jsonable(self.payload()),
        }


@dataclass(frozen=True)
class WorkspaceFinding(AgentFinding):
    source: ClassVar[Collaborator] = Collaborator.ARCHAEOLOGIST
    files: List[str] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)
    languages: Dict[str, int] = field(default_factory=dict)
    entry_points: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExtractionFinding(AgentFinding):
    source: ClassVar[Collaborator] = Collaborator.DETECTIVE
    dependencies: List[Dependency] = field(default_factory=list)
    functions: List[FunctionRecord] = field(default_factory=list)


@dataclass(frozen=True)
class RiskFinding(AgentFinding):
    source: ClassVar[Collaborator] = Collaborator.RISK_ASSESSOR
    risks: List[RiskItem] = field(default_factory=list)


@dataclass(frozen=True)
class HistoryFinding(AgentFinding):
    source: ClassVar[Collaborator] = Collaborator.HISTORIAN
    files: List[FileHistory] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentationFinding(AgentFinding):
    source: ClassVar[Collaborator] = Collaborator.TRANSLATOR
    docs: List[FileDocumentation] = field(default_factory=list)


@dataclass(frozen=True)
class ArchitectureFinding(AgentFinding):
    source: ClassVar[Collaborator] = Collaborator.ARCHITECT
    insights: List[ArchitectureInsight] = field(default_factory=list)


FINDING_TYPES = {
    cls.source: cls for cls in (
        WorkspaceFinding,
        ExtractionFinding,
        RiskFinding,
        HistoryFinding,
        DocumentationFinding,
        ArchitectureFinding,
    )
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
