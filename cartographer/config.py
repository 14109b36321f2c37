"""
Runtime configuration.

Values come from environment variables (a .env file is loaded first).

    WORKSPACE_PATH            workspace analysed by the API (default: cwd)
    GRAPH_STORE_BACKEND       "networkx" (default) or "memory"
    LLM_PROVIDER              "gemini" (default) or "bedrock"
    CARTOGRAPHER_DISABLE_AI   "1"/"true"/"yes" turns the explainer off
    SNAPSHOT_DIR              where graph snapshots are written
    SCAN_BATCH_SIZE           files read per batch before yielding
    HISTORY_MAX_COMMITS       commits walked by the historian
    HISTORY_TIMEOUT_SECONDS   historian is abandoned after this long
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

import dotenv

dotenv.load_dotenv()


DEFAULT_IGNORE_PATTERNS = [
    "**/node_modules/**",
    "**/__pycache__/**",
    "**/venv/**",
    "**/.venv/**",
    "**/dist/**",
    "**/build/**",
    "**/*.min.js",
]


@dataclass
class AnalysisConfig:
    """
    Configuration for one analysis run.

    All limits and thresholds are configurable for tuning.
    """
    workspace_path: str = field(default_factory=os.getcwd)
    graph_backend: str = "networkx"
    disable_ai: bool = False
    snapshot_dir: Optional[str] = None

    # Build pass
    scan_batch_size: int = 50
    ignore_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))

    # Historian
    history_max_commits: int = 1000
    history_timeout_seconds: float = 60.0

    # Risk assessor
    max_file_lines: int = 500

    # Translator
    hotspot_count: int = 3
    max_document_chars: int = 10000

    # Query orchestrator
    top_central_functions: int = 20
    top_important_files: int = 10
    preview_files: int = 5
    preview_lines: int = 20
    general_max_files: int = 20
    general_max_chars: int = 50000

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        """Build a configuration from environment variables."""
        config = cls()
        config.workspace_path = os.path.abspath(os.getenv("WORKSPACE_PATH", os.getcwd()))
        config.graph_backend = os.getenv("GRAPH_STORE_BACKEND", "networkx").lower()
        config.disable_ai = _env_flag("CARTOGRAPHER_DISABLE_AI")
        config.snapshot_dir = os.getenv("SNAPSHOT_DIR") or None
        config.scan_batch_size = _env_int("SCAN_BATCH_SIZE", config.scan_batch_size)
        config.history_max_commits = _env_int("HISTORY_MAX_COMMITS", config.history_max_commits)
        config.history_timeout_seconds = float(
            os.getenv("HISTORY_TIMEOUT_SECONDS", config.history_timeout_seconds)
        )
        return config

    @property
    def resolved_snapshot_dir(self) -> str:
        return self.snapshot_dir or os.path.join(self.workspace_path, ".cartographer", "snapshots")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return max(1, int(value))
    except ValueError:
        print(f"[Config] Ignoring invalid {name}={value!r}, using {default}")
        return default
