"""
Archaeologist: maps the terrain.

Walks the workspace and records every source file, the folders holding
them, a per-language file count and likely entry points.
"""

import asyncio
import fnmatch
import os
from typing import Dict, List

from ..knowledge import Collaborator, WorkspaceFinding
from .base import Agent

LANGUAGES = {
    ".py": "Python",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".java": "Java",
    ".cpp": "C++",
    ".c": "C",
    ".go": "Go",
    ".rs": "Rust",
    ".rb": "Ruby",
    ".php": "PHP",
}

ENTRY_POINTS = {
    "main.py", "app.py", "server.py", "__main__.py",
    "index.js", "index.ts", "app.js", "app.ts",
    "server.js", "server.ts", "main.js", "main.ts",
}


class ArchaeologistAgent(Agent):
    collaborator = Collaborator.ARCHAEOLOGIST
    priority = 1

    async def explore(self, workspace_path: str) -> None:
        self.log("Starting exploration...")
        root = os.path.abspath(workspace_path)

        files: List[str] = []
        folders: List[str] = []
        languages: Dict[str, int] = {}
        entry_points: List[str] = []

        for file_path in self.scan(root):
            files.append(file_path)

            folder = os.path.dirname(file_path)
            if folder != root and folder not in folders:
                folders.append(folder)

            language = LANGUAGES.get(os.path.splitext(file_path)[1].lower())
            if language:
                languages[language] = languages.get(language, 0) + 1

            if os.path.basename(file_path) in ENTRY_POINTS:
                entry_points.append(file_path)

            if len(files) % self.config.scan_batch_size == 0:
                await asyncio.sleep(0)

        self.knowledge.store(WorkspaceFinding(
            files=files,
            folders=folders,
            languages=languages,
            entry_points=entry_points,
        ))
        self.log(f"Exploration complete. Found {len(files)} files in {len(folders)} folders.")

    def scan(self, root: str) -> List[str]:
        """Source files under root, sorted per directory, ignores applied."""
        found = []
        for current, dirs, names in os.walk(root):
            relative_dir = os.path.relpath(current, root).replace("\\", "/")
            relative_dir = "" if relative_dir == "." else relative_dir + "/"

            dirs[:] = sorted(
                d for d in dirs
                if not d.startswith(".") and not self._ignored(f"{relative_dir}{d}/")
            )

            for name in sorted(names):
                if os.path.splitext(name)[1].lower() not in LANGUAGES:
                    continue
                if self._ignored(relative_dir + name):
                    continue
                found.append(os.path.join(current, name))
        return found

    def _ignored(self, relative_path: str) -> bool:
        # Anchor at "/" so "**/x/**" also matches x at the workspace root
        anchored = "/" + relative_path
        return any(
            fnmatch.fnmatch(anchored, pattern)
            for pattern in self.config.ignore_patterns
        )
