"""
Translator: plain-language summaries of the most-changed files.
"""

import asyncio
from typing import List, Optional

from ..ai.explainer import Explainer, NullExplainer
from ..config import AnalysisConfig
from ..knowledge import (
    Collaborator,
    DocumentationFinding,
    FileDocumentation,
    HistoryFinding,
    KnowledgeBase,
)
from .base import Agent, read_text


class TranslatorAgent(Agent):
    collaborator = Collaborator.TRANSLATOR
    priority = 5

    def __init__(
        self,
        knowledge: KnowledgeBase,
        config: Optional[AnalysisConfig] = None,
        explainer: Optional[Explainer] = None,
    ):
        super().__init__(knowledge, config)
        self.explainer = explainer or NullExplainer()

    async def explore(self, workspace_path: str) -> None:
        self.log("Starting documentation analysis...")

        if not self.explainer.available:
            self.log("No explainer available. Skipping documentation.")
            return

        history = self.knowledge.get(HistoryFinding)
        if history is None:
            self.log("No history found. Skipping.")
            return

        hotspots = sorted(history.files, key=lambda h: h.commits, reverse=True)
        docs: List[FileDocumentation] = []

        for hotspot in hotspots[:self.config.hotspot_count]:
            content = read_text(hotspot.file)
            if content is None:
                self.log(f"Skipping unreadable hotspot: {hotspot.file}")
                continue
            if len(content) > self.config.max_document_chars:
                continue

            summary = await asyncio.to_thread(self.explainer.summarize_file, hotspot.file, content)
            if summary:
                docs.append(FileDocumentation(
                    file=hotspot.file,
                    summary=summary,
                    complexity_score=len(content) / 100,
                ))

        self.knowledge.store(DocumentationFinding(docs=docs))
        self.log(f"Documentation generated for {len(docs)} files.")
