"""
Agents module - Collaborators that explore a workspace.

Run order (by priority): archaeologist, detective, risk-assessor,
historian, translator, architect.
"""

from typing import Optional

from ..ai.explainer import Explainer
from ..config import AnalysisConfig
from ..knowledge import KnowledgeBase
from .base import Agent, AgentCoordinator
from .archaeologist import ArchaeologistAgent
from .detective import DetectiveAgent
from .risk_assessor import RiskAssessorAgent
from .historian import HistorianAgent
from .translator import TranslatorAgent
from .architect import ArchitectAgent


def create_coordinator(
    knowledge: KnowledgeBase,
    config: Optional[AnalysisConfig] = None,
    explainer: Optional[Explainer] = None,
) -> AgentCoordinator:
    """Coordinator with every collaborator registered."""
    coordinator = AgentCoordinator(knowledge)
    coordinator.register_agent(ArchaeologistAgent(knowledge, config))
    coordinator.register_agent(DetectiveAgent(knowledge, config))
    coordinator.register_agent(RiskAssessorAgent(knowledge, config))
    coordinator.register_agent(HistorianAgent(knowledge, config))
    coordinator.register_agent(TranslatorAgent(knowledge, config, explainer))
    coordinator.register_agent(ArchitectAgent(knowledge, config))
    return coordinator


__all__ = [
    "Agent",
    "AgentCoordinator",
    "ArchaeologistAgent",
    "DetectiveAgent",
    "RiskAssessorAgent",
    "HistorianAgent",
    "TranslatorAgent",
    "ArchitectAgent",
    "create_coordinator",
]
