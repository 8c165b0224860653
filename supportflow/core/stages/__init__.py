"""工作流阶段"""

from supportflow.core.stages.base import (
    Stage,
    StageContext,
    TRIAGE,
    KNOWLEDGE_MATCH,
    RESOLUTION,
    ESCALATION,
)
from supportflow.core.stages.triage import TriageStage
from supportflow.core.stages.knowledge_match import KnowledgeMatchStage, extract_keywords, route_match
from supportflow.core.stages.resolution import ResolutionStage
from supportflow.core.stages.escalation import EscalationStage, select_specialist_resolution

__all__ = [
    "Stage",
    "StageContext",
    "TRIAGE",
    "KNOWLEDGE_MATCH",
    "RESOLUTION",
    "ESCALATION",
    "TriageStage",
    "KnowledgeMatchStage",
    "ResolutionStage",
    "EscalationStage",
    "extract_keywords",
    "route_match",
    "select_specialist_resolution",
]
