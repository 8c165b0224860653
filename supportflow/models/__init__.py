"""数据模型模块

组织结构：
- conversation: 会话模型 (ConversationTurn, SessionState)
- results: 阶段结果模型 (ClassificationResult, KnowledgeMatchResult, ...)
"""
from supportflow.models.conversation import ConversationTurn, SessionState
from supportflow.models.results import (
    Urgency,
    ClassificationResult,
    KnownIssueRecord,
    KnowledgeMatchResult,
    ResolutionOutcome,
)

__all__ = [
    "ConversationTurn",
    "SessionState",
    "Urgency",
    "ClassificationResult",
    "KnownIssueRecord",
    "KnowledgeMatchResult",
    "ResolutionOutcome",
]
