"""supportflow - 客服支持会话工作流

固定阶段的客服对话引擎：
    Triage → KnowledgeMatch → Resolution | Escalation
"""

__version__ = "0.1.0"
