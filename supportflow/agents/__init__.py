"""推理协作接口

每个阶段对应一个 Agent，把对话交给推理服务并解析为结构化结果：
- TriageAgent: ClassificationResult
- KnowledgeMatchAgent: KnowledgeMatchResult
- ResolutionAgent: ResolutionReply（自由文本或 JSON）
"""

from supportflow.agents.triage import TriageAgent
from supportflow.agents.knowledge_match import KnowledgeMatchAgent
from supportflow.agents.resolution import ResolutionAgent, ResolutionReply

__all__ = [
    "TriageAgent",
    "KnowledgeMatchAgent",
    "ResolutionAgent",
    "ResolutionReply",
]
