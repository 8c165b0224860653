"""阶段结果模型

各阶段产出的结构化结果。字段别名对应推理服务和知识库的 JSON 字段名。
"""
from datetime import timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Urgency(str, Enum):
    """紧急程度"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# 推理服务可能返回葡萄牙语标签
_URGENCY_ALIASES = {
    "crítica": Urgency.CRITICAL,
    "critica": Urgency.CRITICAL,
    "alta": Urgency.HIGH,
    "média": Urgency.MEDIUM,
    "media": Urgency.MEDIUM,
    "baixa": Urgency.LOW,
}


class ClassificationResult(BaseModel):
    """Triage 结果"""

    model_config = ConfigDict(populate_by_name=True)

    understood: bool = Field(default=False, alias="is_understood")
    question_for_user: str = ""
    summary: str = ""
    urgency: Optional[Urgency] = None

    @field_validator("urgency", mode="before")
    @classmethod
    def _normalize_urgency(cls, value):
        if value is None or isinstance(value, Urgency):
            return value
        label = str(value).strip().lower()
        if not label:
            return None
        if label in _URGENCY_ALIASES:
            return _URGENCY_ALIASES[label]
        try:
            return Urgency(label)
        except ValueError:
            return None


class KnownIssueRecord(BaseModel):
    """知识库条目（只读）"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    problem: str = Field(default="", alias="problema")
    symptoms: List[str] = Field(default_factory=list, alias="sintomas")
    keywords: List[str] = Field(default_factory=list)
    solution: Optional[str] = Field(default="", alias="solucao")
    action_required: bool = Field(default=False, alias="requer_acao")
    action_id: Optional[str] = Field(default="", alias="acao_mcp")
    success_rate: float = Field(default=0.0, alias="taxa_sucesso")
    resolution_time: Optional[timedelta] = Field(default=None, alias="prazo_resolucao")
    tools_required: List[str] = Field(default_factory=list)

    def matches(self, candidates: List[str]) -> bool:
        """关键词是否与候选词相交（大小写不敏感）"""
        wanted = {c.lower() for c in candidates}
        return any(kw.lower() in wanted for kw in self.keywords)


class KnowledgeMatchResult(BaseModel):
    """KnowledgeMatch 结果"""

    model_config = ConfigDict(populate_by_name=True)

    known: bool = Field(default=False, alias="is_known")
    complex: bool = Field(default=False, alias="is_complex")
    message: str = Field(default="", alias="message_for_user")
    matched_issue: Optional[KnownIssueRecord] = None
    required_tools: List[str] = Field(default_factory=list)
    success_rate: float = 0.0

    @field_validator("message", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @field_validator("matched_issue", mode="before")
    @classmethod
    def _drop_unstructured_issue(cls, value):
        # 扩展字段只接受对象，推理服务偶尔会返回一段文本
        if value is None or isinstance(value, (dict, KnownIssueRecord)):
            return value
        return None

    @field_validator("required_tools", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return value or []

    @field_validator("success_rate", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return value or 0.0


class ResolutionOutcome(BaseModel):
    """最终处理结果（每条路径产出一次）"""

    model_config = ConfigDict(populate_by_name=True)

    resolved: bool = Field(default=False, alias="is_resolved")
    requires_human: bool = False
    message: str = Field(default="", alias="message_for_user")
    actions_executed: List[str] = Field(default_factory=list)
    escalation_reason: Optional[str] = None
