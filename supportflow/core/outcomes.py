"""阶段结果（标签联合）

每个阶段返回以下四种之一，由图的路由表决定下一个阶段：
- Continue: 无条件进入下一阶段
- Resolve: 交给自动处理
- Escalate: 转人工
- Finish: 终止，携带最终的 ResolutionOutcome
"""

from enum import Enum
from typing import ClassVar, Union

from pydantic import BaseModel

from supportflow.models import ClassificationResult, KnowledgeMatchResult, ResolutionOutcome


class OutcomeKind(str, Enum):
    """结果标签"""
    CONTINUE = "continue"
    RESOLVE = "resolve"
    ESCALATE = "escalate"
    FINISH = "finish"


class Continue(BaseModel):
    kind: ClassVar[OutcomeKind] = OutcomeKind.CONTINUE
    payload: ClassificationResult


class Resolve(BaseModel):
    kind: ClassVar[OutcomeKind] = OutcomeKind.RESOLVE
    payload: KnowledgeMatchResult


class Escalate(BaseModel):
    kind: ClassVar[OutcomeKind] = OutcomeKind.ESCALATE
    payload: KnowledgeMatchResult


class Finish(BaseModel):
    kind: ClassVar[OutcomeKind] = OutcomeKind.FINISH
    payload: ResolutionOutcome


StageOutcome = Union[Continue, Resolve, Escalate, Finish]
