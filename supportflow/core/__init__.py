"""工作流核心：会话、交互通道、阶段、路由图与驱动"""

from supportflow.core.events import WorkflowEvent, WorkflowEventType
from supportflow.core.outcomes import Continue, Escalate, Finish, OutcomeKind, Resolve
from supportflow.core.policy import IterationPolicy
from supportflow.core.session import SessionContext, SessionStateStore

__all__ = [
    "WorkflowEvent",
    "WorkflowEventType",
    "Continue",
    "Escalate",
    "Finish",
    "OutcomeKind",
    "Resolve",
    "IterationPolicy",
    "SessionContext",
    "SessionStateStore",
]
