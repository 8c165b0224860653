"""阶段抽象基类与阶段上下文"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from supportflow.core.events import WorkflowEvent, WorkflowEventType
from supportflow.core.outcomes import StageOutcome
from supportflow.core.session import SessionContext


# 阶段名称
TRIAGE = "triage"
KNOWLEDGE_MATCH = "knowledge_match"
RESOLUTION = "resolution"
ESCALATION = "escalation"

Publisher = Callable[[WorkflowEvent], Awaitable[None]]
InputRequester = Callable[[str, str], Awaitable[str]]


class StageContext:
    """阶段运行上下文

    阶段通过它读写会话状态、推送结果与消息、向用户提问。
    """

    def __init__(
        self,
        stage: str,
        session: SessionContext,
        publish: Publisher,
        request_input: InputRequester,
    ):
        """
        Args:
            stage: 当前阶段名称
            session: 会话上下文
            publish: 事件推送函数
            request_input: 输入请求函数 (stage, prompt) -> reply
        """
        self.stage = stage
        self.session = session
        self._publish = publish
        self._request_input = request_input

    async def emit(self, result: BaseModel) -> None:
        """推送阶段的结构化结果"""
        await self._publish(WorkflowEvent(
            type=WorkflowEventType.OUTPUT,
            stage=self.stage,
            result_type=type(result).__name__,
            data=result.model_dump(mode="json"),
        ))

    async def say(self, speaker: str, text: str) -> None:
        """推送一条给用户看的消息"""
        await self._publish(WorkflowEvent(
            type=WorkflowEventType.MESSAGE,
            stage=self.stage,
            speaker=speaker,
            content=text,
        ))

    async def ask(self, prompt: str) -> str:
        """向用户提问并挂起，直到收到非空回复"""
        return await self._request_input(self.stage, prompt)


class Stage(ABC):
    """阶段抽象基类

    阶段只负责自身的工作，并通过返回的 StageOutcome 声明下一步。
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """阶段名称，对应路由表中的节点"""
        pass

    @abstractmethod
    async def run(self, input: Any, ctx: StageContext) -> StageOutcome:
        """执行阶段

        Args:
            input: 上一阶段的结果
            ctx: 阶段上下文

        Returns:
            阶段结果
        """
        pass
