"""路由图

由表驱动的解释器：阶段返回标签化结果，路由表决定下一阶段。

    triage --Continue--> knowledge_match --Resolve--> resolution --Finish--> END
                                         --Escalate-> escalation --Finish--> END

WorkflowRun 在一个后台任务中依次执行各阶段，通过队列推送 WorkflowEvent；
需要用户输入时推送 input_request 并挂起，直到 send_response 回填。
"""

import asyncio
import logging
import uuid
from typing import AsyncIterator, Dict, Iterable, Optional, Tuple

from supportflow.agents import KnowledgeMatchAgent, ResolutionAgent, TriageAgent
from supportflow.core.events import WorkflowEvent, WorkflowEventType
from supportflow.core.outcomes import OutcomeKind, StageOutcome
from supportflow.core.policy import IterationPolicy
from supportflow.core.session import SessionContext
from supportflow.core.stages import (
    ESCALATION,
    KNOWLEDGE_MATCH,
    RESOLUTION,
    TRIAGE,
    EscalationStage,
    KnowledgeMatchStage,
    ResolutionStage,
    Stage,
    StageContext,
    TriageStage,
)
from supportflow.dao.known_issue_dao import KnownIssueDAO
from supportflow.exceptions import RoutingError, SupportFlowError
from supportflow.models import ResolutionOutcome
from supportflow.services.llm_service import LLMService
from supportflow.tools import SendEmailTool, ToolRegistry, UnlockAccountTool
from supportflow.utils.config import Config


logger = logging.getLogger(__name__)

DEFAULT_GREETING = "Como posso ajudar?"

# (阶段, 结果标签) -> 下一阶段；Finish 不在表中，表示结束
ROUTES: Dict[Tuple[str, OutcomeKind], str] = {
    (TRIAGE, OutcomeKind.CONTINUE): KNOWLEDGE_MATCH,
    (KNOWLEDGE_MATCH, OutcomeKind.RESOLVE): RESOLUTION,
    (KNOWLEDGE_MATCH, OutcomeKind.ESCALATE): ESCALATION,
}
TERMINAL_STAGES = frozenset({RESOLUTION, ESCALATION})


class SupportGraph:
    """支持工作流图"""

    def __init__(
        self,
        stages: Iterable[Stage],
        entry: str = TRIAGE,
        greeting: str = DEFAULT_GREETING,
        routes: Optional[Dict[Tuple[str, OutcomeKind], str]] = None,
    ):
        """初始化

        Args:
            stages: 阶段实例
            entry: 入口阶段
            greeting: 会话开始时的问候语
            routes: 路由表，默认 ROUTES

        Raises:
            RoutingError: 入口或路由目标不是已注册的阶段
        """
        self.stages: Dict[str, Stage] = {stage.name: stage for stage in stages}
        self.entry = entry
        self.greeting = greeting
        self.routes = dict(ROUTES if routes is None else routes)

        if entry not in self.stages:
            raise RoutingError(f"入口阶段未注册: {entry}")
        for (source, kind), target in self.routes.items():
            if source not in self.stages or target not in self.stages:
                raise RoutingError(
                    f"路由引用了未注册的阶段: {source} --{kind.value}--> {target}",
                )

    def next_stage(self, stage: str, outcome: StageOutcome) -> Optional[str]:
        """根据结果标签查找下一阶段

        Returns:
            下一阶段名称，Finish 返回 None

        Raises:
            RoutingError: 路由表中没有该 (阶段, 标签) 组合
        """
        if outcome.kind == OutcomeKind.FINISH:
            return None
        target = self.routes.get((stage, outcome.kind))
        if target is None:
            raise RoutingError(
                f"阶段 {stage} 没有 {outcome.kind.value} 出边",
                details={"stage": stage, "outcome": outcome.kind.value},
            )
        return target

    def start(self, initial_prompt: Optional[str] = None, session: Optional[SessionContext] = None) -> "WorkflowRun":
        """创建一次运行（首次消费事件流时启动）"""
        return WorkflowRun(self, initial_prompt or self.greeting, session or SessionContext())


class WorkflowRun:
    """一次工作流运行

    Attributes:
        session: 会话上下文
        outcome: 终止结果（正常结束后可用）
        error: 导致运行失败的异常
    """

    def __init__(self, graph: SupportGraph, initial_prompt: str, session: SessionContext):
        self.graph = graph
        self.initial_prompt = initial_prompt
        self.session = session
        self.outcome: Optional[ResolutionOutcome] = None
        self.error: Optional[BaseException] = None

        self._queue: "asyncio.Queue[Optional[WorkflowEvent]]" = asyncio.Queue()
        self._pending: Dict[str, asyncio.Future] = {}
        self._task: Optional[asyncio.Task] = None

    def _ensure_started(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._execute())

    async def watch_stream(self) -> AsyncIterator[WorkflowEvent]:
        """消费事件流

        运行失败时，在推送 failed 事件之后重新抛出阶段异常。
        """
        self._ensure_started()
        try:
            while True:
                event = await self._queue.get()
                if event is None:
                    break
                yield event
        finally:
            if not self._task.done():
                self._task.cancel()

        if self.error is not None:
            raise self.error

    async def send_response(self, request_id: str, text: str) -> None:
        """回填输入请求，恢复挂起的阶段

        Raises:
            ValueError: 请求不存在或回复为空
        """
        if not text or not text.strip():
            raise ValueError("回复不能为空")
        future = self._pending.pop(request_id, None)
        if future is None:
            raise ValueError(f"未知的输入请求: {request_id}")
        if not future.done():
            future.set_result(text.strip())

    def cancel(self) -> None:
        """取消运行"""
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _publish(self, event: WorkflowEvent) -> None:
        await self._queue.put(event)

    async def _request_input(self, stage: Optional[str], prompt: str) -> str:
        request_id = uuid.uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        await self._publish(WorkflowEvent(
            type=WorkflowEventType.INPUT_REQUEST,
            stage=stage,
            request_id=request_id,
            content=prompt,
        ))
        try:
            return await future
        finally:
            self._pending.pop(request_id, None)

    async def _execute(self) -> None:
        stage_name: Optional[str] = self.graph.entry
        try:
            payload = await self._request_input(None, self.initial_prompt)

            while stage_name is not None:
                stage = self.graph.stages[stage_name]
                logger.info(f"[Graph] 进入阶段: {stage_name}")
                await self._publish(WorkflowEvent(type=WorkflowEventType.STAGE_STARTED, stage=stage_name))

                ctx = StageContext(stage_name, self.session, self._publish, self._request_input)
                outcome = await stage.run(payload, ctx)

                await self._publish(WorkflowEvent(
                    type=WorkflowEventType.STAGE_COMPLETED,
                    stage=stage_name,
                    content=outcome.kind.value,
                ))
                next_stage = self.graph.next_stage(stage_name, outcome)
                logger.info(f"[Graph] {stage_name} --{outcome.kind.value}--> {next_stage or 'END'}")

                if next_stage is None:
                    self.outcome = outcome.payload
                payload = outcome.payload
                stage_name = next_stage

            await self._publish(WorkflowEvent(
                type=WorkflowEventType.COMPLETED,
                data=self.outcome.model_dump(mode="json"),
            ))

        except (Exception, asyncio.CancelledError) as e:
            logger.error(f"[Graph] 运行失败于阶段 {stage_name}: {type(e).__name__}: {e}")
            if isinstance(e, SupportFlowError):
                logger.debug(f"[Graph] 错误详情: {e.to_dict()}")
            self.error = e
            await self._publish(WorkflowEvent(
                type=WorkflowEventType.FAILED,
                stage=stage_name,
                content=f"{type(e).__name__}: {e}",
            ))

        finally:
            await self._queue.put(None)


def build_graph(
    config: Config,
    llm_service: LLMService,
    dao: Optional[KnownIssueDAO] = None,
) -> SupportGraph:
    """按配置装配默认工作流图

    Args:
        config: 全局配置
        llm_service: LLM 服务
        dao: 知识库 DAO，默认使用配置中的知识库路径
    """
    workflow = config.workflow
    dao = dao or KnownIssueDAO(workflow.knowledge_base_path)
    policy = IterationPolicy.from_config(workflow)

    action_tools = ToolRegistry()
    action_tools.register_tool(UnlockAccountTool(delay_scale=workflow.simulated_delay_scale))
    action_tools.register_tool(SendEmailTool(delay_scale=workflow.simulated_delay_scale))

    stages = [
        TriageStage(TriageAgent(llm_service), policy),
        KnowledgeMatchStage(KnowledgeMatchAgent(llm_service, dao), dao, policy),
        ResolutionStage(
            ResolutionAgent(llm_service, action_tools),
            require_tool_confirmation=workflow.require_tool_confirmation,
        ),
        EscalationStage(delay_scale=workflow.simulated_delay_scale),
    ]
    return SupportGraph(stages, greeting=workflow.greeting)
