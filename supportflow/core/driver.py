"""会话驱动

启动一次运行，把 input_request 交给交互通道回答，并把每个事件转给 on_event。
"""

import logging
from typing import Callable, Optional

from supportflow.core.channel import InteractionChannel
from supportflow.core.events import WorkflowEvent, WorkflowEventType
from supportflow.core.graph import SupportGraph
from supportflow.models import ResolutionOutcome


logger = logging.getLogger(__name__)

EventCallback = Callable[[WorkflowEvent], None]


async def run_session(
    graph: SupportGraph,
    channel: InteractionChannel,
    greeting: Optional[str] = None,
    on_event: Optional[EventCallback] = None,
) -> ResolutionOutcome:
    """运行一次完整会话

    Args:
        graph: 工作流图
        channel: 交互通道
        greeting: 问候语，默认使用图的配置
        on_event: 事件回调

    Returns:
        终止结果

    Raises:
        阶段抛出的致命异常
    """
    run = graph.start(greeting)
    logger.info(f"[Driver] 会话开始: {run.session.session_id}")

    async for event in run.watch_stream():
        if on_event:
            on_event(event)
        if event.type == WorkflowEventType.INPUT_REQUEST:
            reply = await channel.ask(event.content)
            await run.send_response(event.request_id, reply)

    logger.info(f"[Driver] 会话结束: resolved={run.outcome.resolved}")
    return run.outcome
