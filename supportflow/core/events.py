"""工作流事件模型

定义图运行过程中向驱动方推送的事件。
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class WorkflowEventType(str, Enum):
    """事件类型"""

    INPUT_REQUEST = "input_request"      # 需要人工输入
    STAGE_STARTED = "stage_started"      # 阶段开始
    MESSAGE = "message"                  # 给用户看的消息
    OUTPUT = "output"                    # 阶段产出的结构化结果
    STAGE_COMPLETED = "stage_completed"  # 阶段结束
    COMPLETED = "completed"              # 会话正常结束
    FAILED = "failed"                    # 会话异常结束


class WorkflowEvent(BaseModel):
    """工作流事件

    Attributes:
        type: 事件类型
        stage: 产生事件的阶段
        content: 文本内容（提示、消息、错误描述）
        speaker: 消息发言人（MESSAGE）
        request_id: 输入请求 ID（INPUT_REQUEST）
        result_type: 结构化结果的类型名（OUTPUT）
        data: 结构化数据
    """

    type: WorkflowEventType
    stage: Optional[str] = None
    content: Optional[str] = None
    speaker: Optional[str] = None
    request_id: Optional[str] = None
    result_type: Optional[str] = None
    data: Optional[dict] = None
