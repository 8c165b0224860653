"""Agent 工具

- UnlockAccountTool / SendEmailTool: 处理阶段的动作工具
- GetKnownIssuesTool: 知识匹配阶段的知识库查询工具
"""

from supportflow.tools.base import BaseTool, ToolCallRecord
from supportflow.tools.registry import ToolRegistry
from supportflow.tools.actions import (
    EmailTemplate,
    UnlockAccountTool,
    SendEmailTool,
    unlock_account,
    send_email,
)
from supportflow.tools.knowledge import GetKnownIssuesTool

__all__ = [
    "BaseTool",
    "ToolCallRecord",
    "ToolRegistry",
    "EmailTemplate",
    "UnlockAccountTool",
    "SendEmailTool",
    "unlock_account",
    "send_email",
    "GetKnownIssuesTool",
]
