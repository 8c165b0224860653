"""ToolRegistry - 工具注册与执行

管理工具注册和执行，确保工具调用的类型安全。
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from supportflow.tools.base import BaseTool, ToolCallRecord


logger = logging.getLogger(__name__)


class ToolRegistry:
    """工具注册表

    职责：
    1. 管理工具注册
    2. 执行工具调用（参数校验失败或执行异常记录为失败，不向外抛出）
    """

    def __init__(self):
        """初始化注册表"""
        self._tools: Dict[str, BaseTool] = {}

    def register_tool(self, tool: BaseTool) -> None:
        """注册工具

        Args:
            tool: 工具实例
        """
        self._tools[tool.name] = tool

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """获取工具，不存在则返回 None"""
        return self._tools.get(name)

    def list_tools(self) -> List[str]:
        """列出所有已注册的工具名称"""
        return list(self._tools.keys())

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        """所有工具的 function schema"""
        return [tool.to_openai_tool() for tool in self._tools.values()]

    async def execute(
        self,
        tool_name: str,
        arguments: Union[str, Dict[str, Any], None],
    ) -> ToolCallRecord:
        """执行工具

        Args:
            tool_name: 工具名称
            arguments: 参数（模型返回的 JSON 字符串或字典）

        Returns:
            调用记录
        """
        record = await self._execute(tool_name, arguments)
        if record.success:
            logger.info(f"[TOOL] {tool_name} 执行成功")
        else:
            logger.warning(f"[TOOL] {tool_name} 执行失败: {record.error_message}")
        return record

    async def _execute(self, tool_name: str, arguments) -> ToolCallRecord:
        tool = self._tools.get(tool_name)
        if not tool:
            return ToolCallRecord(
                name=tool_name,
                success=False,
                error_message=f"未知工具: {tool_name}",
            )

        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                return ToolCallRecord(
                    name=tool_name,
                    success=False,
                    error_message=f"参数不是合法 JSON: {e}",
                )
        arguments = arguments or {}

        try:
            input_model = tool.input_schema(**arguments)
            output = await tool.execute(input_model)
            return ToolCallRecord(name=tool_name, arguments=arguments, output=output)

        except ValidationError as e:
            return ToolCallRecord(
                name=tool_name,
                arguments=arguments,
                success=False,
                error_message=f"参数验证失败: {e}",
            )

        except Exception as e:
            return ToolCallRecord(
                name=tool_name,
                arguments=arguments,
                success=False,
                error_message=f"工具执行失败: {e}",
            )
