"""工具抽象基类"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field


# 泛型类型：工具输入
TInput = TypeVar("TInput", bound=BaseModel)


class ToolCallRecord(BaseModel):
    """一次工具调用的记录

    Attributes:
        name: 工具名称
        arguments: 调用参数
        success: 是否执行成功
        output: 工具返回值
        error_message: 失败原因
    """
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    success: bool = True
    output: Any = None
    error_message: Optional[str] = None

    def to_content(self) -> str:
        """回填给模型的工具结果文本"""
        if self.success:
            return json.dumps({"success": True, "result": self.output}, ensure_ascii=False, default=str)
        return json.dumps({"success": False, "error": self.error_message}, ensure_ascii=False)


class BaseTool(ABC, Generic[TInput]):
    """工具抽象基类

    所有工具都必须实现此接口，确保统一的调用方式。
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """工具名称，用于模型调用"""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """工具描述，用于模型 function schema"""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> type[TInput]:
        """输入参数的 Pydantic 模型类"""
        pass

    @abstractmethod
    async def execute(self, input: TInput) -> Any:
        """执行工具

        Args:
            input: 工具输入参数

        Returns:
            可 JSON 序列化的执行结果
        """
        pass

    def to_openai_tool(self) -> Dict[str, Any]:
        """转换为 chat completions 的 tools 定义"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema.model_json_schema(),
            },
        }
