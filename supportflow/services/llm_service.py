"""LLM API 调用服务

使用 OpenAI SDK 异步调用兼容 OpenAI API 的 LLM 服务（推理服务）
"""
import asyncio
import logging
import re
from typing import List, Dict, Optional, Callable

from openai import (
    AsyncOpenAI,
    APIError,
    APITimeoutError,
    APIConnectionError,
    RateLimitError,
)
from pydantic import BaseModel, Field

from supportflow.exceptions import ReasoningServiceError
from supportflow.tools.base import ToolCallRecord
from supportflow.tools.registry import ToolRegistry
from supportflow.utils.config import Config


logger = logging.getLogger(__name__)

# 匹配 <think>...</think> 标签（支持多行）
THINK_TAG_PATTERN = re.compile(r"<think>.*?</think>\s*", re.DOTALL)

# 进度回调类型
ProgressCallback = Callable[[str], None]


class ToolChatResult(BaseModel):
    """带工具调用的对话结果

    Attributes:
        content: 最终回复文本
        tool_calls: 本次对话中执行过的工具调用
    """
    content: str = ""
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)


class LLMService:
    """LLM 服务封装"""

    # 可重试的传输层错误
    RETRYABLE_ERRORS = (APITimeoutError, APIConnectionError, RateLimitError)

    def __init__(
        self,
        config: Config,
        progress_callback: Optional[ProgressCallback] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        初始化 LLM 服务

        Args:
            config: 全局配置对象
            progress_callback: 进度回调函数（用于报告重试等状态）
            client: 自定义异步客户端（默认根据配置创建）
        """
        self.config = config
        self._progress_callback = progress_callback
        self.client = client or AsyncOpenAI(
            api_key=config.llm.api_key,
            base_url=config.llm.api_base,
        )
        self.model = config.llm.model
        self.temperature = config.llm.temperature
        self.max_tokens = config.llm.max_tokens
        self.timeout = config.llm.timeout
        self.max_retries = config.llm.max_retries
        self.retry_delay = config.llm.retry_delay
        self.max_tool_rounds = config.workflow.max_tool_rounds

    def _report_progress(self, message: str):
        """报告进度"""
        logger.info(message)
        if self._progress_callback:
            self._progress_callback(message)

    async def _create(self, messages: List[Dict], **kwargs):
        """带重试的 chat completions 调用

        Raises:
            ReasoningServiceError: 重试耗尽或 API 返回错误
        """
        for attempt in range(self.max_retries):
            try:
                return await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    timeout=self.timeout,
                    **kwargs,
                )

            except self.RETRYABLE_ERRORS as e:
                error_type = type(e).__name__
                if attempt < self.max_retries - 1:
                    wait_time = self.retry_delay * (attempt + 1)
                    self._report_progress(
                        f"LLM 调用失败 ({error_type})，{wait_time}s 后重试 ({attempt + 1}/{self.max_retries})..."
                    )
                    await asyncio.sleep(wait_time)
                    continue
                self._report_progress(f"LLM 调用失败 ({error_type})，重试次数已用尽")
                raise ReasoningServiceError(
                    f"推理服务调用失败: {error_type}: {e}",
                    details={"attempts": self.max_retries},
                ) from e

            except APIError as e:
                # 其他 API 错误不重试
                raise ReasoningServiceError(f"推理服务返回错误: {e}") from e

    def _build_messages(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str],
    ) -> List[Dict]:
        full_messages = []
        if system_prompt:
            full_messages.append({"role": "system", "content": system_prompt})
        full_messages.extend(messages)
        return full_messages

    def _clean_response(self, content: Optional[str]) -> str:
        """清理 LLM 响应

        - 去除 <think>...</think> 标签（模型的思考过程）
        - 去除首尾空白
        """
        if not content:
            return ""
        content = THINK_TAG_PATTERN.sub("", content)
        return content.strip()

    async def chat(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        """多轮对话

        Args:
            messages: 对话消息列表 [{"role": "user", "content": "..."}, ...]
            system_prompt: 系统提示
            json_mode: 是否要求返回 JSON 对象

        Returns:
            清理后的回复文本
        """
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await self._create(self._build_messages(messages, system_prompt), **kwargs)
        return self._clean_response(response.choices[0].message.content)

    async def chat_with_tools(
        self,
        messages: List[Dict[str, str]],
        tools: ToolRegistry,
        system_prompt: Optional[str] = None,
    ) -> ToolChatResult:
        """允许模型调用工具的对话

        模型返回 tool_calls 时执行工具并把结果回填，直到模型给出文本回复，
        最多 max_tool_rounds 轮。

        Raises:
            ReasoningServiceError: 工具调用轮数超过上限
        """
        full_messages = self._build_messages(messages, system_prompt)
        executed: List[ToolCallRecord] = []

        for round_index in range(self.max_tool_rounds):
            response = await self._create(full_messages, tools=tools.to_openai_tools())
            message = response.choices[0].message

            if not message.tool_calls:
                return ToolChatResult(
                    content=self._clean_response(message.content),
                    tool_calls=executed,
                )

            full_messages.append({
                "role": "assistant",
                "content": message.content or "",
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.function.name,
                            "arguments": call.function.arguments,
                        },
                    }
                    for call in message.tool_calls
                ],
            })

            for call in message.tool_calls:
                record = await tools.execute(call.function.name, call.function.arguments)
                executed.append(record)
                full_messages.append({
                    "role": "tool",
                    "tool_call_id": call.id,
                    "content": record.to_content(),
                })

            logger.debug(f"工具调用第 {round_index + 1} 轮完成: {[c.function.name for c in message.tool_calls]}")

        raise ReasoningServiceError(
            f"工具调用轮数超过上限 ({self.max_tool_rounds})",
            details={"tool_calls": [r.name for r in executed]},
        )
