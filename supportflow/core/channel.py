"""外部交互通道

展示提示并阻塞等待非空的人工回复。空白回复在通道内部重新提示，不会向上抛出。
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from rich.console import Console
from rich.text import Text


logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Por favor, digite sua resposta:"


class InteractionChannel(ABC):
    """交互通道抽象基类

    子类只需实现 _read，非空校验由 ask 统一处理。
    """

    async def ask(self, prompt: str) -> str:
        """提示用户并等待非空回复

        Args:
            prompt: 提示文本，为空时使用默认提示

        Returns:
            非空的用户回复（已去除首尾空白）
        """
        if not prompt or not prompt.strip():
            prompt = DEFAULT_PROMPT

        while True:
            reply = await self._read(prompt)
            if reply is not None and reply.strip():
                return reply.strip()
            logger.debug("收到空白回复，重新提示")
            self._reject()

    @abstractmethod
    async def _read(self, prompt: str) -> Optional[str]:
        """读取一次原始输入"""
        pass

    def _reject(self) -> None:
        """空白回复后的提示（默认不做任何事）"""
        pass


class ConsoleChannel(InteractionChannel):
    """基于 Rich Console 的终端交互通道

    阻塞读取放在工作线程中执行，等待期间可以被取消。
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    async def _read(self, prompt: str) -> Optional[str]:
        return await asyncio.to_thread(self.console.input, f"{prompt} ")

    def _reject(self) -> None:
        self.console.print(Text("Entrada inválida. Por favor, digite uma resposta válida.", style="red"))


class ScriptedChannel(InteractionChannel):
    """按预设回复依次应答的通道（用于测试和演示）

    Attributes:
        prompts: 收到过的提示（按顺序）
    """

    def __init__(self, replies: Iterable[str]):
        self._replies: List[str] = list(replies)
        self.prompts: List[str] = []

    async def _read(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        if not self._replies:
            raise RuntimeError(f"预设回复已用完，无法应答: {prompt}")
        return self._replies.pop(0)

    @property
    def remaining(self) -> int:
        """剩余预设回复数"""
        return len(self._replies)
