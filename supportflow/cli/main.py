"""CLI 主程序

运行方式：
    python -m supportflow run     # 交互式支持会话
    python -m supportflow demo    # 离线演示
"""
import asyncio
from typing import Optional

from rich.console import Console
from rich.text import Text

from supportflow.cli.rendering import SupportRenderer
from supportflow.core.channel import ConsoleChannel, InteractionChannel
from supportflow.core.driver import run_session
from supportflow.core.events import WorkflowEvent
from supportflow.core.graph import build_graph
from supportflow.dao.known_issue_dao import KnownIssueDAO
from supportflow.models import ResolutionOutcome
from supportflow.services.llm_service import LLMService
from supportflow.utils.config import Config


CLOSING_MESSAGE = "Obrigado por usar o suporte."


class SupportCLI:
    """交互式支持会话

    Attributes:
        outcome: 最近一次会话的最终结果
    """

    def __init__(
        self,
        config: Config,
        console: Optional[Console] = None,
        channel: Optional[InteractionChannel] = None,
        llm_service: Optional[LLMService] = None,
        dao: Optional[KnownIssueDAO] = None,
        show_stages: bool = False,
    ):
        self.config = config
        self.console = console or Console()
        self.channel = channel or ConsoleChannel(self.console)
        self.renderer = SupportRenderer(self.console, show_stages=show_stages)
        self.llm_service = llm_service or LLMService(
            config,
            progress_callback=self._on_progress,
        )
        self.graph = build_graph(config, self.llm_service, dao)
        self.outcome: Optional[ResolutionOutcome] = None

    def _on_progress(self, message: str) -> None:
        self.console.print(Text(message, style="dim"))

    def _on_event(self, event: WorkflowEvent) -> None:
        renderable = self.renderer.render_event(event)
        if renderable is not None:
            self.console.print(renderable)

    def run(self) -> int:
        """运行一次会话

        Returns:
            进程退出码（0 正常结束，1 致命错误）
        """
        self.console.print()
        self.console.print(self.renderer.render_welcome())
        self.console.print()

        try:
            self.outcome = asyncio.run(run_session(self.graph, self.channel, on_event=self._on_event))
        except KeyboardInterrupt:
            self.console.print(Text("\nAtendimento interrompido.", style="yellow"))
            return 1
        except (Exception, asyncio.CancelledError) as e:
            self.console.print(Text(f"Erro fatal: {type(e).__name__}: {e}", style="bold red"))
            return 1

        self.console.print()
        self.console.print(Text(CLOSING_MESSAGE, style="blue"))
        return 0
