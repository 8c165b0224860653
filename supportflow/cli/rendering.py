"""渲染逻辑

把工作流事件、最终结果和知识库条目渲染为 Rich 对象，由调用方决定如何输出。
"""
from typing import List, Optional

from rich.box import SIMPLE
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from supportflow.core.events import WorkflowEvent, WorkflowEventType
from supportflow.models import KnownIssueRecord, ResolutionOutcome


class SupportRenderer:
    """支持会话渲染器"""

    LOGO = """
███████╗██╗   ██╗██████╗  ██████╗ ██████╗ ████████╗███████╗
██╔════╝██║   ██║██╔══██╗██╔═══██╗██╔══██╗╚══██╔══╝██╔════╝
███████╗██║   ██║██████╔╝██║   ██║██████╔╝   ██║   █████╗
╚════██║██║   ██║██╔═══╝ ██║   ██║██╔══██╗   ██║   ██╔══╝
███████║╚██████╔╝██║     ╚██████╔╝██║  ██║   ██║   ██║
╚══════╝ ╚═════╝ ╚═╝      ╚═════╝ ╚═╝  ╚═╝   ╚═╝   ╚═╝
"""

    # 发言人 -> 样式
    SPEAKER_STYLES = {
        "AGENTE": "bold cyan",
        "ATENDENTE SUPORTE": "bold yellow",
        "ATENDENTE HUMANO": "bold magenta",
        "ESPECIALISTA HUMANO": "bold green",
        "SISTEMA": "dim",
    }

    STAGE_TITLES = {
        "triage": "Triagem",
        "knowledge_match": "Problemas conhecidos",
        "resolution": "Resolução automática",
        "escalation": "Atendimento humano",
    }

    def __init__(self, console: Console = None, show_stages: bool = False):
        """初始化渲染器

        Args:
            console: Rich Console 实例
            show_stages: 是否显示阶段切换
        """
        self.console = console or Console()
        self.show_stages = show_stages

    def render_welcome(self) -> Group:
        """欢迎信息"""
        return Group(
            Text(self.LOGO.strip("\n"), style="bold blue"),
            Text(""),
            Text("Suporte ao cliente - descreva o seu problema.", style="bold yellow"),
            Text("Ctrl+C para sair.", style="dim"),
        )

    def render_event(self, event: WorkflowEvent) -> Optional[RenderableType]:
        """渲染单个事件，不需要展示时返回 None

        input_request 的提示由交互通道自己显示。
        """
        if event.type == WorkflowEventType.MESSAGE:
            return self.render_message(event.speaker or "AGENTE", event.content or "")

        if event.type == WorkflowEventType.OUTPUT:
            return self._render_output(event)

        if event.type == WorkflowEventType.STAGE_STARTED and self.show_stages:
            title = self.STAGE_TITLES.get(event.stage, event.stage)
            return Text(f"── {title} ──", style="dim")

        if event.type == WorkflowEventType.FAILED:
            return Text(f"Falha na etapa {event.stage or '-'}: {event.content}", style="bold red")

        return None

    def render_message(self, speaker: str, content: str) -> Text:
        text = Text()
        text.append(f"[{speaker}] ", style=self.SPEAKER_STYLES.get(speaker, "bold"))
        text.append(content)
        return text

    def _render_output(self, event: WorkflowEvent) -> Optional[RenderableType]:
        data = event.data or {}

        if event.result_type == "ClassificationResult":
            summary = data.get("summary")
            if not summary:
                return None
            text = Text()
            text.append("Resumo: ", style="dim")
            text.append(summary, style="italic")
            return text

        if event.result_type == "KnowledgeMatchResult":
            message = data.get("message")
            return self.render_message("AGENTE", message) if message else None

        if event.result_type == "ResolutionOutcome":
            return self.render_outcome(ResolutionOutcome.model_validate(data))

        return None

    def render_outcome(self, outcome: ResolutionOutcome) -> Panel:
        """最终结果面板"""
        lines = Text()
        lines.append("Resolvido: ", style="dim")
        lines.append("sim" if outcome.resolved else "não", style="bold green" if outcome.resolved else "bold red")
        lines.append("\nRequer humano: ", style="dim")
        lines.append("sim" if outcome.requires_human else "não")
        if outcome.actions_executed:
            lines.append("\nAções executadas: ", style="dim")
            lines.append(", ".join(outcome.actions_executed))
        if outcome.escalation_reason:
            lines.append("\nMotivo: ", style="dim")
            lines.append(outcome.escalation_reason)
        if outcome.message:
            lines.append("\n\n")
            lines.append(outcome.message)

        return Panel(
            lines,
            title="[bold]Resultado do atendimento[/bold]",
            border_style="green" if outcome.resolved else "yellow",
            title_align="left",
        )

    def render_known_issues(self, issues: List[KnownIssueRecord]) -> RenderableType:
        """知识库查询结果表格"""
        if not issues:
            return Text("Nenhum problema conhecido encontrado.", style="dim")

        table = Table(box=SIMPLE, show_header=True, header_style="bold")
        table.add_column("#", style="dim", width=3)
        table.add_column("Problema")
        table.add_column("Keywords", style="cyan")
        table.add_column("Ferramentas")
        table.add_column("Sucesso", justify="right")

        for i, issue in enumerate(issues, 1):
            table.add_row(
                str(i),
                issue.problem,
                ", ".join(issue.keywords),
                ", ".join(issue.tools_required) or "-",
                f"{issue.success_rate:.0%}",
            )
        return table
