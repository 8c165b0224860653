"""Resolution 阶段 - 自动处理已知问题

只调用一次 ResolutionAgent，随后请用户确认是否解决。
不会再路由到 Escalation：未解决时在结果中标记 requires_human。
"""

import asyncio
import logging
from typing import List

from supportflow.agents import ResolutionAgent, ResolutionReply
from supportflow.core.outcomes import Finish
from supportflow.core.stages.base import Stage, StageContext, RESOLUTION
from supportflow.models import KnowledgeMatchResult, ResolutionOutcome


logger = logging.getLogger(__name__)

SPEAKER = "AGENTE"
CONFIRMATION_PROMPT = "Seu problema foi resolvido? (sim/não)"
ACCEPTED_CONFIRMATIONS = frozenset({"sim", "s", "yes", "y"})

UNRESOLVED_REASON = "O cliente informou que o problema não foi resolvido após a tentativa automática"
CANCELLED_MESSAGE = "O processo de resolução foi cancelado. Por favor, tente novamente."
CANCELLED_REASON = "Processo cancelado"
ERROR_MESSAGE = "Ocorreu um erro durante a resolução: {error}"
ERROR_REASON = "Erro durante a resolução: {error_type}"


def is_confirmed(reply: str) -> bool:
    """确认词判断（去空白、小写）"""
    return reply.strip().lower() in ACCEPTED_CONFIRMATIONS


def build_prompt(match: KnowledgeMatchResult, available_tools: List[str]) -> str:
    """构造处理 prompt"""
    issue = match.matched_issue
    lines = ["Resolva o seguinte problema do cliente:", ""]
    if issue is not None:
        lines.append(f"Problema identificado: {issue.problem}")
        lines.append(f"Solução sugerida: {issue.solution or 'não cadastrada'}")
    lines.append(f"Ferramentas necessárias: {', '.join(match.required_tools) or 'nenhuma'}")
    lines.append(f"Detalhes para o cliente: {match.message}")
    lines.append("")
    lines.append(f"Ferramentas disponíveis: {', '.join(available_tools) or 'nenhuma'}")
    lines.append("Use as ferramentas disponíveis quando necessário e explique ao cliente o que foi feito.")
    return "\n".join(lines)


class ResolutionStage(Stage):
    """自动处理阶段

    Attributes:
        require_tool_confirmation: 为 True 时只记录实际执行成功的必需工具，
            否则原样记录知识库给出的必需工具列表
    """

    def __init__(self, agent: ResolutionAgent, require_tool_confirmation: bool = False):
        self.agent = agent
        self.require_tool_confirmation = require_tool_confirmation

    @property
    def name(self) -> str:
        return RESOLUTION

    async def run(self, match: KnowledgeMatchResult, ctx: StageContext) -> Finish:
        actions: List[str] = []
        try:
            prompt = build_prompt(match, self.agent.tools.list_tools())
            reply = await self.agent.resolve(prompt)
            actions = self.executed_actions(match, reply)
            logger.info(f"[Resolution] 已执行动作: {actions}")
            await ctx.say(SPEAKER, reply.message)

            resolved = is_confirmed(await ctx.ask(CONFIRMATION_PROMPT))
            outcome = ResolutionOutcome(
                resolved=resolved,
                requires_human=not resolved,
                message=reply.message,
                actions_executed=actions,
                escalation_reason=None if resolved else UNRESOLVED_REASON,
            )

        except asyncio.CancelledError:
            logger.warning("[Resolution] 处理被取消")
            outcome = ResolutionOutcome(
                resolved=False,
                requires_human=True,
                message=CANCELLED_MESSAGE,
                actions_executed=actions,
                escalation_reason=CANCELLED_REASON,
            )
            await ctx.emit(outcome)
            return Finish(payload=outcome)

        except Exception as e:
            logger.error(f"[Resolution] 处理失败: {e}")
            await ctx.emit(ResolutionOutcome(
                resolved=False,
                requires_human=True,
                message=ERROR_MESSAGE.format(error=e),
                actions_executed=actions,
                escalation_reason=ERROR_REASON.format(error_type=type(e).__name__),
            ))
            raise

        logger.info(f"[Resolution] resolved={outcome.resolved}")
        await ctx.emit(outcome)
        return Finish(payload=outcome)

    def executed_actions(self, match: KnowledgeMatchResult, reply: ResolutionReply) -> List[str]:
        required = list(match.required_tools)
        if not self.require_tool_confirmation:
            return required
        confirmed = reply.confirmed_tools()
        return [name for name in required if name in confirmed]
