"""Escalation 阶段 - 模拟人工接管

固定脚本的多轮交互，每步之间有模拟处理延迟（乘以 simulated_delay_scale）。
"""

import asyncio
import logging

from supportflow.core.outcomes import Finish
from supportflow.core.stages.base import Stage, StageContext, ESCALATION
from supportflow.models import KnowledgeMatchResult, ResolutionOutcome


logger = logging.getLogger(__name__)

SUPPORT_AGENT = "ATENDENTE SUPORTE"
HUMAN_AGENT = "ATENDENTE HUMANO"
SPECIALIST = "ESPECIALISTA HUMANO"
SYSTEM = "SISTEMA"

ACKNOWLEDGE_PROMPT = "[USUÁRIO] Sua resposta"
ACCEPTED_REPLIES = frozenset({
    "ok", "obrigado", "tá bom", "valeu", "sim", "s", "yes", "ok, obrigado", "muito obrigado",
})
ESCALATION_REASON = "Problema complexo ou desconhecido - resolvido por especialista humano"
HUMAN_SUPPORT_ACTION = "HumanSupport"

# 按顺序匹配，先命中者生效
SPECIALIST_RESOLUTIONS = (
    ("queda", "Seu problema é uma queda do sistema. Em 15 minutos o sistema voltará ao ar. "
              "Não precisa fazer nada, só aguardar."),
    ("lento", "O sistema está lento porque temos uma manutenção em andamento. "
              "Deverá voltar ao normal em 30 minutos. Recomendo fazer uma pausa."),
    ("erro", "Identificamos um erro na sua conta. Vou resetar suas permissões agora. "
             "Tente fazer login novamente em 2 minutos."),
    ("acesso", "Seu acesso foi bloqueado por segurança. Vou desbloqueá-lo e enviar um email "
               "com instruções para resetar sua senha."),
    ("conexão", "Temos um problema com a conexão do seu servidor. Estou reiniciando-o agora, "
                "deve estar online em 5 minutos."),
    ("dados", "Seus dados foram recuperados com sucesso. Estou enviando um arquivo com todas "
              "as informações por email."),
)
DEFAULT_RESOLUTION = (
    "Identifiquei seu problema. Estou tomando as ações necessárias para resolvê-lo. "
    "Você receberá um email em breve com mais detalhes. Obrigado pela paciência!"
)


def select_specialist_resolution(problem: str) -> str:
    """按关键词词干选择专家的处理话术（大小写不敏感）"""
    text = (problem or "").lower()
    for stem, resolution in SPECIALIST_RESOLUTIONS:
        if stem in text:
            return resolution
    return DEFAULT_RESOLUTION


def is_accepted(reply: str) -> bool:
    return reply.strip().lower() in ACCEPTED_REPLIES


class EscalationStage(Stage):
    """转人工阶段"""

    def __init__(self, delay_scale: float = 1.0):
        self.delay_scale = delay_scale

    @property
    def name(self) -> str:
        return ESCALATION

    async def _pause(self, seconds: float) -> None:
        if self.delay_scale > 0:
            await asyncio.sleep(seconds * self.delay_scale)

    async def run(self, match: KnowledgeMatchResult, ctx: StageContext) -> Finish:
        logger.info("[Escalation] 转人工处理")

        await ctx.say(SUPPORT_AGENT, "Vamos passar o atendimento para um humano especialista")
        await self._pause(0.5)
        await ctx.say(SUPPORT_AGENT, "Aguarde um momento enquanto você é conectado...")
        await self._pause(1)

        await ctx.say(HUMAN_AGENT, "Olá! Estou com as informações do seu problema e já estou resolvendo.")
        await ctx.say(HUMAN_AGENT, "Por favor aguarde enquanto analiso a situação...")
        await self._pause(1)
        await ctx.ask(ACKNOWLEDGE_PROMPT)
        await self._pause(0.5)

        await ctx.say(SPECIALIST, select_specialist_resolution(match.message))
        await self._pause(1)
        resolved = is_accepted(await ctx.ask(ACKNOWLEDGE_PROMPT))

        await ctx.say(SYSTEM, "Finalizando atendimento com suporte humano")
        logger.info(f"[Escalation] resolved={resolved}")

        outcome = ResolutionOutcome(
            resolved=resolved,
            requires_human=False,
            message=f"Atendimento humano concluído. Problema resolvido: {'sim' if resolved else 'não'}",
            actions_executed=[HUMAN_SUPPORT_ACTION],
            escalation_reason=ESCALATION_REASON,
        )
        await ctx.emit(outcome)
        return Finish(payload=outcome)
