"""Triage 阶段 - 理解用户问题

循环调用 TriageAgent，直到问题被理解或迭代次数耗尽。
"""

import logging
from typing import Optional

from supportflow.agents import TriageAgent
from supportflow.core.outcomes import Continue
from supportflow.core.policy import IterationPolicy
from supportflow.core.session import SessionContext
from supportflow.core.stages.base import Stage, StageContext, TRIAGE
from supportflow.models import ClassificationResult


logger = logging.getLogger(__name__)

DEFAULT_QUESTION = "Pode descrever o problema com mais detalhes?"


def build_fallback_summary(session: SessionContext) -> str:
    """用全部用户发言拼出兜底摘要"""
    return " ".join(turn.content.strip() for turn in session.snapshot().user_turns)


class TriageStage(Stage):
    """分诊阶段"""

    def __init__(self, agent: TriageAgent, policy: Optional[IterationPolicy] = None):
        self.agent = agent
        self.policy = policy or IterationPolicy()

    @property
    def name(self) -> str:
        return TRIAGE

    async def run(self, user_message: str, ctx: StageContext) -> Continue:
        session = ctx.session
        session.add_user_turn(user_message)

        for iteration in self.policy.attempts():
            logger.info(f"[Triage] 第 {iteration}/{self.policy.max_iterations} 轮")
            result = await self.agent.classify(session.history)

            if result.understood:
                logger.info(f"[Triage] 已理解问题, urgency={result.urgency}")
                session.add_assistant_turn(result.summary)
                session.set_problem_summary(result.summary)
                await ctx.emit(result)
                return Continue(payload=result)

            question = result.question_for_user.strip() or DEFAULT_QUESTION
            session.add_assistant_turn(question)
            reply = await ctx.ask(question)
            session.add_user_turn(reply)

        # 迭代耗尽：交给 KnowledgeMatch 判断（它同样有界）
        summary = build_fallback_summary(session)
        logger.warning(f"[Triage] {self.policy.max_iterations} 轮后仍未理解，使用兜底摘要")
        session.set_problem_summary(summary)
        result = ClassificationResult(understood=False, summary=summary)
        await ctx.emit(result)
        return Continue(payload=result)
