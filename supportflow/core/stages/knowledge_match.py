"""KnowledgeMatch 阶段 - 已知问题识别

流程：
1. 以问题摘要为种子维护一份追加式历史
2. 每轮把历史拼成一条 prompt 调用 KnowledgeMatchAgent
3. known 或 complex 时结束；known 且有消息时按关键词关联知识库条目
4. 否则向用户追问，回复追加到历史
5. 迭代耗尽后强制 complex=true
"""

import asyncio
import logging
import re
from typing import List, Optional

from supportflow.agents import KnowledgeMatchAgent
from supportflow.core.outcomes import Escalate, Resolve
from supportflow.core.policy import IterationPolicy
from supportflow.core.stages.base import Stage, StageContext, KNOWLEDGE_MATCH
from supportflow.dao.known_issue_dao import KnownIssueDAO
from supportflow.exceptions import SessionStateError
from supportflow.models import ClassificationResult, KnowledgeMatchResult


logger = logging.getLogger(__name__)

PROMPT_PREFIX = "Problema do Usuário: "
DEFAULT_QUESTION = "Por favor, forneça mais detalhes sobre o problema."
FORCED_MESSAGE = "O problema requer investigação adicional. Será encaminhado para um especialista."
ERROR_MESSAGE = "Ocorreu um erro durante a análise: {error}"

KEYWORD_SPLIT_PATTERN = re.compile(r"[\s,.:;!?]+")
MIN_KEYWORD_LENGTH = 3
MAX_KEYWORDS = 10


def extract_keywords(text: str) -> List[str]:
    """从消息中提取候选关键词

    按空白和 , . : ; ! ? 切分，丢弃长度 <= 2 的词，最多保留 10 个。
    """
    tokens = [t for t in KEYWORD_SPLIT_PATTERN.split(text or "") if len(t) >= MIN_KEYWORD_LENGTH]
    return tokens[:MAX_KEYWORDS]


def route_match(result: KnowledgeMatchResult):
    """known 且非 complex 时自动处理，其余转人工"""
    if result.known and not result.complex:
        return Resolve(payload=result)
    return Escalate(payload=result)


class KnowledgeMatchStage(Stage):
    """已知问题识别阶段"""

    def __init__(
        self,
        agent: KnowledgeMatchAgent,
        dao: KnownIssueDAO,
        policy: Optional[IterationPolicy] = None,
    ):
        self.agent = agent
        self.dao = dao
        self.policy = policy or IterationPolicy()

    @property
    def name(self) -> str:
        return KNOWLEDGE_MATCH

    async def run(self, classification: ClassificationResult, ctx: StageContext):
        summary = classification.summary or ctx.session.problem_summary
        if not summary:
            raise SessionStateError("分诊结果中没有问题摘要")

        history = [summary]
        for iteration in self.policy.attempts():
            logger.info(f"[KnowledgeMatch] 第 {iteration}/{self.policy.max_iterations} 轮")
            try:
                result = await self.agent.analyze(PROMPT_PREFIX + "\n".join(history))

                if result.known or result.complex:
                    if result.known and result.message:
                        self.attach_known_issue(result)
                    logger.info(
                        f"[KnowledgeMatch] known={result.known}, complex={result.complex}"
                    )
                    await ctx.emit(result)
                    return route_match(result)

                reply = await ctx.ask(result.message.strip() or DEFAULT_QUESTION)
                history.append(reply)

            except (Exception, asyncio.CancelledError) as e:
                logger.error(f"[KnowledgeMatch] 分析失败: {e!r}")
                await ctx.emit(KnowledgeMatchResult(
                    known=False,
                    complex=True,
                    message=ERROR_MESSAGE.format(error=e),
                ))
                raise

        logger.warning(f"[KnowledgeMatch] 达到最大迭代次数 {self.policy.max_iterations}，转人工")
        forced = KnowledgeMatchResult(known=False, complex=True, message=FORCED_MESSAGE)
        await ctx.emit(forced)
        return route_match(forced)

    def attach_known_issue(self, result: KnowledgeMatchResult) -> None:
        """按消息中的关键词关联第一条匹配的知识库条目"""
        keywords = extract_keywords(result.message)
        issue = self.dao.find_first(keywords)
        if issue is None:
            logger.debug(f"[KnowledgeMatch] 知识库无匹配: {keywords}")
            return
        logger.info(f"[KnowledgeMatch] 匹配知识库条目: {issue.problem}")
        result.matched_issue = issue
        result.required_tools = list(issue.tools_required)
        result.success_rate = issue.success_rate
