"""KnowledgeMatchAgent - 已知问题识别"""

from typing import Optional

from supportflow.agents.parsing import parse_model
from supportflow.dao.known_issue_dao import KnownIssueDAO
from supportflow.models import KnowledgeMatchResult
from supportflow.services.llm_service import LLMService
from supportflow.tools import GetKnownIssuesTool, ToolRegistry


class KnowledgeMatchAgent:
    """已知问题识别 Agent

    提供知识库 DAO 时，模型可以通过 get_known_issues 工具查询知识库。
    输出 schema: is_known, message_for_user, is_complex
    （扩展字段 matched_issue, required_tools, success_rate 可选）
    """

    SYSTEM_PROMPT = """És um agente de suporte.
A tua tarefa é analisar o resumo do problema do cliente e verificar se é um dos problemas conhecidos.
O teu objetivo é encontrar se o problema está listado nos problemas conhecidos através de palavras-chave.
- Se o problema é conhecido, informa as ações necessárias para resolvê-lo, citando as palavras-chave do problema.
- Se não tiver solução, informa se possui um prazo de solução cadastrado.
- Se o problema é complexo, informa que será atendido por um humano.
- Se não tiveres informação suficiente, faz UMA pergunta ao cliente em message_for_user.

Responde apenas com JSON:
{
  "is_known": true | false,
  "message_for_user": "mensagem para o cliente",
  "is_complex": true | false
}"""

    def __init__(self, llm_service: LLMService, dao: Optional[KnownIssueDAO] = None):
        """初始化

        Args:
            llm_service: LLM 服务
            dao: 知识库 DAO（可选，提供后注册 get_known_issues 工具）
        """
        self.llm_service = llm_service
        self._tools: Optional[ToolRegistry] = None
        if dao is not None:
            self._tools = ToolRegistry()
            self._tools.register_tool(GetKnownIssuesTool(dao))

    async def analyze(self, prompt: str) -> KnowledgeMatchResult:
        """分析问题描述

        Raises:
            DeserializationError: 响应无法解析
            ReasoningServiceError: 推理服务调用失败
        """
        messages = [{"role": "user", "content": prompt}]
        if self._tools is not None:
            result = await self.llm_service.chat_with_tools(
                messages,
                self._tools,
                system_prompt=self.SYSTEM_PROMPT,
            )
            response = result.content
        else:
            response = await self.llm_service.chat(
                messages,
                system_prompt=self.SYSTEM_PROMPT,
                json_mode=True,
            )
        return parse_model(response, KnowledgeMatchResult)
