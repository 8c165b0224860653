"""TriageAgent - 问题理解

根据完整对话历史判断是否已理解用户问题。
"""

from typing import List

from supportflow.agents.parsing import parse_model
from supportflow.models import ClassificationResult, ConversationTurn
from supportflow.services.llm_service import LLMService


class TriageAgent:
    """分诊 Agent

    输出 schema: is_understood, question_for_user, summary, urgency
    """

    SYSTEM_PROMPT = """És um agente de triagem de suporte.
A tua tarefa é analisar a mensagem inicial do cliente e extrair informações essenciais.

O teu objetivo é entender e classificar o problema:
- Identifica o tipo de problema (login, pagamento, funcionalidade, bug, dúvida)
- Extrai informações-chave (email, ID do pedido, descrição do erro, etc.)
- Classifica a urgência (critical, high, medium, low):
  * critical: sistema fora, perda financeira, múltiplos usuários afetados
  * high: funcionalidade importante quebrada, cliente bloqueado, prazo urgente
  * medium: inconveniência, mas há workaround
  * low: dúvida, sugestão, problema cosmético

- Se entenderes o problema com base em todo o contexto, resume-o de forma clara e objetiva.
- Se precisares de mais informações, escreve UMA pergunta para clarificar o problema.
- Não tentes resolvê-lo, apenas resume o problema ou peça mais informações.

Responde apenas com JSON:
{
  "is_understood": true | false,
  "question_for_user": "pergunta de clarificação (vazia se entendeu)",
  "summary": "resumo do problema (vazio se não entendeu)",
  "urgency": "critical" | "high" | "medium" | "low"
}"""

    def __init__(self, llm_service: LLMService):
        """初始化

        Args:
            llm_service: LLM 服务
        """
        self.llm_service = llm_service

    async def classify(self, history: List[ConversationTurn]) -> ClassificationResult:
        """分析对话历史

        Raises:
            DeserializationError: 响应无法解析
            ReasoningServiceError: 推理服务调用失败
        """
        response = await self.llm_service.chat(
            [turn.to_message() for turn in history],
            system_prompt=self.SYSTEM_PROMPT,
            json_mode=True,
        )
        return parse_model(response, ClassificationResult)
