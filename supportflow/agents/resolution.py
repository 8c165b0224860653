"""ResolutionAgent - 自动处理"""

from typing import List

from pydantic import BaseModel, Field

from supportflow.agents.parsing import extract_message
from supportflow.services.llm_service import LLMService
from supportflow.tools import ToolCallRecord, ToolRegistry


class ResolutionReply(BaseModel):
    """处理 Agent 的回复

    Attributes:
        message: 给用户的说明
        tool_calls: 模型实际执行的工具调用
    """
    message: str = ""
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)

    def confirmed_tools(self) -> List[str]:
        """成功执行过的工具名（去重，保持顺序）"""
        names: List[str] = []
        for call in self.tool_calls:
            if call.success and call.name not in names:
                names.append(call.name)
        return names


class ResolutionAgent:
    """自动处理 Agent，可调用 UnlockAccount / SendEmail"""

    SYSTEM_PROMPT = """És um agente de resolução de suporte.
A tua tarefa é tentar resolver o problema do cliente automaticamente.
O teu objetivo é solucionar o problema usando as ferramentas disponíveis:
- Analisa a solução sugerida pelo agente de problemas frequentes
- Se tens acesso às ferramentas necessárias, executa as ações
- Explica ao cliente o que fizeste de forma clara e simples
- Se a ação falhar ou não tiveres a ferramenta necessária, informa que será escalado para humano

Problemas que PODES resolver sozinho:
- Reset de senha
- Desbloqueio de conta
- Consulta de status
- Reenvio de emails
- Verificações simples no sistema

Problemas que DEVEM ir para humano:
- Reembolsos acima de R$ 500
- Alterações de plano/contrato
- Bugs no sistema
- Solicitações de cancelamento
- Qualquer coisa que envolva decisão de negócio"""

    def __init__(self, llm_service: LLMService, tools: ToolRegistry):
        """初始化

        Args:
            llm_service: LLM 服务
            tools: 可用的动作工具
        """
        self.llm_service = llm_service
        self.tools = tools

    async def resolve(self, prompt: str) -> ResolutionReply:
        """执行一次处理（不循环）

        Raises:
            ReasoningServiceError: 推理服务调用失败
        """
        result = await self.llm_service.chat_with_tools(
            [{"role": "user", "content": prompt}],
            self.tools,
            system_prompt=self.SYSTEM_PROMPT,
        )
        return ResolutionReply(
            message=extract_message(result.content),
            tool_calls=result.tool_calls,
        )
