"""推理协作 Agent 单元测试"""
import json
from unittest.mock import AsyncMock, Mock

import pytest

from supportflow.agents import KnowledgeMatchAgent, ResolutionAgent, ResolutionReply, TriageAgent
from supportflow.exceptions import DeserializationError
from supportflow.models import ConversationTurn
from supportflow.services.llm_service import ToolChatResult
from supportflow.tools import ToolCallRecord, ToolRegistry


@pytest.fixture
def mock_llm_service():
    """创建 mock LLM 服务"""
    service = Mock()
    service.chat = AsyncMock()
    service.chat_with_tools = AsyncMock()
    return service


class TestTriageAgent:
    """TriageAgent 测试"""

    @pytest.mark.asyncio
    async def test_classify_sends_full_history(self, mock_llm_service):
        """测试:发送完整历史并解析结果"""
        mock_llm_service.chat.return_value = json.dumps({
            "is_understood": True,
            "question_for_user": "",
            "summary": "Cliente esqueceu a senha",
            "urgency": "high",
        })
        agent = TriageAgent(mock_llm_service)
        history = [
            ConversationTurn(role="user", content="não consigo entrar"),
            ConversationTurn(role="assistant", content="O que acontece?"),
            ConversationTurn(role="user", content="esqueci a senha"),
        ]

        result = await agent.classify(history)

        assert result.understood is True
        assert result.summary == "Cliente esqueceu a senha"
        args, kwargs = mock_llm_service.chat.call_args
        assert [m["role"] for m in args[0]] == ["user", "assistant", "user"]
        assert kwargs["system_prompt"] == TriageAgent.SYSTEM_PROMPT
        assert kwargs["json_mode"] is True

    @pytest.mark.asyncio
    async def test_malformed_response(self, mock_llm_service):
        """测试:响应不是 JSON"""
        mock_llm_service.chat.return_value = "Olá! Como posso ajudar?"

        with pytest.raises(DeserializationError):
            await TriageAgent(mock_llm_service).classify([])


class TestKnowledgeMatchAgent:
    """KnowledgeMatchAgent 测试"""

    @pytest.mark.asyncio
    async def test_without_dao_uses_json_mode(self, mock_llm_service):
        mock_llm_service.chat.return_value = '{"is_known": false, "message_for_user": "?", "is_complex": false}'

        result = await KnowledgeMatchAgent(mock_llm_service).analyze("Problema do Usuário: x")

        assert result.known is False
        mock_llm_service.chat_with_tools.assert_not_called()

    @pytest.mark.asyncio
    async def test_with_dao_offers_knowledge_tool(self, mock_llm_service, dao):
        """测试:提供 DAO 时注册 get_known_issues 工具"""
        mock_llm_service.chat_with_tools.return_value = ToolChatResult(
            content='{"is_known": true, "message_for_user": "senha", "is_complex": false}',
        )

        result = await KnowledgeMatchAgent(mock_llm_service, dao).analyze("Problema do Usuário: senha")

        assert result.known is True
        tools = mock_llm_service.chat_with_tools.call_args.args[1]
        assert tools.list_tools() == ["get_known_issues"]


class TestResolutionAgent:
    """ResolutionAgent 测试"""

    @pytest.mark.asyncio
    async def test_resolve_extracts_message(self, mock_llm_service):
        mock_llm_service.chat_with_tools.return_value = ToolChatResult(
            content='{"message_for_user": "Conta desbloqueada."}',
            tool_calls=[
                ToolCallRecord(name="UnlockAccount", output=True),
                ToolCallRecord(name="SendEmail", success=False, error_message="x"),
                ToolCallRecord(name="UnlockAccount", output=True),
            ],
        )

        reply = await ResolutionAgent(mock_llm_service, ToolRegistry()).resolve("prompt")

        assert reply.message == "Conta desbloqueada."
        assert reply.confirmed_tools() == ["UnlockAccount"]


def test_resolution_reply_defaults():
    assert ResolutionReply().confirmed_tools() == []
