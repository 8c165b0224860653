"""支持会话端到端测试

真实的阶段与路由图，推理服务用 mock 替代，交互通道使用预设回复。
"""
import json
from unittest.mock import AsyncMock, Mock

import pytest

from supportflow.core.channel import ScriptedChannel
from supportflow.core.driver import run_session
from supportflow.core.events import WorkflowEventType
from supportflow.core.graph import build_graph
from supportflow.exceptions import ReasoningServiceError
from supportflow.services.llm_service import ToolChatResult
from supportflow.tools import ToolCallRecord


def triage_json(understood=True, summary="", question=""):
    return json.dumps({
        "is_understood": understood,
        "question_for_user": question,
        "summary": summary,
        "urgency": "high",
    })


def match_result(known, complex, message):
    return ToolChatResult(content=json.dumps({
        "is_known": known,
        "message_for_user": message,
        "is_complex": complex,
    }))


@pytest.fixture
def llm_service():
    """创建 mock LLM 服务"""
    service = Mock()
    service.chat = AsyncMock()
    service.chat_with_tools = AsyncMock()
    return service


class SessionRecorder:
    """收集事件"""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    def stages(self):
        return [e.stage for e in self.events if e.type == WorkflowEventType.STAGE_STARTED]

    def outputs(self, result_type):
        return [e.data for e in self.events if e.type == WorkflowEventType.OUTPUT and e.result_type == result_type]

    def messages(self, speaker):
        return [e.content for e in self.events if e.type == WorkflowEventType.MESSAGE and e.speaker == speaker]


class TestSupportScenarios:
    """典型会话场景"""

    @pytest.mark.asyncio
    async def test_known_issue_resolved(self, config, dao, llm_service):
        """场景:已知问题自动处理，用户确认已解决"""
        llm_service.chat.return_value = triage_json(summary="esqueci minha senha")
        llm_service.chat_with_tools.side_effect = [
            match_result(True, False, "Problema de senha conhecido. Vamos desbloquear a conta."),
            ToolChatResult(
                content="Desbloqueei sua conta e enviei um email de redefinição.",
                tool_calls=[ToolCallRecord(name="UnlockAccount", output=True)],
            ),
        ]
        recorder = SessionRecorder()
        channel = ScriptedChannel(["esqueci minha senha", "sim"])

        outcome = await run_session(build_graph(config, llm_service, dao), channel, on_event=recorder)

        assert outcome.resolved is True
        assert outcome.requires_human is False
        assert outcome.actions_executed == ["UnlockAccount", "SendEmail"]
        assert recorder.stages() == ["triage", "knowledge_match", "resolution"]
        match = recorder.outputs("KnowledgeMatchResult")[0]
        assert match["known"] is True
        assert match["matched_issue"]["problem"] == "Senha esquecida"
        assert channel.prompts == ["Como posso ajudar?", "Seu problema foi resolvido? (sim/não)"]

    @pytest.mark.asyncio
    async def test_unknown_issue_forced_escalation(self, config, dao, llm_service):
        """场景:5 轮仍无法判定，强制转人工"""
        llm_service.chat.return_value = triage_json(summary="o sistema está estranho")
        llm_service.chat_with_tools.return_value = match_result(False, False, "Pode dar mais detalhes?")
        recorder = SessionRecorder()
        channel = ScriptedChannel(["o sistema está estranho", "r1", "r2", "r3", "r4", "r5", "ok", "obrigado"])

        outcome = await run_session(build_graph(config, llm_service, dao), channel, on_event=recorder)

        assert llm_service.chat_with_tools.call_count == 5
        forced = recorder.outputs("KnowledgeMatchResult")[-1]
        assert forced["known"] is False
        assert forced["complex"] is True
        assert recorder.stages()[-1] == "escalation"
        assert outcome.requires_human is False
        assert outcome.resolved is True
        assert channel.remaining == 0

    @pytest.mark.asyncio
    async def test_knowledge_match_error_is_fatal(self, config, dao, llm_service):
        """场景:第二轮推理服务出错，推送降级结果后会话异常结束"""
        llm_service.chat.return_value = triage_json(summary="problema")
        llm_service.chat_with_tools.side_effect = [
            match_result(False, False, "Qual sistema?"),
            ReasoningServiceError("timeout"),
        ]
        recorder = SessionRecorder()

        with pytest.raises(ReasoningServiceError):
            await run_session(
                build_graph(config, llm_service, dao),
                ScriptedChannel(["problema", "o portal"]),
                on_event=recorder,
            )

        degraded = recorder.outputs("KnowledgeMatchResult")[-1]
        assert degraded == {
            "known": False,
            "complex": True,
            "message": "Ocorreu um erro durante a análise: timeout",
            "matched_issue": None,
            "required_tools": [],
            "success_rate": 0.0,
        }
        assert "escalation" not in recorder.stages()
        assert recorder.events[-1].type == WorkflowEventType.FAILED

    @pytest.mark.asyncio
    async def test_resolution_not_confirmed_is_terminal(self, config, dao, llm_service):
        """场景:用户回复“não”，不再转人工"""
        llm_service.chat.return_value = triage_json(summary="esqueci minha senha")
        llm_service.chat_with_tools.side_effect = [
            match_result(True, False, "Problema de senha conhecido"),
            ToolChatResult(content="Tente novamente."),
        ]
        recorder = SessionRecorder()

        outcome = await run_session(
            build_graph(config, llm_service, dao),
            ScriptedChannel(["esqueci minha senha", "não"]),
            on_event=recorder,
        )

        assert outcome.resolved is False
        assert outcome.requires_human is True
        assert outcome.escalation_reason
        assert "escalation" not in recorder.stages()

    @pytest.mark.asyncio
    async def test_escalation_access_problem(self, config, dao, llm_service):
        """场景:复杂的访问问题转人工，用户回复“valeu”"""
        llm_service.chat.return_value = triage_json(summary="sem acesso")
        llm_service.chat_with_tools.return_value = match_result(False, True, "Problema de acesso ao sistema")
        recorder = SessionRecorder()

        outcome = await run_session(
            build_graph(config, llm_service, dao),
            ScriptedChannel(["não tenho acesso", "ok", "valeu"]),
            on_event=recorder,
        )

        assert outcome.resolved is True
        assert outcome.actions_executed == ["HumanSupport"]
        specialist = recorder.messages("ESPECIALISTA HUMANO")
        assert specialist == [
            "Seu acesso foi bloqueado por segurança. Vou desbloqueá-lo e enviar um email "
            "com instruções para resetar sua senha."
        ]
        assert "resolution" not in recorder.stages()

    @pytest.mark.asyncio
    async def test_triage_bounded(self, config, dao, llm_service):
        """场景:Triage 达到迭代上限后使用兜底摘要继续"""
        llm_service.chat.return_value = triage_json(understood=False, question="Pode explicar?")
        llm_service.chat_with_tools.return_value = match_result(False, True, "complexo")
        channel = ScriptedChannel(["ajuda", "a", "b", "c", "d", "e", "ok", "ok"])

        outcome = await run_session(build_graph(config, llm_service, dao), channel)

        assert llm_service.chat.call_count == 5
        prompt = llm_service.chat_with_tools.call_args.args[0][0]["content"]
        assert prompt == "Problema do Usuário: ajuda a b c d e"
        assert outcome.requires_human is False
