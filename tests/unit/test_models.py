"""数据模型单元测试"""
from datetime import timedelta

from supportflow.models import (
    ClassificationResult,
    ConversationTurn,
    KnowledgeMatchResult,
    KnownIssueRecord,
    ResolutionOutcome,
    Urgency,
)


class TestClassificationResult:
    """ClassificationResult 测试"""

    def test_parse_by_alias(self):
        """测试:按推理服务字段名解析"""
        result = ClassificationResult.model_validate({
            "is_understood": True,
            "question_for_user": "",
            "summary": "esqueci minha senha",
            "urgency": "high",
        })

        assert result.understood is True
        assert result.summary == "esqueci minha senha"
        assert result.urgency == Urgency.HIGH

    def test_portuguese_urgency(self):
        """测试:葡萄牙语紧急程度标签"""
        assert ClassificationResult(urgency="Crítica").urgency == Urgency.CRITICAL
        assert ClassificationResult(urgency="baixa").urgency == Urgency.LOW

    def test_unknown_urgency_becomes_none(self):
        """测试:无法识别的紧急程度"""
        assert ClassificationResult(urgency="urgentíssimo").urgency is None
        assert ClassificationResult(urgency="").urgency is None


class TestKnownIssueRecord:
    """KnownIssueRecord 测试"""

    def test_parse_knowledge_base_fields(self):
        """测试:知识库字段解析"""
        record = KnownIssueRecord.model_validate({
            "problema": "Senha esquecida",
            "keywords": ["senha"],
            "solucao": "Resetar",
            "requer_acao": True,
            "acao_mcp": "reset",
            "taxa_sucesso": 0.9,
            "prazo_resolucao": "00:05:00",
            "tools_required": ["SendEmail"],
        })

        assert record.problem == "Senha esquecida"
        assert record.action_required is True
        assert record.resolution_time == timedelta(minutes=5)
        assert record.tools_required == ["SendEmail"]

    def test_matches_case_insensitive(self):
        """测试:关键词匹配大小写不敏感"""
        record = KnownIssueRecord(keywords=["Senha", "login"])

        assert record.matches(["SENHA"])
        assert record.matches(["outra", "LOGIN"])
        assert not record.matches(["pagamento"])


class TestKnowledgeMatchResult:
    """KnowledgeMatchResult 测试"""

    def test_parse_minimal_schema(self):
        """测试:基础 schema"""
        result = KnowledgeMatchResult.model_validate({
            "is_known": True,
            "message_for_user": "Problema conhecido",
            "is_complex": False,
        })

        assert result.known is True
        assert result.complex is False
        assert result.matched_issue is None
        assert result.required_tools == []
        assert result.success_rate == 0.0

    def test_null_fields_are_normalized(self):
        """测试:扩展字段为 null 或非对象"""
        result = KnowledgeMatchResult.model_validate({
            "is_known": False,
            "message_for_user": None,
            "is_complex": True,
            "matched_issue": "texto livre",
            "required_tools": None,
            "success_rate": None,
        })

        assert result.message == ""
        assert result.matched_issue is None
        assert result.required_tools == []
        assert result.success_rate == 0.0


class TestResolutionOutcome:
    """ResolutionOutcome 测试"""

    def test_defaults(self):
        outcome = ResolutionOutcome()

        assert outcome.resolved is False
        assert outcome.requires_human is False
        assert outcome.actions_executed == []
        assert outcome.escalation_reason is None


def test_conversation_turn_to_message():
    """测试:转换为 chat 消息"""
    turn = ConversationTurn(role="user", content="oi")
    assert turn.to_message() == {"role": "user", "content": "oi"}
