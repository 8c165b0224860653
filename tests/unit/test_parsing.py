"""推理服务响应解析单元测试"""
import pytest

from supportflow.agents.parsing import extract_message, parse_json_object, parse_model, strip_code_fence
from supportflow.exceptions import DeserializationError
from supportflow.models import ClassificationResult


class TestStripCodeFence:
    """代码块去除测试"""

    def test_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_text(self):
        assert strip_code_fence("  texto  ") == "texto"


class TestParse:
    """JSON 解析测试"""

    def test_parse_json_object(self):
        assert parse_json_object('{"is_known": true}') == {"is_known": True}

    def test_malformed_json(self):
        """测试:非法 JSON"""
        with pytest.raises(DeserializationError) as exc_info:
            parse_json_object("não é json")
        assert exc_info.value.raw_response == "não é json"

    def test_root_must_be_object(self):
        with pytest.raises(DeserializationError):
            parse_json_object("[1, 2]")

    def test_parse_model(self):
        result = parse_model('```json\n{"is_understood": true, "summary": "x"}\n```', ClassificationResult)
        assert result.understood is True

    def test_parse_model_schema_mismatch(self):
        """测试:字段类型不符合 schema"""
        with pytest.raises(DeserializationError):
            parse_model('{"is_understood": "talvez"}', ClassificationResult)


class TestExtractMessage:
    """消息提取测试"""

    def test_free_text(self):
        assert extract_message("Desbloqueei sua conta.") == "Desbloqueei sua conta."

    def test_json_message(self):
        assert extract_message('{"message_for_user": "Pronto!"}') == "Pronto!"

    def test_json_without_field(self):
        assert extract_message('{"other": 1}') == '{"other": 1}'
