"""异常层次单元测试"""
from supportflow.exceptions import (
    ConfigurationError,
    DeserializationError,
    KnowledgeBaseError,
    ReasoningServiceError,
    RoutingError,
    SessionStateError,
    SupportFlowError,
)


def test_hierarchy():
    """测试:所有异常都继承自 SupportFlowError"""
    for cls in (ConfigurationError, ReasoningServiceError, RoutingError, SessionStateError):
        assert issubclass(cls, SupportFlowError)


def test_to_dict():
    error = ReasoningServiceError("timeout", details={"attempts": 3})

    assert str(error) == "timeout"
    assert error.to_dict() == {
        "error_type": "ReasoningServiceError",
        "message": "timeout",
        "details": {"attempts": 3},
    }


def test_extra_attributes():
    assert DeserializationError("bad", raw_response="{").raw_response == "{"
    assert KnowledgeBaseError("missing", path="/tmp/kb.json").path == "/tmp/kb.json"
