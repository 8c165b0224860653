"""异常层次

所有 supportflow 自定义异常的定义。

用法:
    try:
        outcome = await run_session(graph, channel)
    except ConfigurationError:
        # 启动前配置错误，直接退出
    except DeserializationError as e:
        # 推理服务返回的结构化响应无法解析
    except SupportFlowError:
        # 其他致命错误
"""

from typing import Optional, Dict, Any


class SupportFlowError(Exception):
    """supportflow 异常基类

    Attributes:
        message: 可读的错误描述
        details: 附加上下文
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（用于日志）"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(SupportFlowError):
    """配置缺失或无效，在任何阶段运行之前抛出"""


class DeserializationError(SupportFlowError):
    """推理服务的结构化响应解析失败

    Attributes:
        raw_response: 原始响应文本
    """

    def __init__(self, message: str, raw_response: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.raw_response = raw_response


class ReasoningServiceError(SupportFlowError):
    """推理服务调用失败（超时、连接错误、重试耗尽等）"""


class KnowledgeBaseError(SupportFlowError):
    """知识库文件不存在或格式错误

    Attributes:
        path: 知识库文件路径
    """

    def __init__(self, message: str, path: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.path = path


class SessionStateError(SupportFlowError):
    """会话状态不变量被破坏（如问题摘要被重复写入）"""


class RoutingError(SupportFlowError):
    """路由表中不存在的 (阶段, 结果) 组合"""
