"""推理服务响应解析"""

import json
import re
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from supportflow.exceptions import DeserializationError


TModel = TypeVar("TModel", bound=BaseModel)

FENCE_OPEN_PATTERN = re.compile(r"^```\w*\n?")
FENCE_CLOSE_PATTERN = re.compile(r"\n?```$")


def strip_code_fence(response: str) -> str:
    """去除 markdown 代码块包裹"""
    response = (response or "").strip()
    if response.startswith("```"):
        response = FENCE_OPEN_PATTERN.sub("", response)
        response = FENCE_CLOSE_PATTERN.sub("", response)
    return response.strip()


def parse_json_object(response: str) -> dict:
    """解析 JSON 对象

    Raises:
        DeserializationError: 不是合法 JSON 或根元素不是对象
    """
    text = strip_code_fence(response)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DeserializationError(f"响应不是合法 JSON: {e}", raw_response=response) from e

    if not isinstance(data, dict):
        raise DeserializationError("响应 JSON 根元素必须是对象", raw_response=response)
    return data


def parse_model(response: str, model_cls: Type[TModel]) -> TModel:
    """把响应解析为指定的结构化结果

    Raises:
        DeserializationError: JSON 非法或字段不符合 schema
    """
    data = parse_json_object(response)
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise DeserializationError(
            f"响应不符合 {model_cls.__name__} 格式: {e}",
            raw_response=response,
        ) from e


def extract_message(response: str, field: str = "message_for_user") -> str:
    """从自由文本或 JSON 响应中取出给用户的消息

    JSON 对象且含有 field 时返回该字段，否则原样返回文本。
    """
    text = strip_code_fence(response)
    if not text.startswith("{"):
        return (response or "").strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return (response or "").strip()
    if isinstance(data, dict):
        message: Optional[str] = data.get(field)
        if message:
            return str(message)
    return (response or "").strip()
