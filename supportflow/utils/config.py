"""配置加载模块"""
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from supportflow.exceptions import ConfigurationError


class LLMConfig(BaseModel):
    """LLM 配置"""
    api_base: str
    api_key: str = ""
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    max_tokens: int = 4096
    timeout: float = 30
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = 1

    @field_validator("api_base")
    @classmethod
    def _check_api_base(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"api_base '{value}' 不是有效的 URL")
        return value


class WorkflowConfig(BaseModel):
    """工作流配置"""
    max_iterations: int = Field(default=5, ge=1)  # 所有循环阶段共享的迭代上限
    knowledge_base_path: Optional[str] = None
    greeting: str = "Como posso ajudar?"
    simulated_delay_scale: float = Field(default=1.0, ge=0)  # 0 表示不等待
    require_tool_confirmation: bool = False
    max_tool_rounds: int = Field(default=5, ge=1)


class LoggingConfig(BaseModel):
    """日志配置"""
    level: str = "WARNING"


class Config(BaseModel):
    """全局配置"""
    llm: LLMConfig
    workflow: WorkflowConfig = WorkflowConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，默认按以下顺序查找：
                     1. 环境变量 CONFIG_PATH
                     2. 项目根目录的 config.yaml

    Returns:
        Config: 配置对象

    Raises:
        ConfigurationError: 文件不存在或无法读取、YAML 格式错误、字段校验失败
    """
    if config_path is None:
        # 优先从环境变量读取
        config_path = os.environ.get("CONFIG_PATH")

    if config_path is None:
        # 默认使用项目根目录的 config.yaml
        project_root = Path(__file__).parent.parent.parent
        config_path = project_root / "config.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(
            f"配置文件不存在: {config_path}\n"
            f"请复制 config.yaml.example 并修改为 config.yaml",
            details={"path": str(config_path)},
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"配置文件格式错误: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"无法读取配置文件 {config_path}: {e}",
            details={"path": str(config_path)},
        ) from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError("配置文件格式错误：根元素必须是映射")

    try:
        config = Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"配置校验失败: {e}") from e

    # api_key 未配置时从环境变量读取
    if not config.llm.api_key:
        config.llm.api_key = os.environ.get("OPENAI_API_KEY", "")
    if not config.llm.api_key:
        raise ConfigurationError("未配置 llm.api_key，也未设置环境变量 OPENAI_API_KEY")

    return config
