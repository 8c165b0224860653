"""Config 模块单元测试"""
import pytest
import yaml

from supportflow.exceptions import ConfigurationError
from supportflow.utils.config import Config, LLMConfig, WorkflowConfig, load_config


class TestConfigModels:
    """配置模型测试"""

    def test_llm_config_defaults(self):
        """测试:LLM 配置默认值"""
        config = LLMConfig(api_base="https://api.test.com", api_key="test-key")

        assert config.model == "gpt-4o-mini"
        assert config.temperature == 0.2
        assert config.max_tokens == 4096
        assert config.max_retries == 3

    def test_llm_config_rejects_invalid_url(self):
        """测试:api_base 必须是 http(s) URL"""
        with pytest.raises(ValueError):
            LLMConfig(api_base="api.test.com")

    def test_workflow_config_defaults(self):
        """测试:工作流配置默认值"""
        config = WorkflowConfig()

        assert config.max_iterations == 5
        assert config.greeting == "Como posso ajudar?"
        assert config.simulated_delay_scale == 1.0
        assert config.require_tool_confirmation is False

    def test_workflow_config_rejects_zero_iterations(self):
        """测试:迭代上限至少为 1"""
        with pytest.raises(ValueError):
            WorkflowConfig(max_iterations=0)


class TestLoadConfig:
    """配置加载测试"""

    def _write(self, tmp_path, data) -> str:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump(data, allow_unicode=True), encoding="utf-8")
        return str(path)

    def test_load_config_from_file(self, tmp_path):
        """测试:从文件加载配置"""
        path = self._write(tmp_path, {
            "llm": {"api_base": "https://api.openai.com/v1", "api_key": "k", "model": "gpt-4"},
            "workflow": {"max_iterations": 3, "simulated_delay_scale": 0},
        })

        config = load_config(path)

        assert isinstance(config, Config)
        assert config.llm.model == "gpt-4"
        assert config.workflow.max_iterations == 3
        assert config.logging.level == "WARNING"

    def test_load_nonexistent_config(self):
        """测试:配置文件不存在"""
        with pytest.raises(ConfigurationError, match="配置文件不存在"):
            load_config("/path/to/nonexistent/config.yaml")

    def test_invalid_yaml(self, tmp_path):
        """测试:YAML 格式错误"""
        path = tmp_path / "config.yaml"
        path.write_text("llm: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_config_path_is_directory(self, tmp_path):
        """测试:路径是目录时转换为 ConfigurationError"""
        with pytest.raises(ConfigurationError, match="无法读取配置文件"):
            load_config(str(tmp_path))

    def test_undecodable_config(self, tmp_path):
        """测试:非 UTF-8 内容转换为 ConfigurationError"""
        path = tmp_path / "config.yaml"
        path.write_bytes(b"llm:\n  api_base: \xff\xfe\n")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_validation_error(self, tmp_path):
        """测试:字段校验失败转换为 ConfigurationError"""
        path = self._write(tmp_path, {"llm": {"api_base": "not-a-url", "api_key": "k"}})

        with pytest.raises(ConfigurationError, match="配置校验失败"):
            load_config(path)

    def test_api_key_from_env(self, tmp_path, monkeypatch):
        """测试:api_key 为空时读取环境变量"""
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        path = self._write(tmp_path, {"llm": {"api_base": "https://api.openai.com/v1"}})

        assert load_config(path).llm.api_key == "env-key"

    def test_missing_api_key(self, tmp_path, monkeypatch):
        """测试:api_key 和环境变量都为空"""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        path = self._write(tmp_path, {"llm": {"api_base": "https://api.openai.com/v1"}})

        with pytest.raises(ConfigurationError, match="api_key"):
            load_config(path)

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        """测试:CONFIG_PATH 环境变量"""
        path = self._write(tmp_path, {"llm": {"api_base": "http://localhost:8000", "api_key": "k"}})
        monkeypatch.setenv("CONFIG_PATH", path)

        assert load_config().llm.api_base == "http://localhost:8000"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
