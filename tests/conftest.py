"""测试公共夹具"""
import json
from pathlib import Path
import sys
from typing import List

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from supportflow.core.events import WorkflowEvent, WorkflowEventType
from supportflow.core.session import SessionContext
from supportflow.core.stages import StageContext
from supportflow.dao.known_issue_dao import KnownIssueDAO, clear_cache
from supportflow.utils.config import Config, LLMConfig, WorkflowConfig


KNOWN_ISSUES = [
    {
        "problema": "Senha esquecida",
        "sintomas": ["não consegue entrar"],
        "keywords": ["senha", "login"],
        "solucao": "Desbloquear a conta e enviar email de redefinição.",
        "requer_acao": True,
        "acao_mcp": "unlock_and_reset",
        "taxa_sucesso": 0.95,
        "prazo_resolucao": "00:05:00",
        "tools_required": ["UnlockAccount", "SendEmail"],
    },
    {
        "problema": "Pagamento recusado",
        "sintomas": ["cartão expirado"],
        "keywords": ["Pagamento", "cartão"],
        "solucao": "Enviar email para atualizar dados de cobrança.",
        "requer_acao": True,
        "acao_mcp": "billing_update",
        "taxa_sucesso": 0.8,
        "prazo_resolucao": "00:30:00",
        "tools_required": ["SendEmail"],
    },
    {
        "problema": "Login lento",
        "sintomas": ["demora ao entrar"],
        "keywords": ["login", "lento"],
        "solucao": "Aguardar manutenção.",
        "requer_acao": False,
        "acao_mcp": "",
        "taxa_sucesso": 0.5,
        "prazo_resolucao": "01:00:00",
        "tools_required": [],
    },
]


@pytest.fixture(autouse=True)
def _clear_kb_cache():
    """每个测试前后清空知识库缓存"""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def kb_file(tmp_path):
    """临时知识库文件"""
    path = tmp_path / "known_issues.json"
    path.write_text(json.dumps(KNOWN_ISSUES, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def dao(kb_file):
    return KnownIssueDAO(str(kb_file))


@pytest.fixture
def config(kb_file):
    """无延迟的测试配置"""
    return Config(
        llm=LLMConfig(api_base="http://test/v1", api_key="test-key", max_retries=2, retry_delay=0),
        workflow=WorkflowConfig(knowledge_base_path=str(kb_file), simulated_delay_scale=0),
    )


class RecordingContext(StageContext):
    """记录事件并按预设回复应答的阶段上下文"""

    def __init__(self, stage: str, replies: List[str] = None, session: SessionContext = None):
        self.events: List[WorkflowEvent] = []
        self.prompts: List[str] = []
        self._replies = list(replies or [])
        super().__init__(stage, session or SessionContext(), self._record, self._answer)

    async def _record(self, event: WorkflowEvent) -> None:
        self.events.append(event)

    async def _answer(self, stage: str, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._replies.pop(0)

    def outputs(self) -> List[WorkflowEvent]:
        return [e for e in self.events if e.type == WorkflowEventType.OUTPUT]

    def messages(self) -> List[WorkflowEvent]:
        return [e for e in self.events if e.type == WorkflowEventType.MESSAGE]


@pytest.fixture
def make_context():
    """创建 RecordingContext 的工厂"""
    return RecordingContext
