"""离线演示

用一个按系统提示分派的脚本化客户端代替 AsyncOpenAI，不访问网络：
- Triage: 第一轮追问，第二轮给出摘要
- KnowledgeMatch: 先调用 get_known_issues，再判定为已知问题
- Resolution: 调用 UnlockAccount 和 SendEmail 后给出说明
"""
import json
from types import SimpleNamespace
from typing import Dict, List, Optional

from rich.console import Console
from rich.text import Text

from supportflow.agents import KnowledgeMatchAgent, TriageAgent
from supportflow.core.channel import ScriptedChannel
from supportflow.utils.config import Config, LLMConfig, WorkflowConfig


DEMO_EMAIL = "ana@example.com"

DEMO_REPLIES = [
    "Não consigo entrar na minha conta",
    f"Esqueci a senha e a conta ficou bloqueada. Meu email é {DEMO_EMAIL}",
    "sim",
]


def build_demo_config(kb_path: Optional[str] = None) -> Config:
    """演示配置（无模拟延迟）"""
    return Config(
        llm=LLMConfig(api_base="http://localhost/v1", api_key="demo", max_retries=1),
        workflow=WorkflowConfig(knowledge_base_path=kb_path, simulated_delay_scale=0),
    )


def _completion(content: Optional[str] = None, tool_calls: Optional[List[SimpleNamespace]] = None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls or None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _tool_call(call_id: str, name: str, arguments: Dict) -> SimpleNamespace:
    return SimpleNamespace(
        id=call_id,
        function=SimpleNamespace(name=name, arguments=json.dumps(arguments, ensure_ascii=False)),
    )


class ScriptedCompletions:
    """脚本化的 chat.completions 接口"""

    def __init__(self):
        self.calls: List[Dict] = []

    async def create(self, messages: List[Dict], **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        system = messages[0]["content"] if messages and messages[0]["role"] == "system" else ""
        has_tool_result = any(m["role"] == "tool" for m in messages)

        if system == TriageAgent.SYSTEM_PROMPT:
            return self._triage(messages)
        if system == KnowledgeMatchAgent.SYSTEM_PROMPT:
            return self._knowledge_match(has_tool_result)
        return self._resolution(has_tool_result)

    def _triage(self, messages: List[Dict]):
        user_turns = [m for m in messages if m["role"] == "user"]
        if len(user_turns) < 2:
            return _completion(json.dumps({
                "is_understood": False,
                "question_for_user": "O que acontece quando tenta entrar? Qual é o email da conta?",
                "summary": "",
                "urgency": "medium",
            }, ensure_ascii=False))
        return _completion(json.dumps({
            "is_understood": True,
            "question_for_user": "",
            "summary": f"Cliente esqueceu a senha e a conta {DEMO_EMAIL} está bloqueada.",
            "urgency": "high",
        }, ensure_ascii=False))

    def _knowledge_match(self, has_tool_result: bool):
        if not has_tool_result:
            return _completion(tool_calls=[
                _tool_call("call_kb", "get_known_issues", {"keywords": ["senha", "bloqueada"]}),
            ])
        return _completion(json.dumps({
            "is_known": True,
            "is_complex": False,
            "message_for_user": "Problema conhecido: senha esquecida e conta bloqueada. "
                                "Vamos desbloquear a conta e enviar um email de redefinição.",
        }, ensure_ascii=False))

    def _resolution(self, has_tool_result: bool):
        if not has_tool_result:
            return _completion(tool_calls=[
                _tool_call("call_unlock", "UnlockAccount", {
                    "account_identifier": DEMO_EMAIL,
                    "reason": "bloqueio por tentativas de login",
                }),
                _tool_call("call_email", "SendEmail", {
                    "recipient_email": DEMO_EMAIL,
                    "email_type": "reset_password",
                }),
            ])
        return _completion(json.dumps({
            "message_for_user": f"Desbloqueei a sua conta e enviei um email de redefinição de senha para {DEMO_EMAIL}.",
        }, ensure_ascii=False))


class ScriptedClient:
    """替代 AsyncOpenAI 的最小客户端"""

    def __init__(self):
        self.completions = ScriptedCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


class EchoScriptedChannel(ScriptedChannel):
    """回显提示与预设回复的脚本通道"""

    def __init__(self, replies: List[str], console: Console):
        super().__init__(replies)
        self.console = console

    async def _read(self, prompt: str) -> Optional[str]:
        reply = await super()._read(prompt)
        text = Text()
        text.append(f"{prompt} ", style="bold")
        text.append(reply, style="green")
        self.console.print(text)
        return reply
