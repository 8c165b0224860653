"""会话状态存储

- SessionStateStore: 作用域键值存储（覆盖写，后写优先）
- SessionContext: 在阶段之间按引用传递的类型化会话上下文

键名只在本模块内出现，阶段通过 SessionContext 的类型化接口读写状态。
单个存储实例只服务一个会话，不做加锁。
"""
import uuid
from typing import Any, Dict, List, Optional

from supportflow.exceptions import SessionStateError
from supportflow.models import ConversationTurn, SessionState


# 状态作用域与键
TRIAGE_STATE_SCOPE = "TriageState"
CONVERSATION_HISTORY_KEY = "conversation_history"
PROBLEM_SUMMARY_KEY = "problem_summary"


class SessionStateStore:
    """作用域键值存储

    无过期、不跨进程持久化。
    """

    def __init__(self):
        self._scopes: Dict[str, Dict[str, Any]] = {}

    def read(self, scope: str, key: str, default: Any = None) -> Any:
        """读取值，不存在时返回 default"""
        return self._scopes.get(scope, {}).get(key, default)

    def write(self, scope: str, key: str, value: Any) -> None:
        """写入值（覆盖）"""
        self._scopes.setdefault(scope, {})[key] = value


class SessionContext:
    """类型化会话上下文

    Attributes:
        session_id: 会话 ID
        scope: 状态作用域
    """

    def __init__(
        self,
        store: Optional[SessionStateStore] = None,
        scope: str = TRIAGE_STATE_SCOPE,
        session_id: Optional[str] = None,
    ):
        self._store = store or SessionStateStore()
        self.scope = scope
        self.session_id = session_id or str(uuid.uuid4())[:8]

    @property
    def store(self) -> SessionStateStore:
        return self._store

    @property
    def history(self) -> List[ConversationTurn]:
        """对话历史（副本）"""
        return list(self._store.read(self.scope, CONVERSATION_HISTORY_KEY, []))

    def save_history(self, turns: List[ConversationTurn]) -> None:
        """整体覆盖对话历史"""
        self._store.write(self.scope, CONVERSATION_HISTORY_KEY, list(turns))

    def add_user_turn(self, content: str) -> ConversationTurn:
        """追加用户发言"""
        return self._append(ConversationTurn(role="user", content=content))

    def add_assistant_turn(self, content: str) -> ConversationTurn:
        """追加助手发言"""
        return self._append(ConversationTurn(role="assistant", content=content))

    def _append(self, turn: ConversationTurn) -> ConversationTurn:
        turns = self.history
        turns.append(turn)
        self.save_history(turns)
        return turn

    @property
    def problem_summary(self) -> Optional[str]:
        return self._store.read(self.scope, PROBLEM_SUMMARY_KEY)

    def set_problem_summary(self, summary: str) -> None:
        """写入问题摘要（只能写一次）

        Raises:
            SessionStateError: 摘要已存在
        """
        if self.problem_summary is not None:
            raise SessionStateError(
                "问题摘要已写入，不允许修改",
                details={"session_id": self.session_id},
            )
        self._store.write(self.scope, PROBLEM_SUMMARY_KEY, summary)

    def snapshot(self) -> SessionState:
        """获取当前会话状态快照"""
        return SessionState(
            session_id=self.session_id,
            scope=self.scope,
            turns=self.history,
            problem_summary=self.problem_summary,
        )
