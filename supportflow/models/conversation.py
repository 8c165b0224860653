"""会话模型

本模块定义会话相关模型：
- ConversationTurn: 一轮发言
- SessionState: 会话状态快照
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


Role = Literal["user", "assistant"]


class ConversationTurn(BaseModel):
    """一轮发言（只追加，不修改）"""

    role: Role
    content: str
    created_at: datetime = Field(default_factory=datetime.now)

    def to_message(self) -> dict:
        """转换为 chat completions 消息格式"""
        return {"role": self.role, "content": self.content}


class SessionState(BaseModel):
    """会话状态快照

    Attributes:
        session_id: 会话 ID
        scope: 状态作用域
        turns: 按时间排序的对话历史
        problem_summary: Triage 确认后的问题摘要
    """

    session_id: str
    scope: str
    turns: List[ConversationTurn] = Field(default_factory=list)
    problem_summary: Optional[str] = None

    @property
    def user_turns(self) -> List[ConversationTurn]:
        """用户发言"""
        return [t for t in self.turns if t.role == "user"]
