"""数据访问层

- KnownIssueDAO: 已知问题知识库（JSON 文件）
"""
from supportflow.dao.known_issue_dao import (
    KnownIssueDAO,
    get_default_kb_path,
    clear_cache,
)

__all__ = [
    "KnownIssueDAO",
    "get_default_kb_path",
    "clear_cache",
]
