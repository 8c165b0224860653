"""已知问题 DAO

知识库是一个 JSON 数组文件，每个元素对应一条 KnownIssueRecord。
解析结果在进程内按文件路径缓存，通过 reload / invalidate 显式刷新。
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from supportflow.exceptions import KnowledgeBaseError
from supportflow.models import KnownIssueRecord


logger = logging.getLogger(__name__)

KNOWN_ISSUES_FILENAME = "known_issues.json"

# 进程级缓存: 文件路径 -> 解析后的条目
_CACHE: Dict[str, List[KnownIssueRecord]] = {}


def get_default_kb_path() -> str:
    """获取默认知识库路径

    优先从环境变量 DATA_DIR 读取，否则使用项目根目录的 data/known_issues.json
    """
    data_dir = os.environ.get("DATA_DIR")
    if data_dir:
        return str(Path(data_dir) / KNOWN_ISSUES_FILENAME)
    project_root = Path(__file__).parent.parent.parent
    return str(project_root / "data" / KNOWN_ISSUES_FILENAME)


def clear_cache() -> None:
    """清空所有知识库缓存"""
    _CACHE.clear()


class KnownIssueDAO:
    """已知问题数据访问对象"""

    def __init__(self, kb_path: Optional[str] = None):
        """
        初始化 DAO

        Args:
            kb_path: 知识库文件路径，如果为 None 则使用默认路径（优先环境变量 DATA_DIR）
        """
        if kb_path is None:
            kb_path = get_default_kb_path()

        self.kb_path = str(Path(kb_path).resolve())

    def get_all(self) -> List[KnownIssueRecord]:
        """获取全部条目（首次访问时解析文件）

        Raises:
            KnowledgeBaseError: 文件不存在或格式错误
        """
        if self.kb_path not in _CACHE:
            _CACHE[self.kb_path] = self._load()
        return list(_CACHE[self.kb_path])

    def reload(self) -> List[KnownIssueRecord]:
        """重新解析文件并刷新缓存"""
        self.invalidate()
        return self.get_all()

    def invalidate(self) -> None:
        """使当前文件的缓存失效"""
        _CACHE.pop(self.kb_path, None)

    def find_by_keywords(self, keywords: Iterable[str]) -> List[KnownIssueRecord]:
        """查询关键词相交的条目（大小写不敏感，保持文件顺序）

        Args:
            keywords: 候选关键词

        Returns:
            匹配的条目列表
        """
        candidates = [k for k in keywords if k]
        if not candidates:
            return []
        return [issue for issue in self.get_all() if issue.matches(candidates)]

    def find_first(self, keywords: Iterable[str]) -> Optional[KnownIssueRecord]:
        """返回第一个匹配的条目"""
        matches = self.find_by_keywords(keywords)
        return matches[0] if matches else None

    def _load(self) -> List[KnownIssueRecord]:
        path = Path(self.kb_path)
        if not path.exists():
            raise KnowledgeBaseError(f"知识库文件不存在: {path}", path=str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise KnowledgeBaseError(f"知识库解析失败: {e}", path=str(path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise KnowledgeBaseError(f"无法读取知识库文件 {path}: {e}", path=str(path)) from e

        if not isinstance(data, list):
            raise KnowledgeBaseError("知识库格式错误：根元素必须是数组", path=str(path))

        try:
            issues = [KnownIssueRecord.model_validate(item) for item in data]
        except ValidationError as e:
            raise KnowledgeBaseError(f"知识库条目格式错误: {e}", path=str(path)) from e

        logger.info(f"已加载知识库 {path}，共 {len(issues)} 条")
        return issues
