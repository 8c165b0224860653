"""知识库查询工具"""

from typing import List

from pydantic import BaseModel, Field

from supportflow.dao.known_issue_dao import KnownIssueDAO
from supportflow.tools.base import BaseTool


class GetKnownIssuesInput(BaseModel):
    """get_known_issues 输入"""
    keywords: List[str] = Field(description="Palavras-chave (pt-BR), uma palavra por item")


class GetKnownIssuesTool(BaseTool[GetKnownIssuesInput]):
    """按关键词查询已知问题"""

    def __init__(self, dao: KnownIssueDAO):
        self._dao = dao

    @property
    def name(self) -> str:
        return "get_known_issues"

    @property
    def description(self) -> str:
        return "Busca problemas conhecidos para um conjunto de palavras-chave em pt-BR."

    @property
    def input_schema(self) -> type[GetKnownIssuesInput]:
        return GetKnownIssuesInput

    async def execute(self, input: GetKnownIssuesInput) -> list:
        issues = self._dao.find_by_keywords(input.keywords)
        return [issue.model_dump(mode="json", by_alias=True) for issue in issues]
