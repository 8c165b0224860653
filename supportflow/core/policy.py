"""迭代策略

所有循环阶段共享同一个有界迭代策略，保证每个阶段都能终止。
"""

from pydantic import BaseModel, Field

from supportflow.utils.config import WorkflowConfig


class IterationPolicy(BaseModel):
    """有界迭代策略

    Attributes:
        max_iterations: 单个阶段最多调用推理服务的次数
    """
    max_iterations: int = Field(default=5, ge=1)

    @classmethod
    def from_config(cls, config: WorkflowConfig) -> "IterationPolicy":
        return cls(max_iterations=config.max_iterations)

    def attempts(self) -> range:
        """迭代序号 1..max_iterations"""
        return range(1, self.max_iterations + 1)
