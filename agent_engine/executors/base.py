"""
执行器抽象基类
"""
from abc import ABC, abstractmethod
from typing import Any


class BaseExecutor(ABC):
    """
    能力执行器抽象基类

    每个非复合任务类型对应一个执行器：接收任务描述，返回任意结果，
    失败时直接抛出异常（由引擎记录到 Task.error）。
    """

    name: str = "base"

    async def __call__(self, description: str) -> Any:
        return await self.execute(description)

    @abstractmethod
    async def execute(self, description: str) -> Any:
        """子类实现具体执行逻辑"""
        ...

    async def close(self) -> None:
        """释放执行器持有的外部资源，默认无操作"""
        return None
