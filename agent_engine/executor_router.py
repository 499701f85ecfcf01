"""
执行器路由 - browser / desktop / terminal 分发

根据 TaskType 将任务描述路由到对应的能力执行器。
执行器在构造时显式传入，没有全局缓存。
"""
from typing import Any, Awaitable, Callable, Optional, Union

from config.settings import Settings
from .exceptions import UnknownTaskTypeError
from .models import TaskType

# 能力执行器：接收任务描述，返回任意结果，失败时抛异常
CapabilityExecutor = Callable[[str], Awaitable[Any]]


class ExecutorRouter:
    """
    执行器路由表

    使用方式：
        router = ExecutorRouter(browser=..., desktop=..., terminal=...)
        result = await router.route(TaskType.DESKTOP, "echo hi")
    """

    def __init__(
        self,
        browser: CapabilityExecutor,
        desktop: CapabilityExecutor,
        terminal: CapabilityExecutor,
    ) -> None:
        self.browser = browser
        self.desktop = desktop
        self.terminal = terminal

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ExecutorRouter":
        """使用默认执行器（Playwright / OS shell / LLM）构建路由"""
        from .executors import BrowserExecutor, DesktopExecutor, LLMExecutor

        settings = settings or Settings()
        return cls(
            browser=BrowserExecutor(settings.browser),
            desktop=DesktopExecutor(settings.desktop),
            terminal=LLMExecutor(settings.llm),
        )

    def resolve(self, task_type: Union[TaskType, str]) -> CapabilityExecutor:
        """
        获取任务类型对应的执行器

        Raises:
            UnknownTaskTypeError: 未知类型，或复合任务（由引擎自行展开）
        """
        if task_type == TaskType.BROWSER:
            return self.browser
        if task_type == TaskType.DESKTOP:
            return self.desktop
        if task_type == TaskType.TERMINAL:
            return self.terminal
        raise UnknownTaskTypeError(getattr(task_type, "value", task_type))

    async def route(self, task_type: Union[TaskType, str], description: str) -> Any:
        executor = self.resolve(task_type)
        return await executor(description)

    async def close(self) -> None:
        """关闭持有外部资源的执行器（例如浏览器）"""
        for executor in (self.browser, self.desktop, self.terminal):
            close = getattr(executor, "close", None)
            if close is not None:
                await close()
