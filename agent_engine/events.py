"""
生命周期事件 - 显式发布 / 订阅

每种事件维护一组监听器回调：
- task-queued   (task)
- task-start    (task)
- task-complete (task)
- task-error    (task, error)

投递是 fire-and-forget：
- 同步监听器按注册顺序调用，异常只记录日志，不影响引擎
- 协程监听器挂到当前事件循环上异步执行，不保证在下一次状态变更前运行
"""
import asyncio
import inspect
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, DefaultDict, List, Set

from loguru import logger


class TaskEvent(str, Enum):
    """任务生命周期事件"""
    QUEUED = "task-queued"
    START = "task-start"
    COMPLETE = "task-complete"
    ERROR = "task-error"


Listener = Callable[..., Any]


class EventEmitter:
    """按事件类型管理监听器列表的简单发布/订阅器"""

    def __init__(self) -> None:
        self._listeners: DefaultDict[TaskEvent, List[Listener]] = defaultdict(list)
        self._pending: Set[asyncio.Future] = set()

    def on(self, event: TaskEvent, listener: Listener) -> Listener:
        """注册监听器，返回监听器本身，便于当作装饰器使用"""
        self._listeners[TaskEvent(event)].append(listener)
        return listener

    def off(self, event: TaskEvent, listener: Listener) -> None:
        listeners = self._listeners.get(TaskEvent(event), [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: TaskEvent) -> List[Listener]:
        return list(self._listeners.get(TaskEvent(event), []))

    def emit(self, event: TaskEvent, *args: Any) -> None:
        """
        广播事件

        Args:
            event: 事件类型
            *args: 传给监听器的参数
        """
        for listener in self.listeners(event):
            try:
                outcome = listener(*args)
            except Exception as e:
                logger.opt(exception=e).warning(
                    f"⚠️ [EventEmitter] 监听器异常: event={event.value}, listener={listener!r}"
                )
                continue

            if inspect.isawaitable(outcome):
                self._schedule(event, outcome)

    def _schedule(self, event: TaskEvent, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # 没有运行中的事件循环：丢弃该次投递
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.warning(f"⚠️ [EventEmitter] 无事件循环，丢弃异步监听器: event={event.value}")
            return

        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)
        future.add_done_callback(lambda f: self._on_done(event, f))

    def _on_done(self, event: TaskEvent, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.opt(exception=error).warning(
                f"⚠️ [EventEmitter] 异步监听器异常: event={event.value}"
            )

    async def drain(self) -> None:
        """等待所有已调度的异步监听器结束（主要用于测试和退出前）"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
