"""
编排引擎 - 队列 → 分发 → 生命周期跟踪

核心编排器，负责：
1. 接收任务入队（task-queued）
2. 按 FIFO 顺序取出任务并分发到执行器（task-start）
3. 复合任务按顺序递归执行子任务，任一失败立即终止（fail-fast）
4. 记录结果或错误，维护 运行中 / 已完成 集合（task-complete / task-error）
5. 提供状态快照
"""
from typing import Any, Dict, List, Optional

from loguru import logger

from config.settings import AgentOptions
from .events import EventEmitter, TaskEvent
from .exceptions import UnknownTaskTypeError
from .executor_router import ExecutorRouter
from .models import AgentStatus, Task, TaskStatus, TaskType
from .task_queue import TaskQueue


class AgentEngine:
    """
    自主任务引擎

    使用方式：
        engine = AgentEngine(AgentOptions(), ExecutorRouter.from_settings(settings))
        engine.add_task(Task(id="task-1", description="echo hi", type="desktop"))
        await engine.process_tasks()
        engine.get_status()  # AgentStatus(queued=0, running=0, completed=1)

    执行严格串行：drain 循环等待每个任务结束后才取下一个，
    max_concurrent_tasks / timeout / retry_attempts 只保存不消费。
    """

    def __init__(
        self,
        options: Optional[AgentOptions] = None,
        router: Optional[ExecutorRouter] = None,
        events: Optional[EventEmitter] = None,
    ) -> None:
        self._options = options or AgentOptions()
        self._router = router or ExecutorRouter.from_settings()
        self._events = events or EventEmitter()
        self._queue = TaskQueue()
        self._running: Dict[str, Task] = {}
        self._completed: List[Task] = []

    @property
    def options(self) -> AgentOptions:
        return self._options

    @property
    def router(self) -> ExecutorRouter:
        return self._router

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def running_tasks(self) -> List[Task]:
        return list(self._running.values())

    @property
    def completed_tasks(self) -> List[Task]:
        return list(self._completed)

    def add_task(self, task: Task) -> None:
        """任务入队，总是成功"""
        self._queue.enqueue(task)
        logger.debug(f"📥 [AgentEngine] 入队: id={task.id}, type={task.type_name}, desc='{task.description}'")
        self._events.emit(TaskEvent.QUEUED, task)

    async def execute_task(self, task: Task) -> Any:
        """
        执行单个任务

        Args:
            task: 要执行的任务

        Returns:
            Any: 执行器返回的结果；复合任务返回子任务结果列表

        Raises:
            UnknownTaskTypeError: 任务类型无法识别（不调用任何执行器）
            Exception: 执行器抛出的原始异常（不做包装）
        """
        task.status = TaskStatus.RUNNING
        self._running[task.id] = task
        logger.info(f"⚙️ [AgentEngine] 执行: {task.description} (id={task.id}, type={task.type_name})")
        self._events.emit(TaskEvent.START, task)

        try:
            result = await self._dispatch(task)
        except Exception as error:
            task.error = error
            task.result = None
            task.status = TaskStatus.FAILED
            self._running.pop(task.id, None)
            logger.error(f"❌ [AgentEngine] 失败: {task.description} (id={task.id})")
            self._events.emit(TaskEvent.ERROR, task, error)
            raise

        task.result = result
        task.error = None
        task.status = TaskStatus.COMPLETED
        self._running.pop(task.id, None)
        self._completed.append(task)
        logger.info(f"✅ [AgentEngine] 完成: {task.description} (id={task.id})")
        self._events.emit(TaskEvent.COMPLETE, task)
        return result

    async def _dispatch(self, task: Task) -> Any:
        task_type = task.type
        if task_type == TaskType.COMPOSITE:
            return await self._execute_composite(task)
        if task_type in (TaskType.BROWSER, TaskType.DESKTOP, TaskType.TERMINAL):
            return await self._router.route(task_type, task.description)
        raise UnknownTaskTypeError(task.type_name)

    async def _execute_composite(self, task: Task) -> List[Any]:
        """
        顺序执行子任务

        任一子任务失败时立即停止，后续子任务不会启动，
        异常原样向上抛出，由外层把复合任务标记为失败。
        """
        results: List[Any] = []
        subtasks = task.subtasks or []
        for index, subtask in enumerate(subtasks):
            logger.debug(f"🧩 [AgentEngine] 子任务[{index + 1}/{len(subtasks)}]: parent={task.id}, id={subtask.id}")
            results.append(await self.execute_task(subtask))
        return results

    async def process_tasks(self) -> List[Task]:
        """
        排空队列

        每个顶层任务的失败只记录，不会中断后续任务。

        Returns:
            List[Task]: 本次处理过的任务（按出队顺序）
        """
        processed: List[Task] = []
        logger.info(f"📋 [AgentEngine] 开始处理队列: queued={len(self._queue)}")

        while True:
            task = self._queue.dequeue_next()
            if task is None:
                break
            processed.append(task)
            try:
                await self.execute_task(task)
            except Exception as error:
                if self._options.verbose:
                    logger.opt(exception=error).error(f"❌ [AgentEngine] 任务 {task.id} 失败: {error}")
                else:
                    logger.debug(f"❌ [AgentEngine] 任务 {task.id} 失败: {error}")

        failed = sum(1 for t in processed if t.status == TaskStatus.FAILED)
        logger.info(f"🏁 [AgentEngine] 队列处理完毕: processed={len(processed)}, failed={failed}")
        return processed

    def get_status(self) -> AgentStatus:
        return AgentStatus(
            queued=len(self._queue),
            running=len(self._running),
            completed=len(self._completed),
        )

    def clear_completed(self) -> None:
        self._completed = []
