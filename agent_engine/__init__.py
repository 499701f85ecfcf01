"""
编排引擎模块 - 浏览器 / 桌面 / LLM 任务的自主执行

核心流程：
入队 → 按 FIFO 取出 → 按类型分发到执行器（复合任务递归展开）→ 记录结果 / 错误 → 状态汇总
"""
from .engine import AgentEngine
from .events import EventEmitter, TaskEvent
from .exceptions import AgentEngineError, UnknownTaskTypeError
from .executor_router import ExecutorRouter
from .models import AgentStatus, Task, TaskStatus, TaskType
from .task_queue import TaskQueue

__version__ = "1.0.0"

__all__ = [
    "AgentEngine",
    "AgentEngineError",
    "AgentStatus",
    "EventEmitter",
    "ExecutorRouter",
    "Task",
    "TaskEvent",
    "TaskQueue",
    "TaskStatus",
    "TaskType",
    "UnknownTaskTypeError",
]
