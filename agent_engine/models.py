"""
Task / AgentStatus 数据模型

定义编排引擎的核心数据结构，包括：
- TaskType：任务类型枚举（决定分发到哪个执行器）
- TaskStatus：任务生命周期状态
- Task：任务本体（可递归包含子任务）
- AgentStatus：引擎状态快照
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class TaskType(str, Enum):
    """任务类型"""
    BROWSER = "browser"
    DESKTOP = "desktop"
    TERMINAL = "terminal"
    COMPOSITE = "composite"


class TaskStatus(str, Enum):
    """任务状态"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def _normalize_type(raw: Union[TaskType, str]) -> Union[TaskType, str]:
    """已知类型转成 TaskType，未知值原样保留，交给引擎拒绝"""
    if isinstance(raw, TaskType):
        return raw
    try:
        return TaskType(raw)
    except ValueError:
        return raw


@dataclass
class Task:
    """
    单个任务

    Attributes:
        id: 调用方分配的唯一标识（引擎不去重）
        description: 任务描述，原样传给执行器
        type: 任务类型；未知字符串允许构造，执行时失败
        status: 当前状态，仅由 AgentEngine 修改
        result: 完成后的执行结果
        error: 失败原因
        subtasks: 复合任务的子任务列表（按顺序执行）
    """
    id: str
    description: str
    type: Union[TaskType, str]
    status: TaskStatus = TaskStatus.PENDING
    result: Any = None
    error: Optional[BaseException] = None
    subtasks: Optional[List["Task"]] = None

    def __post_init__(self) -> None:
        self.type = _normalize_type(self.type)
        if self.type == TaskType.COMPOSITE:
            if self.subtasks is None:
                self.subtasks = []
        elif self.subtasks and isinstance(self.type, TaskType):
            raise ValueError(f"非复合任务不能包含子任务: {self.id} ({self.type.value})")

    @property
    def type_name(self) -> str:
        return self.type.value if isinstance(self.type, TaskType) else str(self.type)

    @property
    def is_terminal(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)


@dataclass(frozen=True)
class AgentStatus:
    """引擎状态快照：排队 / 运行中 / 已完成 数量"""
    queued: int = 0
    running: int = 0
    completed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "queued": self.queued,
            "running": self.running,
            "completed": self.completed,
        }
