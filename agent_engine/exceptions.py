"""
编排引擎异常体系

- AgentEngineError: 所有引擎相关异常的基类
- UnknownTaskTypeError: 无法识别的任务类型，不调用任何执行器
- ExecutorError: 执行器失败的基类（执行器异常原样透传，不做包装）
"""
from typing import Any, Optional


class AgentEngineError(Exception):
    """引擎异常基类"""


class UnknownTaskTypeError(AgentEngineError):
    """无法识别的任务类型"""

    def __init__(self, task_type: Any):
        self.task_type = task_type
        super().__init__(f"未知任务类型: {task_type}")


class ExecutorError(AgentEngineError):
    """执行器失败基类"""


class CommandRejectedError(ExecutorError):
    """命令命中危险操作黑名单"""

    def __init__(self, command: str, pattern: str):
        self.command = command
        self.pattern = pattern
        super().__init__(f"安全拒绝：命令包含危险操作 ({pattern})")


class CommandFailedError(ExecutorError):
    """命令以非零退出码结束"""

    def __init__(self, command: str, returncode: Optional[int], stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "无错误输出"
        super().__init__(f"命令失败 (exit {returncode}): {detail}")


class CommandTimeoutError(ExecutorError):
    """命令执行超时"""

    def __init__(self, command: str, timeout: float):
        self.command = command
        self.timeout = timeout
        super().__init__(f"命令执行超时（{timeout:g}秒）: {command}")


class BrowserTaskError(ExecutorError):
    """浏览器任务无法执行"""


class LLMUnavailableError(ExecutorError):
    """没有可用的 LLM 后端"""


class LLMRequestError(ExecutorError):
    """LLM 接口调用失败"""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)
