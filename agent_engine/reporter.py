"""
报告生成器 - 任务结果与引擎状态的文本输出

只读取引擎 / 任务状态，不持有任何状态。
"""
import json
from typing import Any, Iterable, List

from .models import AgentStatus, Task, TaskStatus, TaskType


def format_result(result: Any) -> str:
    if result is None:
        return ""
    if isinstance(result, str):
        return result.rstrip("\n")
    try:
        return json.dumps(result, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(result)


def report(task: Task) -> str:
    """
    生成单个任务的执行报告

    Args:
        task: 任意状态的任务

    Returns:
        str: 一行摘要（复合任务附带子任务缩进行）
    """
    lines: List[str] = [_summary_line(task)]
    for subtask in task.subtasks or []:
        for line in report(subtask).splitlines():
            lines.append(f"  {line}")
    return "\n".join(lines)


def _summary_line(task: Task) -> str:
    if task.status == TaskStatus.COMPLETED:
        detail = format_result(task.result) if task.type != TaskType.COMPOSITE else ""
        return f"✅ [{task.id}] {task.description}" + (f": {detail}" if detail else "")

    if task.status == TaskStatus.FAILED:
        return f"❌ [{task.id}] {task.description}: {task.error}"

    if task.status == TaskStatus.RUNNING:
        return f"⚙️ [{task.id}] {task.description}"

    return f"⏳ [{task.id}] {task.description}"


def format_status(status: AgentStatus) -> str:
    return (
        "📊 状态:\n"
        f"   已完成: {status.completed}\n"
        f"   运行中: {status.running}\n"
        f"   排队中: {status.queued}"
    )


def summarize(tasks: Iterable[Task]) -> str:
    """多个任务的报告，逐个拼接"""
    return "\n".join(report(task) for task in tasks)
