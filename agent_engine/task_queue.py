"""
任务队列 - FIFO 待执行列表

插入顺序是唯一的排序依据；无优先级、无去重、无容量上限。
"""
from collections import deque
from typing import Deque, Optional

from .models import Task


class TaskQueue:
    """先进先出的任务队列，出队为空时返回 None 而不阻塞"""

    def __init__(self) -> None:
        self._items: Deque[Task] = deque()

    def enqueue(self, task: Task) -> None:
        self._items.append(task)

    def dequeue_next(self) -> Optional[Task]:
        """
        取出队首任务

        Returns:
            Optional[Task]: 队首任务；队列为空时返回 None
        """
        if not self._items:
            return None
        return self._items.popleft()

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
