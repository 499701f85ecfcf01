"""
桌面执行器 - 受限的 OS shell 操作

任务描述即命令，另外支持两个快捷动词：
- open <应用名|URL>：使用平台对应的打开命令
- notify <消息>：发送桌面通知

危险命令（rm -rf / sudo / mkfs 等）在启动子进程前即被拒绝；
notify 的消息作为引号参数传入，不做黑名单检查。
"""
import asyncio
import os
import re
import signal
from typing import List, Optional

from loguru import logger

from config.settings import DesktopConfig
from ..exceptions import CommandFailedError, CommandRejectedError, CommandTimeoutError
from .base import BaseExecutor
from .platform import get_notify_command, get_open_command

# 危险命令黑名单正则
_DENY_PATTERNS: List[re.Pattern] = [
    re.compile(r"\brm\s+(-\w+\s+)*-\w*[rR]", re.IGNORECASE),
    re.compile(r"\brm\s+(-\w+\s+)*/", re.IGNORECASE),
    re.compile(r"\bsudo\b", re.IGNORECASE),
    re.compile(r"\bmkfs\b", re.IGNORECASE),
    re.compile(r"\bdd\s+if=", re.IGNORECASE),
    re.compile(r":\(\)\s*\{\s*:\s*\|\s*:\s*&\s*\}\s*;\s*:"),
    re.compile(r"\bchmod\s+(-\w+\s+)*777\s+/", re.IGNORECASE),
    re.compile(r"\bshutdown\b", re.IGNORECASE),
    re.compile(r"\breboot\b", re.IGNORECASE),
]

_VERB_RE = re.compile(r"^\s*(open|notify)\s+(.+?)\s*$", re.IGNORECASE | re.DOTALL)

_NOTIFY_TITLE = "blnt"

# POSIX 下命令在独立进程组中运行，超时时整组杀掉
_USE_PROCESS_GROUP = os.name == "posix"


def check_command(command: str) -> None:
    """
    安全检查

    Raises:
        CommandRejectedError: 命中黑名单
    """
    for pattern in _DENY_PATTERNS:
        if pattern.search(command):
            raise CommandRejectedError(command, pattern.pattern)


def is_notify(description: str) -> bool:
    match = _VERB_RE.match(description)
    return bool(match) and match.group(1).lower() == "notify"


def build_command(description: str) -> str:
    """
    将任务描述翻译为 shell 命令

    Args:
        description: 任务描述

    Returns:
        str: 实际执行的命令
    """
    match = _VERB_RE.match(description)
    if not match:
        return description.strip()

    verb, argument = match.group(1).lower(), match.group(2)
    if verb == "open":
        return get_open_command(argument)
    return get_notify_command(_NOTIFY_TITLE, argument)


class DesktopExecutor(BaseExecutor):
    """桌面 / OS shell 执行器，拒绝危险命令，超时由执行器自身控制"""

    name = "desktop"

    def __init__(self, config: Optional[DesktopConfig] = None) -> None:
        self.config = config or DesktopConfig()

    async def execute(self, description: str) -> str:
        """
        执行桌面任务

        Args:
            description: 命令或 open/notify 快捷动词

        Returns:
            str: 命令标准输出

        Raises:
            ValueError: 描述为空
            CommandRejectedError: 命中危险命令黑名单
            CommandTimeoutError: 超过 command_timeout
            CommandFailedError: 退出码非 0
        """
        if not description or not description.strip():
            raise ValueError("桌面任务缺少命令")

        command = build_command(description)
        if not is_notify(description):
            check_command(command)

        logger.info(f"🖥️ [DesktopExecutor] 执行命令: {command}")
        timeout = self.config.command_timeout

        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=_USE_PROCESS_GROUP,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            _kill(proc)
            await proc.wait()
            logger.warning(f"⏱️ [DesktopExecutor] 命令超时: {command}")
            raise CommandTimeoutError(command, timeout)

        stdout_text = stdout.decode(errors="replace") if stdout else ""
        stderr_text = stderr.decode(errors="replace") if stderr else ""

        if proc.returncode != 0:
            logger.warning(f"❌ [DesktopExecutor] 命令失败 (exit {proc.returncode}): {command}")
            raise CommandFailedError(command, proc.returncode, stderr_text)

        if stderr_text and self.config.verbose:
            logger.warning(f"⚠️ [DesktopExecutor] STDERR: {stderr_text.strip()}")

        return stdout_text


def _kill(proc: asyncio.subprocess.Process) -> None:
    """杀掉 shell 及其派生的子进程，避免子进程继续占用输出管道"""
    try:
        if _USE_PROCESS_GROUP:
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass
