"""
平台检测 - mac / linux / windows 自动适配

检测当前操作系统，提供平台相关的命令差异适配。
"""
import platform
import re
import shlex
from enum import Enum


class PlatformType(str, Enum):
    """支持的平台类型"""
    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


def detect_platform() -> PlatformType:
    """
    检测当前操作系统平台

    Returns:
        PlatformType: 当前平台类型
    """
    system = platform.system().lower()
    if system == "darwin":
        return PlatformType.MACOS
    elif system == "linux":
        return PlatformType.LINUX
    elif system == "windows":
        return PlatformType.WINDOWS
    return PlatformType.UNKNOWN


def get_open_command(target: str) -> str:
    """
    获取打开应用 / URL 的命令

    Args:
        target: 应用名或 URL

    Returns:
        str: macOS 使用 open（应用名加 -a），Windows 使用 start，其余使用 xdg-open
    """
    p = detect_platform()
    if p == PlatformType.MACOS:
        if "://" in target:
            return f"open {shlex.quote(target)}"
        return f"open -a {shlex.quote(target)}"
    if p == PlatformType.WINDOWS:
        return f'start "" "{target}"'
    return f"xdg-open {shlex.quote(target)}"


def get_notify_command(title: str, message: str) -> str:
    """
    获取发送桌面通知的命令

    Args:
        title: 通知标题
        message: 通知内容

    Returns:
        str: 平台对应的通知命令
    """
    p = detect_platform()
    if p == PlatformType.MACOS:
        script = f"display notification {_applescript_str(message)} with title {_applescript_str(title)}"
        return f"osascript -e {shlex.quote(script)}"
    if p == PlatformType.WINDOWS:
        return f'msg * "{_cmd_str(title)}: {_cmd_str(message)}"'
    return f"notify-send {shlex.quote(title)} {shlex.quote(message)}"


def _applescript_str(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _cmd_str(text: str) -> str:
    return re.sub(r'["&|<>^%]', "", text)
