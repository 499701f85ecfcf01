from .base import BaseExecutor
from .browser_executor import BrowserExecutor
from .desktop_executor import DesktopExecutor
from .llm_executor import LLMExecutor

__all__ = [
    "BaseExecutor",
    "BrowserExecutor",
    "DesktopExecutor",
    "LLMExecutor",
]
