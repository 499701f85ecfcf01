from .config_manager import ConfigManager, DEFAULT_CONFIG_PATH
from .settings import (
    AgentOptions,
    BrowserConfig,
    DesktopConfig,
    GeneralConfig,
    LLMConfig,
    LLMProviderType,
    LogLevel,
    Settings,
)

__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "AgentOptions",
    "BrowserConfig",
    "DesktopConfig",
    "GeneralConfig",
    "LLMConfig",
    "LLMProviderType",
    "LogLevel",
    "Settings",
]
