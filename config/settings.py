"""
Configuration settings for blnt
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LLMProviderType(str, Enum):
    AUTO = "auto"
    OLLAMA = "ollama"
    OPENAI = "openai"


class AgentOptions(BaseModel):
    """
    AgentEngine 构造参数

    timeout / retry_attempts 只做校验和保存，引擎本身不消费
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    max_concurrent_tasks: int = Field(default=3, gt=0, alias="maxConcurrentTasks")
    timeout: int = Field(default=60000, gt=0, description="毫秒")
    retry_attempts: int = Field(default=2, ge=0, alias="retryAttempts")
    verbose: bool = False


class BrowserConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    headless: bool = False
    slow_mo: int = Field(default=100, ge=0, alias="slowMo")
    record_video: bool = Field(default=False, alias="recordVideo")
    video_dir: str = "./screenshots/"
    navigation_timeout: int = Field(default=30000, gt=0)  # 毫秒


class DesktopConfig(BaseModel):
    verbose: bool = False
    command_timeout: float = Field(default=30.0, gt=0)  # 秒


class LLMConfig(BaseModel):
    provider: LLMProviderType = LLMProviderType.AUTO
    ollama_url: str = "http://localhost:11434"
    api_url: str = "https://api.openai.com"
    api_key: Optional[str] = None
    model: str = "llama2"
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=1000, gt=0)
    request_timeout: float = Field(default=60.0, gt=0)  # 秒


class GeneralConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    default_editor: str = Field(default="nano", alias="defaultEditor")
    log_level: LogLevel = Field(default=LogLevel.INFO, alias="logLevel")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value


class Settings(BaseSettings):
    # Browser automation (Playwright)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)

    # Agent engine
    agent: AgentOptions = Field(default_factory=AgentOptions)

    # Desktop / OS shell
    desktop: DesktopConfig = Field(default_factory=DesktopConfig)

    # Language model backend
    llm: LLMConfig = Field(default_factory=LLMConfig)

    # Application
    general: GeneralConfig = Field(default_factory=GeneralConfig)

    model_config = SettingsConfigDict(
        env_prefix="BLNT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
