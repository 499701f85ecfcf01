"""
配置文件管理 - ~/.blnt/config.json

负责读写 JSON 配置文件，并通过 Settings 做校验：
- load(): 文件缺失或损坏时回退到默认值 + 环境变量
- get/set: 使用点号路径访问，例如 "agent.verbose"
- save/reset: 持久化或恢复默认
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger
from pydantic import BaseModel, ValidationError

from config.settings import Settings

DEFAULT_CONFIG_PATH = Path.home() / ".blnt" / "config.json"


def _coerce(value: Any) -> Any:
    """命令行传入的字符串尽量按 JSON 解析（true / 3 / "x"），失败则原样返回"""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


class ConfigManager:
    """
    配置管理器

    使用方式：
        manager = ConfigManager()
        settings = manager.load()
        manager.set("agent.verbose", "true")
        manager.save()
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path).expanduser() if path else DEFAULT_CONFIG_PATH
        self._settings: Settings = Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def load(self) -> Settings:
        """
        读取配置文件

        文件中的值优先于环境变量，环境变量优先于默认值。

        Returns:
            Settings: 校验后的配置
        """
        data: Dict[str, Any] = {}
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8")) or {}
            except (OSError, ValueError) as e:
                logger.warning(f"⚠️ [ConfigManager] 配置文件读取失败，使用默认配置: {self.path} ({e})")
                data = {}

        if not isinstance(data, dict):
            logger.warning(f"⚠️ [ConfigManager] 配置文件格式错误，使用默认配置: {self.path}")
            data = {}

        try:
            self._settings = Settings(**data)
        except ValidationError as e:
            logger.warning(f"⚠️ [ConfigManager] 配置校验失败，使用默认配置: {e}")
            self._settings = Settings()

        logger.debug(f"⚙️ [ConfigManager] 已加载配置: {self.path}")
        return self._settings

    def save(self) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self.as_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info(f"💾 [ConfigManager] 配置已保存到 {self.path}")
        return self.path

    def as_dict(self) -> Dict[str, Any]:
        return self._settings.model_dump(mode="json")

    def get(self, key: str) -> Any:
        """
        按点号路径读取配置值

        Raises:
            KeyError: 路径不存在
        """
        node: Any = self.as_dict()
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                raise KeyError(key)
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> Any:
        """
        按点号路径修改配置值（只修改内存，需调用 save 持久化）

        Args:
            key: 形如 "section.field" 的路径
            value: 新值；字符串会先尝试按 JSON 解析

        Returns:
            Any: 校验后的新值

        Raises:
            KeyError: 路径不存在
            ValidationError: 值不合法
        """
        parts = key.split(".")
        section_name = parts[0]
        section = getattr(self._settings, section_name, None)
        if len(parts) < 2 or not isinstance(section, BaseModel):
            raise KeyError(key)

        section_data = section.model_dump()
        node = section_data
        for part in parts[1:-1]:
            if not isinstance(node.get(part), dict):
                raise KeyError(key)
            node = node[part]
        if parts[-1] not in node:
            raise KeyError(key)

        node[parts[-1]] = _coerce(value)
        try:
            new_section = type(section).model_validate(section_data)
        except ValidationError:
            if not isinstance(value, str) or node[parts[-1]] == value:
                raise
            # 例如 api_key="123"：JSON 解析成数字后不合法，退回原始字符串
            node[parts[-1]] = value
            new_section = type(section).model_validate(section_data)
        self._settings = self._settings.model_copy(update={section_name: new_section})
        return self.get(key)

    def reset(self) -> Settings:
        self._settings = Settings()
        self.save()
        logger.info("♻️ [ConfigManager] 配置已恢复默认")
        return self._settings
