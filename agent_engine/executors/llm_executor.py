"""
LLM 执行器 - 终端任务交给语言模型回答

通过 aiohttp 调用 OpenAI 兼容的 /v1/chat/completions 接口。
后端选择由 LLMConfig.provider 显式决定：
- ollama：本地 Ollama（OpenAI 兼容接口）
- openai：远程 API，需要 api_key
- auto：优先探测本地 Ollama，不可用时回退到远程 API
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
from loguru import logger

from config.settings import LLMConfig, LLMProviderType
from ..exceptions import LLMRequestError, LLMUnavailableError
from .base import BaseExecutor

# Ollama 探测超时（秒）
_PROBE_TIMEOUT: float = 2.0


@dataclass(frozen=True)
class LLMEndpoint:
    """已选定的 LLM 后端"""
    provider: LLMProviderType
    base_url: str
    api_key: Optional[str] = None

    @property
    def label(self) -> str:
        if self.provider == LLMProviderType.OLLAMA:
            return "Ollama (Local)"
        return "OpenAI API"


class LLMExecutor(BaseExecutor):
    """LLM 问答执行器"""

    name = "terminal"

    def __init__(self, config: Optional[LLMConfig] = None) -> None:
        self.config = config or LLMConfig()
        self._endpoint: Optional[LLMEndpoint] = None

    async def is_ollama_available(self) -> bool:
        url = f"{self.config.ollama_url.rstrip('/')}/api/tags"
        try:
            timeout = aiohttp.ClientTimeout(total=_PROBE_TIMEOUT)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    return response.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"🔌 [LLMExecutor] Ollama 不可用: {url} ({e})")
            return False

    async def resolve_endpoint(self) -> LLMEndpoint:
        """
        选定 LLM 后端（结果缓存在实例上）

        Raises:
            LLMUnavailableError: 没有可用后端
        """
        if self._endpoint is not None:
            return self._endpoint

        provider = self.config.provider
        remote = LLMEndpoint(LLMProviderType.OPENAI, self.config.api_url, self.config.api_key)
        local = LLMEndpoint(LLMProviderType.OLLAMA, self.config.ollama_url)

        if provider == LLMProviderType.OLLAMA:
            endpoint = local
        elif provider == LLMProviderType.OPENAI:
            if not self.config.api_key:
                raise LLMUnavailableError("未配置 API Key：blnt config set llm.api_key YOUR_API_KEY")
            endpoint = remote
        elif await self.is_ollama_available():
            endpoint = local
        elif self.config.api_key:
            endpoint = remote
        else:
            raise LLMUnavailableError(
                "未检测到 Ollama 且未配置 API Key。请启动 Ollama "
                f"({self.config.ollama_url}) 或执行 blnt config set llm.api_key YOUR_API_KEY"
            )

        logger.info(f"📡 [LLMExecutor] 使用后端: {endpoint.label}")
        self._endpoint = endpoint
        return endpoint

    async def chat(self, message: str, model: Optional[str] = None) -> str:
        """
        发送单条用户消息并返回回复文本

        Args:
            message: 用户消息
            model: 模型名，默认使用配置中的 model

        Returns:
            str: 模型回复

        Raises:
            LLMUnavailableError: 没有可用后端
            LLMRequestError: 接口返回非 200 或格式错误
        """
        endpoint = await self.resolve_endpoint()
        payload = {
            "model": model or self.config.model,
            "messages": [{"role": "user", "content": message}],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
        result = await self._post_chat(endpoint, payload)

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise LLMRequestError(f"LLM 返回格式错误: {str(result)[:200]}")

        return (content or "").strip()

    async def _post_chat(self, endpoint: LLMEndpoint, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if endpoint.api_key:
            headers["Authorization"] = f"Bearer {endpoint.api_key}"

        api_url = f"{endpoint.base_url.rstrip('/')}/v1/chat/completions"
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

        logger.debug(f"🚀 [LLMExecutor] 请求: model={payload['model']}, url={api_url}")
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(api_url, json=payload, headers=headers) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error(f"❌ [LLMExecutor] LLM API 错误: {response.status} - {error_text}")
                        raise LLMRequestError(
                            f"LLM API 错误 {response.status}: {error_text[:200]}",
                            status=response.status,
                        )
                    try:
                        return await response.json()
                    except ValueError as e:
                        raise LLMRequestError(f"LLM 返回格式错误: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"❌ [LLMExecutor] LLM 请求失败: {e}")
            raise LLMRequestError(f"LLM 请求失败: {e}") from e

    async def execute(self, description: str) -> str:
        if not description or not description.strip():
            raise ValueError("终端任务缺少内容")
        logger.info(f"🤖 [LLMExecutor] 查询: {description}")
        return await self.chat(description)
