"""
浏览器执行器 - 基于 Playwright 的页面访问

从任务描述中提取 URL，在独立的浏览器上下文里打开页面，
返回最终地址和页面标题。
"""
import re
from typing import Any, Dict, Optional

from loguru import logger

from config.settings import BrowserConfig
from ..exceptions import BrowserTaskError
from .base import BaseExecutor
from .browser_manager import BrowserManager

_URL_RE = re.compile(r"https?://[^\s\"'<>]+", re.IGNORECASE)
_LOCAL_RE = re.compile(r"\b(?:localhost|\d{1,3}(?:\.\d{1,3}){3})(?::\d+)?(?:/[^\s\"'<>]*)?", re.IGNORECASE)
_DOMAIN_RE = re.compile(r"\b(?:[a-z0-9-]+\.)+[a-z]{2,}(?:/[^\s\"'<>]*)?", re.IGNORECASE)


def extract_url(description: str) -> Optional[str]:
    """
    从任务描述中提取第一个 URL

    裸域名（example.com）自动补全 https://，localhost / IP 地址补全 http://

    Returns:
        Optional[str]: URL，未找到返回 None
    """
    match = _URL_RE.search(description)
    if match:
        return match.group(0).rstrip(".,;)")

    match = _LOCAL_RE.search(description)
    if match:
        return "http://" + match.group(0).rstrip(".,;)")

    match = _DOMAIN_RE.search(description)
    if match:
        return "https://" + match.group(0).rstrip(".,;)")
    return None


def normalize_url(target: str) -> str:
    """命令行直接给出的地址：带协议原样使用，否则补全协议（不做文本提取）"""
    target = target.strip()
    if "://" in target:
        return target
    if _LOCAL_RE.match(target):
        return "http://" + target
    return "https://" + target


class BrowserExecutor(BaseExecutor):
    """Playwright 浏览器执行器"""

    name = "browser"

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        manager: Optional[BrowserManager] = None,
    ) -> None:
        self.config = config or BrowserConfig()
        self.manager = manager or BrowserManager(self.config)

    async def execute(self, description: str) -> Dict[str, Any]:
        """
        打开任务描述中的页面

        Args:
            description: 包含 URL 的任务描述

        Returns:
            Dict[str, Any]: {"url": 最终地址, "title": 页面标题}

        Raises:
            BrowserTaskError: 描述中没有 URL
            RuntimeError: playwright 未安装
        """
        url = extract_url(description or "")
        if not url:
            raise BrowserTaskError(f"浏览器任务中未找到 URL: {description}")

        return await self.open(url)

    async def open(self, url: str) -> Dict[str, Any]:
        """在新的浏览器上下文中打开 url，返回最终地址和标题"""
        logger.info(f"🌐 [BrowserExecutor] 打开页面: {url}")

        context = await self.manager.new_context()
        try:
            page = await context.new_page()
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.config.navigation_timeout,
            )
            title = await page.title()
            logger.info(f"✅ [BrowserExecutor] 页面已加载: {page.url} ({title})")
            return {"url": page.url, "title": title}
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"🌐 [BrowserExecutor] 关闭上下文异常: {e}")

    async def close(self) -> None:
        await self.manager.close()
