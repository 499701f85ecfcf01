"""
浏览器生命周期管理 - Playwright Chromium 实例

由 BrowserExecutor 持有，按需启动浏览器，多个任务共享同一实例。
"""
import asyncio
from typing import Optional

from loguru import logger

from config.settings import BrowserConfig

try:
    from playwright.async_api import async_playwright, Browser, BrowserContext, Playwright
except ImportError:
    async_playwright = None  # type: ignore
    Browser = None  # type: ignore
    BrowserContext = None  # type: ignore
    Playwright = None  # type: ignore


class BrowserManager:
    """
    Playwright 浏览器管理器

    同一个管理器内只有一个浏览器实例，避免重复启动。
    """

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self.config = config or BrowserConfig()
        self._playwright: Optional["Playwright"] = None
        self._browser: Optional["Browser"] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get_browser(self) -> "Browser":
        """
        获取或创建浏览器实例

        Returns:
            Browser: Playwright 浏览器实例

        Raises:
            RuntimeError: playwright 未安装
        """
        if async_playwright is None:
            raise RuntimeError(
                "playwright 未安装，请运行: pip install playwright && python -m playwright install chromium"
            )

        async with self._lock:
            if not self.is_running:
                logger.info(
                    f"🌐 [BrowserManager] 启动 Chromium 浏览器 "
                    f"(headless={self.config.headless}, slow_mo={self.config.slow_mo})"
                )
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless,
                    slow_mo=self.config.slow_mo,
                    args=[
                        "--no-sandbox",
                        "--disable-dev-shm-usage",
                    ],
                )
            return self._browser

    async def new_context(self) -> "BrowserContext":
        """
        创建新的浏览器上下文（独立的 cookie / 存储）

        Returns:
            BrowserContext: 浏览器上下文
        """
        browser = await self.get_browser()
        options = {"viewport": {"width": 1280, "height": 720}}
        if self.config.record_video:
            options["record_video_dir"] = self.config.video_dir
        return await browser.new_context(**options)

    async def close(self) -> None:
        """关闭浏览器和 Playwright 实例"""
        async with self._lock:
            if self._browser:
                try:
                    await self._browser.close()
                except Exception as e:
                    logger.debug(f"🌐 [BrowserManager] 关闭浏览器异常: {e}")
                self._browser = None
            if self._playwright:
                try:
                    await self._playwright.stop()
                except Exception as e:
                    logger.debug(f"🌐 [BrowserManager] 停止 Playwright 异常: {e}")
                self._playwright = None
                logger.info("🌐 [BrowserManager] 浏览器已关闭")
