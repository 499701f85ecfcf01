"""
Test configuration
"""
import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from loguru import logger

# Add project root to path
src_path = Path(__file__).parent.parent
sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Drop BLNT_* variables and run from an empty directory so no .env leaks in"""
    for key in list(os.environ):
        if key.upper().startswith("BLNT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # cli.setup_logging binds sinks to the captured stream of the finished test
    logger.remove()
    logger.add(lambda message: sys.stderr.write(message), level="DEBUG")


@pytest.fixture
def executors():
    """AsyncMock capability executors keyed by task type"""
    return {
        "browser": AsyncMock(return_value={"url": "https://example.com/", "title": "Example"}),
        "desktop": AsyncMock(return_value="hi\n"),
        "terminal": AsyncMock(return_value="answer"),
    }


@pytest.fixture
def router(executors):
    from agent_engine.executor_router import ExecutorRouter
    return ExecutorRouter(
        browser=executors["browser"],
        desktop=executors["desktop"],
        terminal=executors["terminal"],
    )


@pytest.fixture
def engine(router):
    from agent_engine.engine import AgentEngine
    from config.settings import AgentOptions
    return AgentEngine(AgentOptions(), router)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "blnt" / "config.json"
