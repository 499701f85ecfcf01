"""
blnt 命令行测试
"""
import json
from unittest.mock import AsyncMock, patch

import pytest


def _router(executors):
    from agent_engine.executor_router import ExecutorRouter
    return ExecutorRouter(
        browser=executors["browser"],
        desktop=executors["desktop"],
        terminal=executors["terminal"],
    )


class TestParser:
    """测试参数解析"""

    def test_agent_run_args(self):
        from agent_engine.cli import build_parser
        args = build_parser().parse_args(["agent", "run", "-g", "tidy downloads", "-v"])
        assert args.command == "agent"
        assert args.agent_command == "run"
        assert args.goal == "tidy downloads"
        assert args.agent_verbose is True

    def test_agent_task_args(self):
        from agent_engine.cli import build_parser
        args = build_parser().parse_args(["agent", "task", "-t", "desktop", "-d", "echo hi"])
        assert args.task_type == "desktop"
        assert args.description == "echo hi"

    def test_config_set_args(self):
        from agent_engine.cli import build_parser
        args = build_parser().parse_args(["--config", "x.json", "config", "set", "agent.verbose", "true"])
        assert args.config == "x.json"
        assert (args.key, args.value) == ("agent.verbose", "true")


class TestGoalTasks:
    """测试目标拆解"""

    def test_build_goal_tasks(self):
        from agent_engine.cli import build_goal_tasks
        from agent_engine.models import TaskType
        tasks = build_goal_tasks("ship it")
        assert [t.id for t in tasks] == ["task-1", "task-2"]
        assert tasks[0].type == TaskType.TERMINAL
        assert tasks[0].description == "Analyze goal: ship it"
        assert tasks[1].type == TaskType.COMPOSITE
        assert tasks[1].subtasks == []


class TestCommands:
    """测试各子命令"""

    def test_agent_run(self, executors, config_path, capsys):
        from agent_engine.cli import main
        with patch("agent_engine.cli.ExecutorRouter.from_settings", return_value=_router(executors)):
            code = main(["--config", str(config_path), "agent", "run", "-g", "ship it"])
        out = capsys.readouterr().out
        assert code == 0
        executors["terminal"].assert_awaited_once_with("Analyze goal: ship it")
        assert "已完成: 2" in out

    def test_agent_run_survives_failure(self, executors, config_path, capsys):
        from agent_engine.cli import main
        executors["terminal"].side_effect = RuntimeError("no llm")
        with patch("agent_engine.cli.ExecutorRouter.from_settings", return_value=_router(executors)):
            code = main(["--config", str(config_path), "agent", "run", "-g", "ship it"])
        out = capsys.readouterr().out
        assert code == 0
        assert "no llm" in out
        assert "已完成: 1" in out

    def test_agent_run_prompts_for_goal(self, executors, config_path):
        from agent_engine.cli import main
        with patch("agent_engine.cli.ExecutorRouter.from_settings", return_value=_router(executors)), \
                patch("builtins.input", side_effect=["", "from prompt"]):
            code = main(["--config", str(config_path), "agent", "run"])
        assert code == 0
        executors["terminal"].assert_awaited_once_with("Analyze goal: from prompt")

    def test_agent_task_success(self, executors, config_path, capsys):
        from agent_engine.cli import main
        with patch("agent_engine.cli.ExecutorRouter.from_settings", return_value=_router(executors)):
            code = main(["--config", str(config_path), "agent", "task", "-t", "desktop", "-d", "echo hi"])
        assert code == 0
        assert "✅" in capsys.readouterr().out

    def test_agent_task_unknown_type(self, executors, config_path, capsys):
        from agent_engine.cli import main
        with patch("agent_engine.cli.ExecutorRouter.from_settings", return_value=_router(executors)):
            code = main(["--config", str(config_path), "agent", "task", "-t", "unknown-type", "-d", "x"])
        assert code == 1
        assert "未知任务类型" in capsys.readouterr().out
        for executor in executors.values():
            executor.assert_not_awaited()

    def test_agent_status(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path), "agent", "status"]) == 0
        assert "Agent Status" in capsys.readouterr().out

    def test_desktop_exec(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path), "desktop", "exec", "echo from-cli"]) == 0
        assert "from-cli" in capsys.readouterr().out

    def test_desktop_exec_rejected(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path), "desktop", "exec", "sudo ls"]) == 1
        assert "安全拒绝" in capsys.readouterr().out

    def test_query(self, config_path, capsys):
        from agent_engine.cli import main
        from agent_engine.executors.llm_executor import LLMEndpoint
        from config.settings import LLMProviderType
        endpoint = LLMEndpoint(LLMProviderType.OLLAMA, "http://localhost:11434")
        with patch("agent_engine.cli.LLMExecutor.resolve_endpoint", AsyncMock(return_value=endpoint)), \
                patch("agent_engine.cli.LLMExecutor.chat", AsyncMock(return_value="Paris")):
            code = main(["--config", str(config_path), "query", "capital of France?"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Ollama (Local)" in out
        assert "Paris" in out

    def test_config_roundtrip(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path), "config", "set", "agent.verbose", "true"]) == 0
        assert json.loads(config_path.read_text())["agent"]["verbose"] is True
        capsys.readouterr()

        assert main(["--config", str(config_path), "config", "get", "agent.verbose"]) == 0
        assert capsys.readouterr().out.strip() == "true"

    def test_config_set_unknown_key(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path), "config", "set", "agent.nope", "1"]) == 1
        assert not config_path.exists()

    def test_config_set_invalid_value(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path), "config", "set", "agent.timeout", "-1"]) == 1

    def test_config_show(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path), "config", "show"]) == 0
        out = capsys.readouterr().out
        assert '"max_concurrent_tasks": 3' in out
        assert str(config_path) in out

    def test_no_command_prints_help(self, config_path, capsys):
        from agent_engine.cli import main
        assert main(["--config", str(config_path)]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_context_includes_file(self, config_path, tmp_path, capsys):
        from agent_engine.cli import main
        from agent_engine.executors.llm_executor import LLMEndpoint
        from config.settings import LLMProviderType
        (tmp_path / "BLNT.md").write_text("blnt drives a browser", encoding="utf-8")
        endpoint = LLMEndpoint(LLMProviderType.OLLAMA, "http://localhost:11434")
        chat = AsyncMock(return_value="A terminal tool")
        with patch("agent_engine.cli.LLMExecutor.resolve_endpoint", AsyncMock(return_value=endpoint)), \
                patch("agent_engine.cli.LLMExecutor.chat", chat):
            code = main(["--config", str(config_path), "context", "What is this?"])
        assert code == 0
        prompt = chat.await_args.args[0]
        assert prompt == "Context:\nblnt drives a browser\n\nQuestion: What is this?"
        assert "A terminal tool" in capsys.readouterr().out

    def test_context_missing_file_asks_plain_query(self, config_path, capsys):
        from agent_engine.cli import main
        from agent_engine.executors.llm_executor import LLMEndpoint
        from config.settings import LLMProviderType
        endpoint = LLMEndpoint(LLMProviderType.OLLAMA, "http://localhost:11434")
        chat = AsyncMock(return_value="ok")
        with patch("agent_engine.cli.LLMExecutor.resolve_endpoint", AsyncMock(return_value=endpoint)), \
                patch("agent_engine.cli.LLMExecutor.chat", chat):
            code = main(["--config", str(config_path), "context", "-f", "NOPE.md", "hi"])
        assert code == 0
        assert chat.await_args.args[0] == "hi"
        assert "NOPE.md" in capsys.readouterr().out

    def test_chat_session(self, config_path, capsys):
        from agent_engine.cli import main
        from agent_engine.executors.llm_executor import LLMEndpoint
        from config.settings import LLMProviderType
        endpoint = LLMEndpoint(LLMProviderType.OLLAMA, "http://localhost:11434")
        chat = AsyncMock(side_effect=[RuntimeError("busy"), "hello back"])
        with patch("agent_engine.cli.LLMExecutor.resolve_endpoint", AsyncMock(return_value=endpoint)), \
                patch("agent_engine.cli.LLMExecutor.chat", chat), \
                patch("builtins.input", side_effect=["hi", "", "hello", "exit"]):
            code = main(["--config", str(config_path), "chat"])
        out = capsys.readouterr().out
        assert code == 0
        assert chat.await_count == 2
        assert "busy" in out
        assert "AI: hello back" in out

    def test_chat_ends_on_eof(self, config_path):
        from agent_engine.cli import main
        from agent_engine.executors.llm_executor import LLMEndpoint
        from config.settings import LLMProviderType
        endpoint = LLMEndpoint(LLMProviderType.OLLAMA, "http://localhost:11434")
        with patch("agent_engine.cli.LLMExecutor.resolve_endpoint", AsyncMock(return_value=endpoint)), \
                patch("builtins.input", side_effect=EOFError):
            assert main(["--config", str(config_path), "chat"]) == 0

    def test_browser_open_passes_target_through(self, config_path, capsys):
        from agent_engine.cli import main
        page = {"url": "http://localhost:3000/", "title": "Dev"}
        with patch("agent_engine.cli.BrowserExecutor.open", AsyncMock(return_value=page)) as mock_open, \
                patch("agent_engine.cli.BrowserExecutor.close", AsyncMock()):
            code = main(["--config", str(config_path), "browser", "open", "localhost:3000"])
        assert code == 0
        assert mock_open.await_args.args[0] == "http://localhost:3000"
        assert "Dev" in capsys.readouterr().out
