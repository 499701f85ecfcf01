"""
blnt 命令行入口
===============

使用方法:
  blnt agent run -g "整理下载目录"         # 运行自主 agent
  blnt agent task -t desktop -d "echo hi"  # 执行单个任务
  blnt agent status                        # 查看 agent 状态
  blnt query "What is the capital of France?"
  blnt context "What does this project do?"  # 附带 BLNT.md
  blnt chat                                # 交互式对话
  blnt browser open https://example.com
  blnt desktop exec "uname -a"
  blnt config show | get KEY | set KEY VALUE | reset
"""
import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger
from pydantic import ValidationError

from config.config_manager import ConfigManager
from config.settings import Settings
from . import __version__
from .engine import AgentEngine
from .executor_router import ExecutorRouter
from .executors import BrowserExecutor, DesktopExecutor, LLMExecutor
from .executors.browser_executor import normalize_url
from .models import Task, TaskType
from .reporter import format_result, format_status, report, summarize

_TASK_TYPES = [t.value for t in TaskType]

DEFAULT_CONTEXT_FILE = "BLNT.md"

_CHAT_EXIT_WORDS = ("exit", "quit")

_LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    配置 loguru：stderr 控制台输出 + 可选的滚动日志文件

    Args:
        level: 控制台日志级别
        log_file: 日志文件路径，None 表示不写文件
    """
    logger.remove()
    logger.add(sys.stderr, format=_LOG_FORMAT, level=level)
    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} - {message}",
        )


def _prompt(message: str, validate: Optional[Callable[[str], bool]] = None) -> str:
    while True:
        answer = input(message).strip()
        if validate is None or validate(answer):
            return answer
        print("❌ 输入不能为空")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blnt", description="blnt - 浏览器 / 桌面 / AI 自主操控命令行")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=str, default=None, help="配置文件路径（默认 ~/.blnt/config.json）")
    parser.add_argument("--log-file", type=str, default=None, help="额外写入的日志文件")
    parser.add_argument("--verbose", action="store_true", help="输出调试日志")

    sub = parser.add_subparsers(dest="command")

    # ===== agent =====
    agent = sub.add_parser("agent", help="自主 agent 操作")
    agent_sub = agent.add_subparsers(dest="agent_command")

    run = agent_sub.add_parser("run", help="按目标运行自主 agent")
    run.add_argument("-g", "--goal", type=str, help="agent 目标")
    run.add_argument("-v", "--verbose", dest="agent_verbose", action="store_true", help="输出失败详情")

    task = agent_sub.add_parser("task", help="执行单个任务")
    task.add_argument("-t", "--type", dest="task_type", type=str, help=f"任务类型 ({', '.join(_TASK_TYPES)})")
    task.add_argument("-d", "--description", type=str, help="任务描述")

    agent_sub.add_parser("status", help="查看 agent 状态")

    # ===== query =====
    query = sub.add_parser("query", help="直接向 AI 提问")
    query.add_argument("query", type=str, help="问题")
    query.add_argument("-m", "--model", type=str, help="使用的模型")

    context = sub.add_parser("context", help="附带上下文文件（默认 BLNT.md）向 AI 提问")
    context.add_argument("query", type=str, help="问题")
    context.add_argument("-f", "--file", type=str, default=DEFAULT_CONTEXT_FILE, help="上下文文件")
    context.add_argument("-m", "--model", type=str, help="使用的模型")

    chat = sub.add_parser("chat", help="与 AI 交互式对话")
    chat.add_argument("-m", "--model", type=str, help="使用的模型")

    # ===== browser =====
    browser = sub.add_parser("browser", help="浏览器自动化")
    browser_sub = browser.add_subparsers(dest="browser_command")
    browser_open = browser_sub.add_parser("open", help="打开页面")
    browser_open.add_argument("url", type=str)

    # ===== desktop =====
    desktop = sub.add_parser("desktop", help="桌面 / 系统操作")
    desktop_sub = desktop.add_subparsers(dest="desktop_command")
    desktop_exec = desktop_sub.add_parser("exec", help="执行命令")
    desktop_exec.add_argument("shell_command", type=str)

    # ===== config =====
    config = sub.add_parser("config", help="配置管理")
    config_sub = config.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="显示全部配置")
    config_get = config_sub.add_parser("get", help="读取配置项")
    config_get.add_argument("key", type=str)
    config_set = config_sub.add_parser("set", help="修改配置项")
    config_set.add_argument("key", type=str)
    config_set.add_argument("value", type=str)
    config_sub.add_parser("reset", help="恢复默认配置")

    return parser


# ============================================================
# agent
# ============================================================

def build_goal_tasks(goal: str) -> List[Task]:
    """目标拆解：分析任务 + 空的复合执行任务"""
    return [
        Task(id="task-1", description=f"Analyze goal: {goal}", type=TaskType.TERMINAL),
        Task(id="task-2", description="Execute actions based on analysis", type=TaskType.COMPOSITE, subtasks=[]),
    ]


async def agent_run(settings: Settings, goal: Optional[str], verbose: bool) -> int:
    if not goal:
        goal = _prompt("🎯 agent 目标: ", validate=bool)

    print(f"\n🤖 启动自主 agent，目标: {goal}\n")

    options = settings.agent.model_copy(update={"verbose": verbose or settings.agent.verbose})
    engine = AgentEngine(options, ExecutorRouter.from_settings(settings))
    try:
        for task in build_goal_tasks(goal):
            engine.add_task(task)
        processed = await engine.process_tasks()
    finally:
        await engine.router.close()

    print(summarize(processed))
    print("\n✓ Agent 执行完毕")
    print(format_status(engine.get_status()))
    return 0


async def agent_task(settings: Settings, task_type: Optional[str], description: Optional[str]) -> int:
    if not task_type:
        task_type = _prompt(f"任务类型 ({'/'.join(_TASK_TYPES)}): ", validate=lambda s: s in _TASK_TYPES)
    if not description:
        description = _prompt("任务描述: ", validate=bool)

    engine = AgentEngine(settings.agent, ExecutorRouter.from_settings(settings))
    task = Task(id=f"task-{int(time.time() * 1000)}", description=description, type=task_type)
    try:
        await engine.execute_task(task)
    except Exception as e:
        print(report(task))
        print(f"\n❌ 任务失败: {e}")
        return 1
    finally:
        await engine.router.close()

    print(report(task))
    print("\n✓ 任务执行成功")
    return 0


def agent_status() -> int:
    print("\n=== Agent Status ===\n")
    print("Agent 已就绪，可以执行任务")
    print('使用 "blnt agent run" 启动 agent\n')
    return 0


# ============================================================
# query / browser / desktop
# ============================================================

async def query_command(
    settings: Settings,
    text: str,
    model: Optional[str],
    display: Optional[str] = None,
) -> int:
    executor = LLMExecutor(settings.llm)
    print("🔄 初始化 AI 后端...")
    try:
        endpoint = await executor.resolve_endpoint()
        print(f"📡 使用: {endpoint.label}\n")
        print(f"Query: {display or text}")
        print("━" * 60)
        answer = await executor.chat(text, model=model)
    except Exception as e:
        print(f"\n❌ {e}")
        return 1

    print("\nResponse:")
    print(answer)
    return 0


def build_context_prompt(query: str, context: str) -> str:
    if not context:
        return query
    return f"Context:\n{context}\n\nQuestion: {query}"


async def context_command(settings: Settings, text: str, context_file: str, model: Optional[str]) -> int:
    path = Path(context_file)
    context = ""
    if path.is_file():
        print(f"📄 加载上下文: {context_file}")
        context = path.read_text(encoding="utf-8")
    else:
        print(f"⚠️ 未找到上下文文件: {context_file}，不带上下文继续\n")
    return await query_command(settings, build_context_prompt(text, context), model, display=text)


async def chat_command(settings: Settings, model: Optional[str]) -> int:
    """交互式对话，exit / quit / EOF 结束；单条消息失败不会退出"""
    executor = LLMExecutor(settings.llm)
    try:
        endpoint = await executor.resolve_endpoint()
    except Exception as e:
        print(f"❌ {e}")
        return 1

    print(f"💬 正在与 {endpoint.label} 对话，输入 exit 退出\n")
    while True:
        try:
            message = input("You: ").strip()
        except EOFError:
            break
        if not message:
            continue
        if message.lower() in _CHAT_EXIT_WORDS:
            break
        try:
            answer = await executor.chat(message, model=model)
        except Exception as e:
            print(f"❌ {e}\n")
            continue
        print(f"AI: {answer}\n")

    print("👋 再见")
    return 0


async def browser_open(settings: Settings, url: str) -> int:
    executor = BrowserExecutor(settings.browser)
    try:
        page = await executor.open(normalize_url(url))
    except Exception as e:
        print(f"❌ 打开失败: {e}")
        return 1
    finally:
        await executor.close()

    print(f"✅ {page['title']}\n🔗 {page['url']}")
    return 0


async def desktop_exec(settings: Settings, command: str) -> int:
    executor = DesktopExecutor(settings.desktop)
    try:
        output = await executor.execute(command)
    except Exception as e:
        print(f"❌ {e}")
        return 1

    print(format_result(output))
    return 0


# ============================================================
# config
# ============================================================

def config_command(manager: ConfigManager, args: argparse.Namespace) -> int:
    action = args.config_command or "show"

    if action == "show":
        print("\n=== blnt 配置 ===\n")
        print(json.dumps(manager.as_dict(), indent=2, ensure_ascii=False))
        print(f"\n配置文件: {manager.path}\n")
        return 0

    if action == "get":
        try:
            value = manager.get(args.key)
        except KeyError:
            print(f"❌ 未知配置项: {args.key}")
            return 1
        print(json.dumps(value, ensure_ascii=False) if not isinstance(value, str) else value)
        return 0

    if action == "set":
        try:
            value = manager.set(args.key, args.value)
        except KeyError:
            print(f"❌ 未知配置项: {args.key}")
            return 1
        except ValidationError as e:
            print(f"❌ 配置值不合法: {args.key}={args.value}\n{e}")
            return 1
        manager.save()
        print(f"✅ {args.key} = {json.dumps(value, ensure_ascii=False)}")
        return 0

    manager.reset()
    print("✅ 配置已恢复默认")
    return 0


# ============================================================
# main
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """主入口"""
    parser = build_parser()
    args = parser.parse_args(argv)

    manager = ConfigManager(args.config)
    settings = manager.load()

    level = "DEBUG" if args.verbose else settings.general.log_level.value
    setup_logging(level, args.log_file)

    if args.command == "agent":
        if args.agent_command == "run":
            return asyncio.run(agent_run(settings, args.goal, args.agent_verbose))
        if args.agent_command == "task":
            return asyncio.run(agent_task(settings, args.task_type, args.description))
        return agent_status()

    if args.command == "query":
        return asyncio.run(query_command(settings, args.query, args.model))

    if args.command == "context":
        return asyncio.run(context_command(settings, args.query, args.file, args.model))

    if args.command == "chat":
        return asyncio.run(chat_command(settings, args.model))

    if args.command == "browser" and args.browser_command == "open":
        return asyncio.run(browser_open(settings, args.url))

    if args.command == "desktop" and args.desktop_command == "exec":
        return asyncio.run(desktop_exec(settings, args.shell_command))

    if args.command == "config":
        return config_command(manager, args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
