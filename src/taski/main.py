"""taski CLI entry point."""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from dotenv import load_dotenv

from taski import __version__
from taski.config import Settings, load_settings
from taski.tasks.scanner import find_all_markdown_files
from taski.tasks.summary import (
    build_date_groups,
    collect_by_date,
    collect_by_tag,
    local_date_string,
    render_daily_summary,
)

if TYPE_CHECKING:
    from taski.sync import SyncState
    from taski.sync.events import SyncEvent

# ANSI color codes
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"


def configure_logging(level: str) -> None:
    """Configure structlog for the application."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=True),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _task_files(settings: Settings) -> list[Path]:
    return find_all_markdown_files(settings, workspace=Path.cwd())


def show_today(settings: Settings, date: str | None) -> None:
    """Print today's task logs as Markdown."""
    today = date or local_date_string()
    print(render_daily_summary(_task_files(settings), today), end="")


def show_dates(settings: Settings) -> None:
    """Print tasks grouped by log date."""
    today = local_date_string()
    groups = build_date_groups(collect_by_date(_task_files(settings)), today)

    if not groups:
        print("No tasks found.")
        return

    for group in groups:
        if group.is_today:
            print(f"{GREEN}{BOLD}{group.label} ({group.completed}/{group.total}){RESET}")
        elif group.date:
            print(f"{YELLOW}{group.label}{RESET}")
        else:
            print(f"{DIM}{group.label}{RESET}")

        for file_group in group.files:
            print(f"  {BLUE}{file_group.file_name}{RESET}")
            for task in file_group.sorted_tasks():
                mark = "x" if task.completed else " "
                print(f"    [{mark}] {task.text}  {DIM}:{task.line + 1}{RESET}")
                if task.log:
                    print(f"        {MAGENTA}{task.log}{RESET}")


def show_tags(settings: Settings) -> None:
    """Print tasks grouped by hashtag."""
    tag_map = collect_by_tag(_task_files(settings))

    if not tag_map:
        print("No tagged tasks found.")
        return

    for tag in sorted(tag_map):
        groups = tag_map[tag]
        count = sum(len(g.tasks) for g in groups)
        print(f"{BLUE}{BOLD}#{tag}{RESET} ({count})")
        for file_group in groups:
            print(f"  {file_group.file_name}")
            for task in file_group.sorted_tasks():
                mark = "x" if task.completed else " "
                print(f"    [{mark}] {task.text}")


async def sync_once(settings: Settings) -> "SyncState":
    """Run a single sync of the notes directory.

    Returns:
        State after the attempt.
    """
    from taski.sync import SyncOrchestrator, SyncState

    orchestrator = SyncOrchestrator(settings)
    if not await orchestrator.check_preconditions():
        for line in orchestrator.diagnostics:
            print(line)
        return SyncState.DISABLED

    await orchestrator.sync_now()
    for line in orchestrator.diagnostics:
        print(f"{DIM}{line}{RESET}")
    return orchestrator.state


async def print_status(queue: "asyncio.Queue[SyncEvent]") -> None:
    """Print state changes and requested diagnostics from the sync channel."""
    from taski.sync import DiagnosticsRequestedEvent, StateChangedEvent, get_status_label

    while True:
        event = await queue.get()
        if isinstance(event, StateChangedEvent):
            label = get_status_label(event.current)
            if label:
                print(f"{BOLD}{label}{RESET}", flush=True)
        elif isinstance(event, DiagnosticsRequestedEvent):
            print("\n".join(event.lines), flush=True)


async def watch(settings: Settings) -> None:
    """Run git auto-sync until interrupted."""
    from taski.sync import ConsolePrompter, SyncOrchestrator, SyncState
    from taski.sync.watcher import start_watcher

    log = structlog.get_logger()

    orchestrator = SyncOrchestrator(settings, prompter=ConsolePrompter())
    status_task = asyncio.create_task(print_status(orchestrator.channel.subscribe()))

    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        log.info("shutdown_signal_received", message="Ctrl+C pressed, shutting down...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    await orchestrator.start()
    if orchestrator.state is SyncState.DISABLED:
        for line in orchestrator.diagnostics:
            print(line)
        status_task.cancel()
        return

    observer = start_watcher(orchestrator.directory, orchestrator.notify_saved, loop)

    print()
    print(f"  {GREEN}✓{RESET} {BOLD}taski is syncing {orchestrator.directory}{RESET}")
    print(f"  Press {BOLD}Ctrl+C{RESET} to stop")
    print()

    await shutdown_event.wait()

    log.info("shutting_down")
    observer.stop()
    observer.join()
    await orchestrator.close()
    status_task.cancel()
    log.info("taski_stopped")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="taski",
        description="Dated task logs in Markdown checklists, with git auto-sync",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--env-dir",
        type=Path,
        default=None,
        help="Directory containing a .env file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    today_parser = subparsers.add_parser(
        "today",
        help="Show tasks with a log line for today",
    )
    today_parser.add_argument(
        "--date",
        default=None,
        help="Date to report on (YYYY-MM-DD, default: today)",
    )

    subparsers.add_parser("dates", help="Show tasks grouped by log date")
    subparsers.add_parser("tags", help="Show tasks grouped by #tag")
    subparsers.add_parser("sync", help="Sync the notes directory once")
    subparsers.add_parser("watch", help="Keep the notes directory synced")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv(args.env_dir / ".env" if args.env_dir else None)
    settings = load_settings(args.env_dir)
    configure_logging(settings.log_level)

    if args.command == "today":
        show_today(settings, args.date)
    elif args.command == "dates":
        show_dates(settings)
    elif args.command == "tags":
        show_tags(settings)
    elif args.command == "sync":
        from taski.sync import SyncState

        state = asyncio.run(sync_once(settings))
        print(f"State: {state.value}")
        if state in (SyncState.CONFLICT, SyncState.DISABLED):
            sys.exit(1)
    elif args.command == "watch":
        asyncio.run(watch(settings))


if __name__ == "__main__":
    main()
