"""Recovery actions offered to the user when a sync hits a conflict."""

import asyncio
import os
import sys
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import TextIO

import structlog

log = structlog.get_logger()

CONFLICT_MESSAGE = "taski: git sync hit a conflict. Please resolve it manually."


class ConflictAction(str, Enum):
    """Recovery action chosen by the user."""

    OPEN_TERMINAL = "open_terminal"
    RETRY = "retry"


class ConflictPrompter(ABC):
    """Asks the user how to recover from a conflict."""

    @abstractmethod
    async def ask(self, directory: Path, details: str) -> ConflictAction | None:
        """Offer the recovery actions. None means dismissed."""

    @abstractmethod
    async def open_terminal(self, directory: Path) -> None:
        """Open an interactive shell scoped to the directory."""


class ConsolePrompter(ConflictPrompter):
    """Prompts on stdin and spawns the user's shell."""

    CHOICES = {
        "t": ConflictAction.OPEN_TERMINAL,
        "r": ConflictAction.RETRY,
    }

    def __init__(self, stdin: TextIO | None = None):
        self.stdin = stdin or sys.stdin

    async def ask(self, directory: Path, details: str) -> ConflictAction | None:
        print()
        print(CONFLICT_MESSAGE)
        print(f"  Directory: {directory}")
        print("  [t] Open terminal   [r] Retry   [Enter] Dismiss")
        print("> ", end="", flush=True)

        answer = await self._read_line()
        if answer is None:
            return None
        return self.CHOICES.get(answer.strip().lower()[:1])

    async def _read_line(self) -> str | None:
        """Read one line from stdin, or None at end of input.

        The wait happens on the event loop, so cancelling the prompt
        returns at once instead of leaving a thread blocked on stdin.
        """
        loop = asyncio.get_running_loop()
        ready: asyncio.Future[None] = loop.create_future()

        def on_readable() -> None:
            if not ready.done():
                ready.set_result(None)

        try:
            fd = self.stdin.fileno()
            loop.add_reader(fd, on_readable)
        except (NotImplementedError, OSError, ValueError) as e:
            # Proactor loops and regular files can't be watched
            log.debug("stdin_reader_unavailable", error=str(e))
            return await asyncio.to_thread(self.stdin.readline) or None

        try:
            await ready
        finally:
            loop.remove_reader(fd)
        return self.stdin.readline() or None

    async def open_terminal(self, directory: Path) -> None:
        shell = os.environ.get("SHELL", "/bin/sh")
        log.info("conflict_terminal_opening", shell=shell, cwd=str(directory))
        proc = await asyncio.create_subprocess_exec(shell, cwd=str(directory))
        await proc.wait()
