"""Shared fixtures for taski tests."""

import asyncio
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from taski.config import Settings
from taski.sync import (
    ConflictAction,
    ConflictPrompter,
    Scheduler,
    SyncOrchestrator,
    VersionControlClient,
)


class FakeTimer:
    """Timer handle on a virtual clock."""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler(Scheduler):
    """Scheduler driven by ``advance`` instead of real time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[FakeTimer] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self._timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target


class FakeVCS(VersionControlClient):
    """Scriptable version-control client.

    ``errors`` maps a method name to the exception it raises. When
    ``gate`` is set, ``status`` blocks until the gate opens.
    """

    def __init__(self, status_output: str = ""):
        self.status_output = status_output
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, ...]] = []
        self.gate: asyncio.Event | None = None

    @property
    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    async def _call(self, name: str, *args: str) -> None:
        self.calls.append((name, *args))
        if name == "status" and self.gate is not None:
            await self.gate.wait()
        if name in self.errors:
            raise self.errors[name]

    async def status(self) -> str:
        await self._call("status")
        return self.status_output

    async def stage_all(self) -> None:
        await self._call("stage_all")

    async def commit(self, message: str) -> None:
        await self._call("commit", message)

    async def pull_rebase(self) -> None:
        await self._call("pull_rebase")

    async def push(self) -> None:
        await self._call("push")

    async def abort_rebase(self) -> None:
        await self._call("abort_rebase")


class FakePrompter(ConflictPrompter):
    """Answers conflict prompts from a scripted list of actions."""

    def __init__(self, actions: list[ConflictAction | None] | None = None):
        self.actions = list(actions or [])
        self.asked: list[tuple[Path, str]] = []
        self.terminals: list[Path] = []

    async def ask(self, directory: Path, details: str) -> ConflictAction | None:
        self.asked.append((directory, details))
        return self.actions.pop(0) if self.actions else None

    async def open_terminal(self, directory: Path) -> None:
        self.terminals.append(directory)


@pytest.fixture
def settings() -> Settings:
    """Settings with auto-sync enabled at the minimum interval."""
    return Settings(git_auto_sync=True, git_sync_interval=30)


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """A notes directory that looks like a git repository."""
    directory = tmp_path / "taski"
    directory.mkdir()
    (directory / ".git").mkdir()
    return directory


@pytest.fixture
def vcs() -> FakeVCS:
    return FakeVCS()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def orchestrator(
    settings: Settings,
    vcs: FakeVCS,
    scheduler: FakeScheduler,
    prompter: FakePrompter,
    repo_dir: Path,
) -> SyncOrchestrator:
    """Orchestrator wired to fakes with a fixed clock."""
    return SyncOrchestrator(
        settings,
        client=vcs,
        scheduler=scheduler,
        prompter=prompter,
        directory=repo_dir,
        clock=lambda: datetime(2026, 2, 1, 9, 5),
    )
