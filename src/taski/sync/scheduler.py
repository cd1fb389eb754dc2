"""Cancellable timers for periodic and debounced sync triggers."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    """Handle returned by ``Scheduler.schedule``."""

    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Runs callbacks after a delay."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""

    def cancel(self, handle: TimerHandle | None) -> None:
        """Cancel a pending callback. Cancelling twice or None is a no-op."""
        if handle is not None:
            handle.cancel()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running event loop."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, callback)
