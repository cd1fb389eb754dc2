"""Sync states and the events published by the sync orchestrator."""

from __future__ import annotations

import asyncio
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

# Events kept in memory for diagnostics; older ones are dropped
HISTORY_LIMIT = 500


class SyncState(str, Enum):
    """Sync state enumeration."""

    IDLE = "idle"
    SYNCING = "syncing"
    CONFLICT = "conflict"
    DISABLED = "disabled"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _event_id() -> str:
    return str(uuid.uuid4())[:8]


@dataclass
class SyncEvent:
    """Base event from the sync orchestrator."""

    event_id: str = field(default_factory=_event_id)
    timestamp: datetime = field(default_factory=_now)


@dataclass
class StateChangedEvent(SyncEvent):
    """Sync state transition."""

    previous: SyncState = SyncState.IDLE
    current: SyncState = SyncState.IDLE


@dataclass
class LogEvent(SyncEvent):
    """Human-readable diagnostic line."""

    message: str = ""
    level: Literal["debug", "info", "warning", "error"] = "info"


@dataclass
class ConflictEvent(SyncEvent):
    """Remote history could not be reconciled automatically."""

    directory: str = ""
    details: str = ""


@dataclass
class DiagnosticsRequestedEvent(SyncEvent):
    """User asked to see the diagnostic log instead of syncing."""

    lines: list[str] = field(default_factory=list)


# Status display configuration
STATUS_ICONS: dict[SyncState, str] = {
    SyncState.IDLE: "☁️",
    SyncState.SYNCING: "🔄",
    SyncState.CONFLICT: "⚠️",
    SyncState.DISABLED: "",
}

STATUS_LABELS: dict[SyncState, str] = {
    SyncState.IDLE: "Synced",
    SyncState.SYNCING: "Syncing...",
    SyncState.CONFLICT: "Conflict - resolve manually",
    SyncState.DISABLED: "",
}


def get_status_label(state: SyncState) -> str:
    """Get status text for a state. Empty when the indicator is hidden."""
    if state is SyncState.DISABLED:
        return ""
    return f"{STATUS_ICONS[state]} taski: {STATUS_LABELS[state]}"


class SyncEventChannel:
    """Append-only event history with per-subscriber queues.

    Subscribers get every event published after they subscribe. The
    history keeps the most recent ``history_limit`` events.
    """

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        self._history: deque[SyncEvent] = deque(maxlen=history_limit)
        self._subscribers: list[asyncio.Queue[SyncEvent]] = []

    def publish(self, event: SyncEvent) -> None:
        """Record an event and push it to every subscriber."""
        self._history.append(event)
        for queue in self._subscribers:
            queue.put_nowait(event)

    def subscribe(self) -> asyncio.Queue[SyncEvent]:
        """Create a queue receiving future events."""
        queue: asyncio.Queue[SyncEvent] = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[SyncEvent]) -> None:
        """Stop delivering events to a queue."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    @property
    def history(self) -> list[SyncEvent]:
        """Copy of the retained events, oldest first."""
        return list(self._history)

    @property
    def log_lines(self) -> list[str]:
        """Messages of the retained LogEvents."""
        return [e.message for e in self._history if isinstance(e, LogEvent)]
