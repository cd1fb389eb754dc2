"""Git auto-sync for the notes directory."""

from taski.sync.classifier import SyncFailure, classify_error, classify_error_text
from taski.sync.conflict import ConflictAction, ConflictPrompter, ConsolePrompter
from taski.sync.events import (
    ConflictEvent,
    DiagnosticsRequestedEvent,
    LogEvent,
    StateChangedEvent,
    SyncEvent,
    SyncEventChannel,
    SyncState,
    get_status_label,
)
from taski.sync.orchestrator import SyncOrchestrator
from taski.sync.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from taski.sync.vcs import (
    GitClient,
    VCSError,
    VersionControlClient,
    format_commit_message,
    is_dirty,
)

__all__ = [
    # Classifier
    "SyncFailure",
    "classify_error",
    "classify_error_text",
    # Conflict
    "ConflictAction",
    "ConflictPrompter",
    "ConsolePrompter",
    # Events
    "SyncState",
    "SyncEvent",
    "StateChangedEvent",
    "LogEvent",
    "ConflictEvent",
    "DiagnosticsRequestedEvent",
    "SyncEventChannel",
    "get_status_label",
    # Orchestrator
    "SyncOrchestrator",
    # Scheduler
    "Scheduler",
    "AsyncioScheduler",
    "TimerHandle",
    # VCS
    "VersionControlClient",
    "GitClient",
    "VCSError",
    "format_commit_message",
    "is_dirty",
]
