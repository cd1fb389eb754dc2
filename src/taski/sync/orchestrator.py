"""Git auto-sync orchestrator for the notes directory."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

import structlog

from taski.config import SAVE_DEBOUNCE_SECONDS, Settings
from taski.sync.classifier import SyncFailure, classify_error_text, error_text
from taski.sync.conflict import ConflictAction, ConflictPrompter
from taski.sync.events import (
    ConflictEvent,
    DiagnosticsRequestedEvent,
    LogEvent,
    StateChangedEvent,
    SyncEventChannel,
    SyncState,
)
from taski.sync.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from taski.sync.vcs import (
    GitClient,
    VersionControlClient,
    format_commit_message,
    is_dirty,
)

log = structlog.get_logger()

LogLevel = Literal["debug", "info", "warning", "error"]


class SyncOrchestrator:
    """Keeps the notes directory in sync with its git remote.

    Periodic ticks, debounced saves and manual requests all funnel into
    one sync routine. Only one sync runs at a time; triggers that arrive
    while a sync is running are dropped, not queued.
    """

    def __init__(
        self,
        settings: Settings,
        client: VersionControlClient | None = None,
        scheduler: Scheduler | None = None,
        prompter: ConflictPrompter | None = None,
        directory: Path | None = None,
        channel: SyncEventChannel | None = None,
        clock: Callable[[], datetime] = datetime.now,
        debounce_seconds: float = SAVE_DEBOUNCE_SECONDS,
    ):
        """Initialize the orchestrator.

        Args:
            settings: Application settings.
            client: Version-control client (defaults to git in ``directory``).
            scheduler: Timer scheduler (defaults to the running event loop).
            prompter: Asks the user how to recover from conflicts.
            directory: Directory to sync (defaults to the notes directory).
            channel: Event channel for state changes and diagnostics.
            clock: Local time source for commit messages.
            debounce_seconds: Quiet period after the last save.
        """
        self.settings = settings
        self.directory = Path(directory or settings.taski_dir)
        self.client = client or GitClient(self.directory)
        self.scheduler = scheduler or AsyncioScheduler()
        self.prompter = prompter
        self.channel = channel or SyncEventChannel()
        self.clock = clock
        self.debounce_seconds = debounce_seconds

        self._state = SyncState.IDLE
        self._syncing = False
        self._generation = 0
        self._timer: TimerHandle | None = None
        self._debounce: TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> SyncState:
        """Current sync state."""
        return self._state

    @property
    def is_syncing(self) -> bool:
        """Whether a sync holds the in-progress guard."""
        return self._syncing

    @property
    def is_active(self) -> bool:
        """Whether the periodic timer is armed."""
        return self._timer is not None

    @property
    def diagnostics(self) -> list[str]:
        """Diagnostic lines published so far."""
        return self.channel.log_lines

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def check_preconditions(self) -> bool:
        """Check that auto-sync is enabled and the directory is a repository."""
        if not self.settings.git_auto_sync:
            self._diag("auto_sync_disabled", "Git auto-sync is disabled in settings.")
            return False

        if not await asyncio.to_thread(self.directory.is_dir):
            self._diag(
                "taski_dir_missing",
                f"Task directory does not exist: {self.directory}",
                level="warning",
            )
            return False

        if not await asyncio.to_thread((self.directory / ".git").exists):
            self._diag(
                "not_a_git_repo",
                f"{self.directory} is not a git repository. Skipping auto-sync.",
                level="warning",
            )
            return False

        return True

    async def start(self) -> None:
        """Check preconditions, arm the periodic timer and sync once."""
        self._cancel_timers()

        if not await self.check_preconditions():
            self._set_state(SyncState.DISABLED)
            return

        self._diag("auto_sync_started", "Git auto-sync started.")
        self._set_state(SyncState.IDLE)
        self._arm_timer()
        await self._sync()

    def stop(self) -> None:
        """Cancel all timers and disable syncing.

        A git command already running is not interrupted; its outcome is
        discarded.
        """
        self._generation += 1
        self._cancel_timers()
        self._set_state(SyncState.DISABLED)
        log.info("auto_sync_stopped", directory=str(self.directory))

    async def close(self) -> None:
        """Stop and cancel any pending conflict prompt."""
        self.stop()
        for task in list(self._tasks):
            task.cancel()
        await self.drain()

    async def sync_now(self) -> None:
        """Manual trigger.

        In the conflict state this only surfaces the diagnostic log.
        """
        if self._state is SyncState.CONFLICT:
            self.channel.publish(DiagnosticsRequestedEvent(lines=self.diagnostics))
            return
        await self._sync()

    def notify_saved(self, path: str | Path) -> None:
        """Signal that a document was saved.

        Markdown files under the synced directory restart the debounce
        timer while auto-sync is active; the sync runs once saves have
        been quiet for the debounce period.
        """
        if self._timer is None:
            return

        saved = Path(path)
        if saved.suffix != ".md" or not _is_within(saved, self.directory):
            return

        self.scheduler.cancel(self._debounce)
        self._debounce = self.scheduler.schedule(self.debounce_seconds, self._on_debounce)

    def set_interval(self, seconds: int) -> None:
        """Change the sync interval, re-arming an active timer."""
        self.settings = self.settings.model_copy(update={"git_sync_interval": seconds})
        if self._timer is not None:
            self._arm_timer()

    async def apply_settings(self, settings: Settings) -> None:
        """Apply changed settings at runtime.

        Toggling the enable flag starts or stops syncing; an interval
        change only re-arms the timer.
        """
        previous = self.settings
        self.settings = settings

        if previous.git_auto_sync != settings.git_auto_sync:
            if settings.git_auto_sync:
                await self.start()
            else:
                self.stop()
        elif (
            previous.git_sync_interval != settings.git_sync_interval
            and settings.git_auto_sync
            and self._timer is not None
        ):
            self._arm_timer()

    async def drain(self) -> None:
        """Wait for background syncs and prompts to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _arm_timer(self) -> None:
        self.scheduler.cancel(self._timer)
        interval = self.settings.sync_interval_seconds
        self._timer = self.scheduler.schedule(interval, self._on_timer)
        self._diag("sync_timer_armed", f"Sync timer set (interval: {interval}s)")

    def _on_timer(self) -> None:
        self._timer = self.scheduler.schedule(
            self.settings.sync_interval_seconds, self._on_timer
        )
        self._spawn(self._sync())

    def _on_debounce(self) -> None:
        self._debounce = None
        self._diag("save_detected", "File save detected. Syncing...")
        self._spawn(self._sync())

    def _cancel_timers(self) -> None:
        self.scheduler.cancel(self._timer)
        self.scheduler.cancel(self._debounce)
        self._timer = None
        self._debounce = None

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def _sync(self) -> None:
        if self._syncing:
            log.debug("sync_dropped", reason="already_running")
            return

        self._syncing = True
        generation = self._generation
        self._set_state(SyncState.SYNCING)

        try:
            await self._run_steps()
        except Exception as e:
            if generation != self._generation:
                log.info("sync_result_discarded", error=str(e))
            else:
                await self._handle_failure(e, generation)
        else:
            if generation != self._generation:
                log.info("sync_result_discarded")
            else:
                self._set_state(SyncState.IDLE)
        finally:
            self._syncing = False

    async def _run_steps(self) -> None:
        status = await self.client.status()

        if is_dirty(status):
            self._diag("changes_detected", "Changes detected. Committing...")
            await self.client.stage_all()
            message = format_commit_message(self.clock())
            await self.client.commit(message)
            self._diag("commit_created", f"Committed: {message}")

        self._diag("pull_started", "Pulling changes from remote...")
        await self.client.pull_rebase()
        self._diag("pull_finished", "Pull complete.")

        self._diag("push_started", "Pushing to remote...")
        await self.client.push()
        self._diag("sync_finished", "Push complete. Sync finished.")

    async def _handle_failure(self, error: Exception, generation: int) -> None:
        text = error_text(error)
        failure = classify_error_text(text)

        if failure is SyncFailure.CONFLICT:
            self._diag("sync_conflict", "Conflict detected.", level="warning", detail=text)
            try:
                await self.client.abort_rebase()
                self._diag("rebase_aborted", "Rebase aborted.")
            except Exception as abort_error:
                log.debug("rebase_abort_failed", error=str(abort_error))

            if generation != self._generation:
                return

            self._cancel_timers()
            self._set_state(SyncState.CONFLICT)
            self.channel.publish(ConflictEvent(directory=str(self.directory), details=text))
            if self.prompter is not None:
                self._spawn(self._prompt_conflict(text))

        elif failure is SyncFailure.NETWORK:
            self._diag(
                "sync_network_error",
                "Network error. Will retry on the next sync.",
                level="warning",
                detail=text,
            )
            self._set_state(SyncState.IDLE)

        elif failure is SyncFailure.TOOL_MISSING:
            self._diag(
                "git_not_found",
                "git was not found. Disabling git auto-sync.",
                level="error",
                detail=text,
            )
            self._cancel_timers()
            self._set_state(SyncState.DISABLED)

        else:
            self._diag("sync_error", "Sync error:", level="error", detail=text)
            self._set_state(SyncState.IDLE)

    async def _prompt_conflict(self, details: str) -> None:
        assert self.prompter is not None
        try:
            action = await self.prompter.ask(self.directory, details)
            if action is ConflictAction.OPEN_TERMINAL:
                await self.prompter.open_terminal(self.directory)
            elif action is ConflictAction.RETRY:
                self._diag("conflict_retry", "Retrying git sync...")
                self._set_state(SyncState.IDLE)
                await self.start()
        except Exception as e:
            log.warning("conflict_prompt_failed", error=str(e))

    # ------------------------------------------------------------------
    # State and diagnostics
    # ------------------------------------------------------------------

    def _set_state(self, state: SyncState) -> None:
        if state is self._state:
            return
        previous = self._state
        self._state = state
        log.debug("sync_state_changed", previous=previous.value, current=state.value)
        self.channel.publish(StateChangedEvent(previous=previous, current=state))

    def _diag(
        self,
        event: str,
        message: str,
        level: LogLevel = "info",
        detail: str | None = None,
    ) -> None:
        """Log an event and append it to the diagnostic channel."""
        fields: dict[str, str] = {"directory": str(self.directory)}
        if detail:
            fields["error"] = detail.strip()
        getattr(log, level)(event, message=message, **fields)

        self.channel.publish(LogEvent(message=message, level=level))
        if detail:
            self.channel.publish(LogEvent(message=detail.strip(), level=level))


def _is_within(path: Path, directory: Path) -> bool:
    try:
        return path.resolve().is_relative_to(directory.resolve())
    except OSError:
        return False
