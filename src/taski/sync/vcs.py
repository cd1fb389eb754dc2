"""Version-control client used by the sync orchestrator."""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

COMMIT_MESSAGE_TEMPLATE = "taski: 自動同期 {date} {time}"

# Reported when the git executable cannot be found
MISSING_GIT_STDERR = "git: command not found"


class VCSError(Exception):
    """A version-control command failed.

    Carries the captured output of the failed command.
    """

    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


def format_commit_message(now: datetime) -> str:
    """Build the auto-sync commit message for a local time."""
    return COMMIT_MESSAGE_TEMPLATE.format(
        date=now.strftime("%Y-%m-%d"),
        time=now.strftime("%H:%M"),
    )


def is_dirty(status_output: str) -> bool:
    """Check porcelain status output for pending changes."""
    return bool(status_output.strip())


class VersionControlClient(ABC):
    """Operations the orchestrator needs from a version-control tool.

    Every method raises VCSError on failure.
    """

    @abstractmethod
    async def status(self) -> str:
        """Return porcelain working-tree status."""

    @abstractmethod
    async def stage_all(self) -> None:
        """Stage all changes, including deletions and untracked files."""

    @abstractmethod
    async def commit(self, message: str) -> None:
        """Commit staged changes."""

    @abstractmethod
    async def pull_rebase(self) -> None:
        """Fetch and rebase onto the upstream branch."""

    @abstractmethod
    async def push(self) -> None:
        """Push to the upstream branch."""

    @abstractmethod
    async def abort_rebase(self) -> None:
        """Abort an in-progress rebase."""


class GitClient(VersionControlClient):
    """Runs git commands in a repository directory."""

    def __init__(self, repo_path: str | Path):
        """Initialize with a repository path.

        Args:
            repo_path: Working directory for git commands. It does not
                need to exist yet.
        """
        self.repo_path = Path(repo_path)

    def _run(self, command: str, *args: str) -> str:
        # GitPython looks for the git executable on import
        try:
            from git.cmd import Git
            from git.exc import GitCommandError, GitCommandNotFound
        except ImportError as e:
            raise VCSError(
                f"git {command} failed: {e}",
                stderr=MISSING_GIT_STDERR,
            ) from e

        git = Git(str(self.repo_path))
        try:
            result: str = getattr(git, command)(*args)
            return result
        except GitCommandNotFound as e:
            raise VCSError(
                f"git {command} failed: {e}",
                stderr=MISSING_GIT_STDERR,
            ) from e
        except GitCommandError as e:
            raise VCSError(
                f"git {command} failed: {e}",
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr),
            ) from e

    async def _git(self, command: str, *args: str) -> str:
        return await asyncio.to_thread(self._run, command, *args)

    async def status(self) -> str:
        return await self._git("status", "--porcelain")

    async def stage_all(self) -> None:
        await self._git("add", "-A")

    async def commit(self, message: str) -> None:
        await self._git("commit", "-m", message)

    async def pull_rebase(self) -> None:
        await self._git("pull", "--rebase")

    async def push(self) -> None:
        await self._git("push")

    async def abort_rebase(self) -> None:
        await self._git("rebase", "--abort")


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
