"""Filesystem watcher feeding Markdown saves to the sync orchestrator."""

import asyncio
from collections.abc import Callable
from pathlib import Path

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

log = structlog.get_logger()


class TaskFileEventHandler(FileSystemEventHandler):
    """Forward Markdown file writes onto the event loop.

    watchdog calls handlers from its own thread, so the callback is
    scheduled with ``call_soon_threadsafe``.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, on_saved: Callable[[Path], None]):
        super().__init__()
        self.loop = loop
        self.on_saved = on_saved

    def _forward(self, raw_path: str | bytes) -> None:
        path = Path(raw_path.decode() if isinstance(raw_path, bytes) else raw_path)
        if path.suffix != ".md" or ".git" in path.parts:
            return
        self.loop.call_soon_threadsafe(self.on_saved, path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.dest_path)


def start_watcher(
    directory: Path,
    on_saved: Callable[[Path], None],
    loop: asyncio.AbstractEventLoop,
) -> Observer:
    """Start watching a directory tree for Markdown saves.

    Args:
        directory: Directory to watch recursively.
        on_saved: Called on the event loop with the saved file path.
        loop: Event loop to deliver callbacks on.

    Returns:
        The running observer; call ``stop()`` and ``join()`` to shut down.
    """
    observer = Observer()
    observer.schedule(TaskFileEventHandler(loop, on_saved), str(directory), recursive=True)
    observer.start()
    log.info("save_watcher_started", directory=str(directory))
    return observer
