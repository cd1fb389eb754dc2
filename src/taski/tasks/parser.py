"""Line parser for checklist tasks with dated log lines."""

import re
from collections.abc import Iterable
from pathlib import Path

import structlog

from taski.tasks.models import LogLine, ParsedTask, ParsedTaskWithDate, TaskMarker

log = structlog.get_logger()

TASK_PATTERN = re.compile(r"^(\s*)-\s*\[([ x])\]\s*(.*)")
LOG_PATTERN = re.compile(r"^(\s*)-\s*(\d{4}-\d{2}-\d{2}):\s*(.*)")


def match_task_marker(line: str, index: int) -> TaskMarker | None:
    """Match a task marker line.

    Args:
        line: Raw line text.
        index: Zero-based line index within the document.

    Returns:
        TaskMarker or None if the line is not a task marker.
    """
    match = TASK_PATTERN.match(line)
    if not match:
        return None
    return TaskMarker(
        indent=len(match.group(1)),
        completed=match.group(2) == "x",
        text=match.group(3),
        line=index,
    )


def match_log_line(line: str) -> LogLine | None:
    """Match a dated log line.

    The date is taken verbatim; ``2026-13-45`` is accepted.

    Args:
        line: Raw line text.

    Returns:
        LogLine or None if the line is not a log line.
    """
    match = LOG_PATTERN.match(line)
    if not match:
        return None
    return LogLine(
        indent=len(match.group(1)),
        date=match.group(2),
        content=match.group(3),
    )


def _owned_logs(lines: Iterable[str]) -> Iterable[tuple[TaskMarker, LogLine | None]]:
    """Walk lines and yield task/log ownership events in line order.

    Yields ``(task, log)`` for every log line owned by the open task, and
    ``(task, None)`` when a task's ownership chain closes (next task marker
    or end of input).
    """
    current: TaskMarker | None = None

    for index, text in enumerate(lines):
        task = match_task_marker(text, index)
        if task:
            if current:
                yield current, None
            current = task
            continue

        entry = match_log_line(text)
        if entry and current and entry.indent > current.indent:
            yield current, entry

    if current:
        yield current, None


def extract_for_date(lines: Iterable[str], target_date: str) -> list[ParsedTask]:
    """Extract tasks that have a log line for ``target_date``.

    A task with several log lines on that date yields several records.

    Args:
        lines: Document lines in order.
        target_date: Date literal compared by string equality.

    Returns:
        Records in input line order.
    """
    return [
        ParsedTask(
            completed=task.completed,
            text=task.text,
            line=task.line,
            log=entry.content,
        )
        for task, entry in _owned_logs(lines)
        if entry is not None and entry.date == target_date
    ]


def extract_all_dates(lines: Iterable[str]) -> list[ParsedTaskWithDate]:
    """Extract every owned log line, tagged with its date.

    Tasks that own no log line are still returned once with an empty
    date and log.

    Args:
        lines: Document lines in order.

    Returns:
        Records in input line order.
    """
    results: list[ParsedTaskWithDate] = []
    has_logs = False

    for task, entry in _owned_logs(lines):
        if entry is None:
            # Ownership chain closed
            if not has_logs:
                results.append(
                    ParsedTaskWithDate(
                        completed=task.completed,
                        text=task.text,
                        line=task.line,
                        log="",
                        date="",
                    )
                )
            has_logs = False
            continue

        has_logs = True
        results.append(
            ParsedTaskWithDate(
                completed=task.completed,
                text=task.text,
                line=task.line,
                log=entry.content,
                date=entry.date,
            )
        )

    return results


def read_lines(file_path: Path) -> list[str] | None:
    """Read a Markdown file as a list of lines.

    Only LF and CRLF end a line, so line indexes match what an editor
    shows. Form feeds and Unicode line separators stay inside the line.

    Returns:
        Lines without line terminators, or None if the file can't be read.
    """
    try:
        text = file_path.read_bytes().decode("utf-8")
        return [line.removesuffix("\r") for line in text.split("\n")]
    except (OSError, UnicodeDecodeError) as e:
        log.warning("task_file_unreadable", path=str(file_path), error=str(e))
        return None


def parse_task_file(
    file_path: Path,
    target_date: str | None = None,
) -> list[ParsedTask] | list[ParsedTaskWithDate]:
    """Parse a Markdown file.

    Args:
        file_path: Path to the Markdown file.
        target_date: If given, only logs for this date are extracted.

    Returns:
        Parsed records, or an empty list if the file can't be read.
    """
    lines = read_lines(file_path)
    if lines is None:
        return []
    if target_date is not None:
        return extract_for_date(lines, target_date)
    return extract_all_dates(lines)
