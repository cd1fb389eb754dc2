"""Grouping of parsed tasks by date and by tag, and the daily report."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from taski.tasks.models import ParsedTask, ParsedTaskWithDate
from taski.tasks.parser import extract_all_dates, extract_for_date, read_lines
from taski.tasks.tags import extract_tags

NO_DATE_LABEL = "No date"


def local_date_string(now: datetime | None = None) -> str:
    """Get the local date as ``YYYY-MM-DD``."""
    return (now or datetime.now()).strftime("%Y-%m-%d")


@dataclass
class FileTaskGroup:
    """Tasks from a single file."""

    file_name: str
    path: Path
    tasks: list[ParsedTaskWithDate] = field(default_factory=list)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    def sorted_tasks(self) -> list[ParsedTaskWithDate]:
        """Incomplete tasks first, otherwise in document order."""
        return sorted(self.tasks, key=lambda t: t.completed)


@dataclass
class DateGroup:
    """Files with tasks logged on one date."""

    date: str
    label: str
    is_today: bool
    files: list[FileTaskGroup] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(g.tasks) for g in self.files)

    @property
    def completed(self) -> int:
        return sum(g.completed_count for g in self.files)


def _has_incomplete(groups: list[FileTaskGroup]) -> bool:
    return any(not t.completed for g in groups for t in g.tasks)


def _incomplete_only(groups: list[FileTaskGroup]) -> list[FileTaskGroup]:
    visible = []
    for group in groups:
        tasks = [t for t in group.tasks if not t.completed]
        if tasks:
            visible.append(FileTaskGroup(group.file_name, group.path, tasks))
    return visible


def collect_by_date(paths: Iterable[Path]) -> dict[str, list[FileTaskGroup]]:
    """Parse files and group their records by log date.

    Args:
        paths: Markdown files to parse.

    Returns:
        Mapping of date (``""`` for undated) to one group per file.
    """
    date_map: dict[str, list[FileTaskGroup]] = {}

    for path in paths:
        lines = read_lines(path)
        if not lines:
            continue

        by_date: dict[str, list[ParsedTaskWithDate]] = {}
        for record in extract_all_dates(lines):
            by_date.setdefault(record.date, []).append(record)

        for date, tasks in by_date.items():
            date_map.setdefault(date, []).append(FileTaskGroup(path.name, path, tasks))

    return date_map


def build_date_groups(
    date_map: dict[str, list[FileTaskGroup]],
    today: str,
) -> list[DateGroup]:
    """Order and filter date groups for display.

    Today comes first with every task. Other dates follow newest first,
    then undated tasks; those only appear while they still have incomplete
    tasks, and only the incomplete tasks are kept.

    Args:
        date_map: Output of ``collect_by_date``.
        today: Today's date string.

    Returns:
        Ordered date groups.
    """
    groups: list[DateGroup] = []

    today_files = date_map.get(today)
    if today_files:
        groups.append(
            DateGroup(date=today, label=f"Today ({today})", is_today=True, files=today_files)
        )

    other_dates = sorted((d for d in date_map if d not in (today, "")), reverse=True)
    for date in other_dates:
        files = date_map[date]
        if _has_incomplete(files):
            groups.append(
                DateGroup(date=date, label=date, is_today=False, files=_incomplete_only(files))
            )

    undated = date_map.get("")
    if undated and _has_incomplete(undated):
        groups.append(
            DateGroup(date="", label=NO_DATE_LABEL, is_today=False, files=_incomplete_only(undated))
        )

    return groups


def collect_by_tag(paths: Iterable[Path]) -> dict[str, list[FileTaskGroup]]:
    """Group unique tasks by the hashtags in their labels.

    A task with several log lines is counted once.

    Args:
        paths: Markdown files to parse.

    Returns:
        Mapping of tag to one group per file.
    """
    tag_map: dict[str, list[FileTaskGroup]] = {}

    for path in paths:
        lines = read_lines(path)
        if not lines:
            continue

        unique: dict[int, ParsedTaskWithDate] = {}
        for record in extract_all_dates(lines):
            unique.setdefault(record.line, record)

        for task in unique.values():
            for tag in extract_tags(task.text):
                groups = tag_map.setdefault(tag, [])
                group = next((g for g in groups if g.path == path), None)
                if group is None:
                    group = FileTaskGroup(path.name, path)
                    groups.append(group)
                group.tasks.append(task)

    return tag_map


def render_daily_summary(paths: Iterable[Path], today: str) -> str:
    """Render today's task logs as a Markdown report.

    Args:
        paths: Markdown files to parse.
        today: Date to report on.

    Returns:
        Markdown text.
    """
    output = f"# Today's tasks ({today})\n\n"
    found = False

    for path in paths:
        lines = read_lines(path)
        if not lines:
            continue
        tasks: list[ParsedTask] = extract_for_date(lines, today)
        if not tasks:
            continue

        found = True
        output += f"## {path.name}\n"
        for task in tasks:
            mark = "x" if task.completed else " "
            output += f"- [{mark}] [{task.text}]({path.as_posix()}#L{task.line})\n"
            output += f"    - 📝 {task.log}\n"
        output += "\n"

    if not found:
        output += f"No tasks with a log line for {today} were found.\n"
        output += f'Try adding "- {today}: note" under a task.\n'

    return output
