"""Markdown file discovery for task documents."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from taski.config import Settings

log = structlog.get_logger()

SKIPPED_DIRECTORIES = {"node_modules", ".git"}


def _pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Convert a glob-style exclude pattern to a regex.

    ``**`` matches across separators, ``*`` within one path segment.
    """
    escaped = re.sub(r"[.+^${}()|\[\]\\]", lambda m: "\\" + m.group(0), pattern)
    escaped = escaped.replace("**", "<<GLOBSTAR>>")
    escaped = escaped.replace("*", "[^/]*")
    escaped = escaped.replace("<<GLOBSTAR>>", ".*")
    return re.compile(escaped)


def matches_exclude_pattern(file_path: str | Path, patterns: Iterable[str]) -> bool:
    """Check whether a path matches any exclude pattern.

    Patterns are searched anywhere in the path, not anchored.

    Args:
        file_path: Path to test.
        patterns: Glob-style patterns.

    Returns:
        True if any pattern matches.
    """
    path_str = str(file_path)
    return any(_pattern_to_regex(p).search(path_str) for p in patterns)


def find_markdown_files(
    directory: Path,
    exclude_patterns: Iterable[str] = (),
) -> list[Path]:
    """Recursively find Markdown files under a directory.

    Args:
        directory: Directory to scan.
        exclude_patterns: Glob-style patterns for files or directories to skip.

    Returns:
        Sorted list of ``*.md`` paths. Empty if the directory doesn't exist.
    """
    patterns = list(exclude_patterns)
    results: list[Path] = []

    if not directory.is_dir():
        return results

    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        log.warning("directory_unreadable", path=str(directory), error=str(e))
        return results

    for entry in entries:
        if patterns and matches_exclude_pattern(entry, patterns):
            continue
        if entry.is_dir():
            if entry.name in SKIPPED_DIRECTORIES:
                continue
            results.extend(find_markdown_files(entry, patterns))
        elif entry.is_file() and entry.suffix == ".md":
            results.append(entry)

    return results


def find_all_markdown_files(
    settings: Settings,
    workspace: Path | None = None,
) -> list[Path]:
    """Find all task documents the user has configured.

    Order: workspace (if enabled), the notes directory, then additional
    directories. Duplicates are dropped, first occurrence wins.

    Args:
        settings: Application settings.
        workspace: Workspace directory, used when ``include_workspace`` is set.

    Returns:
        List of Markdown file paths.
    """
    directories: list[Path] = []
    if settings.include_workspace and workspace is not None:
        directories.append(workspace)
    directories.append(settings.taski_dir)
    directories.extend(settings.additional_directories)

    seen: set[Path] = set()
    files: list[Path] = []

    for directory in directories:
        for md_file in find_markdown_files(directory, settings.exclude_directories):
            key = md_file.resolve()
            if key in seen:
                continue
            seen.add(key)
            files.append(md_file)

    log.debug("markdown_files_found", count=len(files), directories=len(directories))
    return files
