"""Checklist task parsing and grouping."""

from taski.tasks.models import LogLine, ParsedTask, ParsedTaskWithDate, TaskMarker
from taski.tasks.parser import (
    extract_all_dates,
    extract_for_date,
    match_log_line,
    match_task_marker,
    parse_task_file,
)
from taski.tasks.scanner import find_all_markdown_files, find_markdown_files
from taski.tasks.tags import extract_tags

__all__ = [
    "LogLine",
    "ParsedTask",
    "ParsedTaskWithDate",
    "TaskMarker",
    "extract_all_dates",
    "extract_for_date",
    "extract_tags",
    "find_all_markdown_files",
    "find_markdown_files",
    "match_log_line",
    "match_task_marker",
    "parse_task_file",
]
