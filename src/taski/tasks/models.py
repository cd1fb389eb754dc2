"""Pydantic models for parsed checklist tasks and their dated logs."""

from pydantic import BaseModel


class TaskMarker(BaseModel):
    """A checklist item line: ``- [ ] text`` or ``- [x] text``."""

    indent: int
    completed: bool
    text: str
    line: int


class LogLine(BaseModel):
    """A dated progress note line: ``- YYYY-MM-DD: content``."""

    indent: int
    date: str
    content: str


class ParsedTask(BaseModel):
    """One (task, log line) pair found for a target date."""

    completed: bool
    text: str
    line: int
    log: str


class ParsedTaskWithDate(ParsedTask):
    """One (task, log line) pair tagged with the log's date.

    Tasks without any owned log line appear once with empty ``date`` and ``log``.
    """

    date: str
