"""Classification of sync failures by their error text."""

from enum import Enum


class SyncFailure(str, Enum):
    """How a failed sync is handled."""

    CONFLICT = "conflict"
    NETWORK = "network"
    TOOL_MISSING = "tool_missing"
    OTHER = "other"


# Checked in order, first match wins
FAILURE_MARKERS: list[tuple[SyncFailure, tuple[str, ...]]] = [
    (SyncFailure.CONFLICT, ("CONFLICT", "could not apply", "Failed to merge")),
    (SyncFailure.NETWORK, ("Could not resolve host", "unable to access")),
    (SyncFailure.TOOL_MISSING, ("git: command not found", "command not found")),
]


def error_text(error: BaseException) -> str:
    """Combine an error's message and captured stderr."""
    stderr = getattr(error, "stderr", None) or ""
    return f"{error}\n{stderr}"


def classify_error_text(text: str) -> SyncFailure:
    """Classify combined error/stderr text.

    Args:
        text: Error message and stderr.

    Returns:
        The first matching failure kind, or OTHER.
    """
    for failure, markers in FAILURE_MARKERS:
        if any(marker in text for marker in markers):
            return failure
    return SyncFailure.OTHER


def classify_error(error: BaseException) -> SyncFailure:
    """Classify an exception raised during sync."""
    return classify_error_text(error_text(error))
