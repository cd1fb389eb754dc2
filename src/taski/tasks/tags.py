"""Hashtag extraction from task labels."""

import re

TAG_PATTERN = re.compile(r"#([^\s#]+)")


def extract_tags(text: str) -> list[str]:
    """Extract ``#tag`` tokens from text, in order and without the ``#``."""
    return TAG_PATTERN.findall(text)
