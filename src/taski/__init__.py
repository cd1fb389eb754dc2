"""taski: dated task logs in Markdown checklists, with git auto-sync."""

__version__ = "0.1.0"
