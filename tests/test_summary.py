"""Tests for task grouping and the daily report."""

from datetime import datetime
from pathlib import Path

import pytest

from taski.tasks.summary import (
    NO_DATE_LABEL,
    build_date_groups,
    collect_by_date,
    collect_by_tag,
    local_date_string,
    render_daily_summary,
)

TODAY = "2026-02-01"


@pytest.fixture
def notes(tmp_path: Path) -> list[Path]:
    """Two task files covering today, past dates and undated tasks."""
    work = tmp_path / "work.md"
    work.write_text(
        "\n".join(
            [
                "# Work",
                "- [x] Ship release #release",
                f"    - {TODAY}: tagged v1.2",
                "- [ ] Write changelog #release #docs",
                f"    - {TODAY}: drafted",
                "    - 2026-01-30: started",
                "- [x] Old done task",
                "    - 2026-01-29: finished",
                "- [ ] Someday",
            ]
        ),
        encoding="utf-8",
    )
    home = tmp_path / "home.md"
    home.write_text(
        "\n".join(
            [
                "- [ ] Fix bike #errand",
                "    - 2026-01-30: bought parts",
                "- [x] Undated but done",
            ]
        ),
        encoding="utf-8",
    )
    return [work, home]


class TestLocalDate:
    """Test local date formatting."""

    def test_zero_padded(self):
        """Test month and day are zero-padded."""
        assert local_date_string(datetime(2026, 3, 4, 23, 59)) == "2026-03-04"


class TestCollectByDate:
    """Test grouping by date."""

    def test_groups_per_date_and_file(self, notes: list[Path]):
        """Test one group per (date, file)."""
        date_map = collect_by_date(notes)
        assert set(date_map) == {TODAY, "2026-01-30", "2026-01-29", ""}
        assert [g.file_name for g in date_map["2026-01-30"]] == ["work.md", "home.md"]
        assert [t.text for t in date_map[""][0].tasks] == ["Someday"]


class TestBuildDateGroups:
    """Test ordering and visibility of date groups."""

    def test_order_and_filtering(self, notes: list[Path]):
        """Test today first, then dates newest first, then undated."""
        groups = build_date_groups(collect_by_date(notes), TODAY)

        assert [g.date for g in groups] == [TODAY, "2026-01-30", ""]
        assert groups[0].is_today
        assert groups[0].label == f"Today ({TODAY})"
        assert groups[-1].label == NO_DATE_LABEL

    def test_today_progress(self, notes: list[Path]):
        """Test today's completed/total counts include completed tasks."""
        today = build_date_groups(collect_by_date(notes), TODAY)[0]
        assert (today.completed, today.total) == (1, 2)

    def test_past_dates_hide_completed(self, notes: list[Path]):
        """Test a date with only completed tasks is hidden."""
        groups = build_date_groups(collect_by_date(notes), TODAY)
        assert "2026-01-29" not in [g.date for g in groups]

        undated = groups[-1]
        tasks = [t.text for f in undated.files for t in f.tasks]
        assert tasks == ["Someday"]

    def test_sorted_tasks_incomplete_first(self, notes: list[Path]):
        """Test incomplete tasks sort before completed ones."""
        today = build_date_groups(collect_by_date(notes), TODAY)[0]
        tasks = today.files[0].sorted_tasks()
        assert [t.completed for t in tasks] == [False, True]

    def test_no_today_group_without_logs(self, notes: list[Path]):
        """Test there is no today group when nothing was logged today."""
        groups = build_date_groups(collect_by_date(notes), "2030-01-01")
        assert all(not g.is_today for g in groups)


class TestCollectByTag:
    """Test grouping by tag."""

    def test_unique_tasks_per_tag(self, notes: list[Path]):
        """Test each task is counted once per tag despite several logs."""
        tag_map = collect_by_tag(notes)
        assert set(tag_map) == {"release", "docs", "errand"}

        release = tag_map["release"]
        assert len(release) == 1
        assert [t.text for t in release[0].tasks] == [
            "Ship release #release",
            "Write changelog #release #docs",
        ]
        assert tag_map["errand"][0].file_name == "home.md"


class TestRenderDailySummary:
    """Test the Markdown daily report."""

    def test_report_lists_today(self, notes: list[Path]):
        """Test today's tasks and logs are rendered per file."""
        report = render_daily_summary(notes, TODAY)

        assert report.startswith(f"# Today's tasks ({TODAY})")
        assert "## work.md" in report
        assert "- [x] [Ship release #release]" in report
        assert "#L1)" in report
        assert "    - 📝 drafted" in report
        assert "home.md" not in report

    def test_report_hint_when_empty(self, notes: list[Path]):
        """Test the hint shown when nothing was logged."""
        report = render_daily_summary(notes, "2030-01-01")
        assert "No tasks with a log line for 2030-01-01" in report
        assert '"- 2030-01-01: note"' in report
