from datetime import datetime, timezone

from log_service.formatting import format_date_time, format_time_ago, severity_badge_color, severity_color

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestFormatTimeAgo:
    def test_seconds(self):
        assert format_time_ago("2024-01-15T11:59:18.000Z", now=NOW) == "42s ago"

    def test_minutes(self):
        assert format_time_ago("2024-01-15T11:55:00.000Z", now=NOW) == "5m ago"

    def test_hours(self):
        assert format_time_ago("2024-01-15T09:00:00.000Z", now=NOW) == "3h ago"

    def test_days(self):
        assert format_time_ago("2024-01-13T12:00:00.000Z", now=NOW) == "2d ago"


class TestFormatDateTime:
    def test_morning(self):
        assert format_date_time("2024-01-15T10:30:05.123Z") == "Jan 15, 10:30:05 AM"

    def test_afternoon_offset_input(self):
        assert format_date_time("2024-03-02T16:04:00+00:00") == "Mar 2, 04:04:00 PM"


class TestSeverityColors:
    def test_known(self):
        assert "red" in severity_color("error")
        assert "yellow" in severity_badge_color("warning")
        assert "blue" in severity_badge_color("info")

    def test_unknown_falls_back_to_gray(self):
        assert "gray" in severity_color("debug")
        assert "gray" in severity_badge_color("debug")
