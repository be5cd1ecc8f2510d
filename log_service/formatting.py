"""Display helpers used as Jinja filters by the dashboard."""

from datetime import datetime, timezone

from log_service.models import parse_iso

_SEVERITY_CLASSES = {
    "error": "text-red-600 bg-red-50 border-red-200",
    "warning": "text-yellow-600 bg-yellow-50 border-yellow-200",
    "info": "text-blue-600 bg-blue-50 border-blue-200",
}
_BADGE_CLASSES = {
    "error": "bg-red-100 text-red-800",
    "warning": "bg-yellow-100 text-yellow-800",
    "info": "bg-blue-100 text-blue-800",
}


def format_time_ago(date_string: str, now: datetime | None = None) -> str:
    """Relative age such as ``42s ago``, ``5m ago``, ``3h ago`` or ``2d ago``."""
    now = now or datetime.now(timezone.utc)
    seconds = int((now - parse_iso(date_string)).total_seconds())

    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def format_date_time(date_string: str) -> str:
    """Short UTC date-time, e.g. ``Jan 15, 10:30:00 AM``."""
    dt = parse_iso(date_string).astimezone(timezone.utc)
    return f"{dt.strftime('%b')} {dt.day}, {dt.strftime('%I:%M:%S %p')}"


def severity_color(severity: str) -> str:
    return _SEVERITY_CLASSES.get(severity, "text-gray-600 bg-gray-50 border-gray-200")


def severity_badge_color(severity: str) -> str:
    return _BADGE_CLASSES.get(severity, "bg-gray-100 text-gray-800")
