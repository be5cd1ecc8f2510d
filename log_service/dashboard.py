"""Dashboard client — polls the query endpoint and derives the dashboard views.

State machine: ``loading`` until the first successful fetch, then ``ready``.
A failed fetch is logged and leaves the state and the last fetched records in
place (stale-but-available). Every fetch takes a sequence number, and only a
response newer than the last applied one is applied, so a slow fetch that
resolves after a later one cannot roll the view back.
"""

import logging
import threading
from collections import Counter
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from log_service.errors import ServiceError
from log_service.models import SEVERITIES, parse_iso

logger = logging.getLogger(__name__)

STATE_LOADING = "loading"
STATE_READY = "ready"

FILTERS = ("all",) + SEVERITIES
TIMELINE_BUCKETS = 12
DEFAULT_FORM = {"severity": "info", "message": ""}
REFRESH_JOB_ID = "refresh"


def compute_stats(logs) -> dict:
    counts = Counter(log.get("severity") for log in logs)
    return {
        "total": len(logs),
        "info": counts["info"],
        "warnings": counts["warning"],
        "errors": counts["error"],
    }


def filter_logs(logs, severity="all") -> list:
    if severity == "all":
        return list(logs)
    return [log for log in logs if log.get("severity") == severity]


def filter_counts(logs) -> dict:
    counts = Counter(log.get("severity") for log in logs)
    result = {"all": len(logs)}
    result.update({severity: counts[severity] for severity in SEVERITIES})
    return result


def severity_distribution(logs) -> list[dict]:
    """Pie-chart slices, zero-count severities omitted."""
    counts = Counter(log.get("severity") for log in logs)
    return [
        {"name": severity.capitalize(), "severity": severity, "value": counts[severity]}
        for severity in SEVERITIES
        if counts[severity] > 0
    ]


def hourly_timeline(logs, buckets=TIMELINE_BUCKETS) -> list[dict]:
    """Per-hour severity counts, oldest first, limited to the last *buckets* hours present."""
    grouped: dict[datetime, Counter] = {}
    for log in logs:
        hour = parse_iso(log["dateTime"]).astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)
        grouped.setdefault(hour, Counter())[log.get("severity")] += 1

    timeline = []
    for hour in sorted(grouped)[-buckets:]:
        counts = grouped[hour]
        entry = {"time": hour.strftime("%H:00"), "hour": hour.isoformat()}
        entry.update({severity: counts[severity] for severity in SEVERITIES})
        entry["total"] = sum(counts.values())
        timeline.append(entry)
    return timeline


class DashboardClient:
    def __init__(self, api, refresh_interval=5, notice_seconds=5, auto_refresh=True,
                 time_func=None, scheduler=None):
        self._api = api
        self._refresh_interval = refresh_interval
        self._notice_ttl = timedelta(seconds=notice_seconds)
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._scheduler = scheduler
        self._lock = threading.Lock()

        self._state = STATE_LOADING
        self._logs: list[dict] = []
        self._stats = compute_stats([])
        self._last_update = None
        self._last_error = None
        self._auto_refresh = auto_refresh
        self._filter = "all"
        self._form = dict(DEFAULT_FORM)
        self._notices = {"success": None, "error": None}

        self._issued_seq = 0
        self._applied_seq = 0

    @classmethod
    def from_config(cls, api, config) -> "DashboardClient":
        return cls(
            api,
            refresh_interval=config.refresh_interval_seconds,
            notice_seconds=config.notice_seconds,
            auto_refresh=config.auto_refresh,
        )

    # --- Lifecycle ---

    def start(self):
        """Mount: initial fetch, then the auto-refresh job."""
        self.refresh()
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self.refresh, "interval", seconds=self._refresh_interval, id=REFRESH_JOB_ID
        )
        if not self._auto_refresh:
            self._scheduler.pause_job(REFRESH_JOB_ID)
        self._scheduler.start()
        logger.info("Dashboard polling every %ds (auto-refresh %s)",
                    self._refresh_interval, "on" if self._auto_refresh else "off")

    def stop(self):
        """Stop scheduling further fetches. In-flight fetches are left to finish."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    # --- Fetching ---

    def refresh(self) -> bool:
        """Fetch and derive. Returns True if this response was applied."""
        with self._lock:
            self._issued_seq += 1
            seq = self._issued_seq

        try:
            data = self._api.fetch_logs()
        except ServiceError as e:
            logger.warning("Failed to load logs: %s", e)
            with self._lock:
                self._last_error = str(e)
            return False

        return self._apply(seq, data.get("logs", []))

    def _apply(self, seq, logs) -> bool:
        with self._lock:
            if seq <= self._applied_seq:
                logger.debug("Discarding stale response #%d (applied #%d)", seq, self._applied_seq)
                return False
            self._applied_seq = seq
            self._logs = list(logs)
            self._stats = compute_stats(self._logs)
            self._last_update = self._time_func()
            self._last_error = None
            self._state = STATE_READY
            return True

    # --- UI state ---

    def set_auto_refresh(self, enabled: bool):
        with self._lock:
            self._auto_refresh = enabled
        if self._scheduler is not None and self._scheduler.get_job(REFRESH_JOB_ID) is not None:
            if enabled:
                self._scheduler.resume_job(REFRESH_JOB_ID)
            else:
                self._scheduler.pause_job(REFRESH_JOB_ID)

    def toggle_auto_refresh(self) -> bool:
        enabled = not self.auto_refresh
        self.set_auto_refresh(enabled)
        return enabled

    def set_filter(self, severity: str):
        if severity not in FILTERS:
            raise ValueError(f"Unknown filter {severity!r}; expected one of: {', '.join(FILTERS)}")
        with self._lock:
            self._filter = severity

    # --- Submission ---

    def _raise_notice(self, kind, text):
        self._notices[kind] = (text, self._time_func() + self._notice_ttl)

    def submit(self, severity, message):
        """Submit a new entry. Returns the new id, or None on failure."""
        with self._lock:
            self._notices = {"success": None, "error": None}
            if not severity or not message:
                self._raise_notice("error", "Severity and message are required")
                return None
            self._form = {"severity": severity, "message": message}

        try:
            result = self._api.submit_log(severity, message)
        except ServiceError as e:
            logger.warning("Submit log error: %s", e)
            with self._lock:
                self._raise_notice("error", str(e) or "Failed to submit log")
            return None

        with self._lock:
            self._form = dict(DEFAULT_FORM)
            self._raise_notice("success", f"Log submitted successfully! ID: {result['id']}")
        self.refresh()
        return result["id"]

    def notices(self) -> dict:
        """Active notices; each disappears once its display time has passed."""
        now = self._time_func()
        with self._lock:
            for kind, notice in self._notices.items():
                if notice is not None and now >= notice[1]:
                    self._notices[kind] = None
            return {kind: notice[0] if notice else None for kind, notice in self._notices.items()}

    # --- Views ---

    @property
    def state(self) -> str:
        return self._state

    @property
    def auto_refresh(self) -> bool:
        return self._auto_refresh

    @property
    def stats(self) -> dict:
        with self._lock:
            return dict(self._stats)

    @property
    def logs(self) -> list[dict]:
        with self._lock:
            return list(self._logs)

    @property
    def last_error(self):
        return self._last_error

    def snapshot(self) -> dict:
        """Everything the dashboard renders, derived from one consistent view of the records."""
        notices = self.notices()
        with self._lock:
            logs = list(self._logs)
            return {
                "state": self._state,
                "last_update": self._last_update.isoformat() if self._last_update else None,
                "last_error": self._last_error,
                "auto_refresh": self._auto_refresh,
                "refresh_interval": self._refresh_interval,
                "filter": self._filter,
                "stats": dict(self._stats),
                "filter_counts": filter_counts(logs),
                "distribution": severity_distribution(logs),
                "timeline": hourly_timeline(logs),
                "logs": filter_logs(logs, self._filter),
                "form": dict(self._form),
                "notices": notices,
            }
