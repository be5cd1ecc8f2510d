"""Log record model and wire-format helpers."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

# Every record lives in one logical stream. This caps write throughput and
# query parallelism to a single shard; fine at the "last 100 entries" scale.
PARTITION_KEY = "LOGS"

SEVERITIES = ("info", "warning", "error")


def now_iso(time_func=None) -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = (time_func or (lambda: datetime.now(timezone.utc)))()
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    """Parse a ``dateTime`` value; naive results are treated as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class LogRecord:
    log_partition: str
    date_time: str
    id: str
    severity: str
    message: str

    def to_dict(self) -> dict:
        """Persisted/wire shape of the record."""
        return {
            "logPartition": self.log_partition,
            "dateTime": self.date_time,
            "id": self.id,
            "severity": self.severity,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "LogRecord":
        return cls(
            log_partition=d["logPartition"],
            date_time=d["dateTime"],
            id=d["id"],
            severity=d["severity"],
            message=d["message"],
        )


def create_log_record(severity: str, message: str, time_func=None) -> LogRecord:
    """Factory that stamps a new record with a UUID v4 and the current time."""
    return LogRecord(
        log_partition=PARTITION_KEY,
        date_time=now_iso(time_func),
        id=str(uuid.uuid4()),
        severity=severity,
        message=message,
    )
