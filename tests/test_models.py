import uuid
from datetime import datetime, timezone

from log_service.models import PARTITION_KEY, LogRecord, create_log_record, now_iso, parse_iso


class TestTimestamps:
    def test_now_iso_format(self):
        clock = lambda: datetime(2024, 1, 15, 10, 30, 5, 123456, tzinfo=timezone.utc)  # noqa: E731
        assert now_iso(clock) == "2024-01-15T10:30:05.123Z"

    def test_parse_z_suffix(self):
        assert parse_iso("2024-01-15T10:30:05.123Z") == datetime(2024, 1, 15, 10, 30, 5, 123000, tzinfo=timezone.utc)

    def test_parse_naive_as_utc(self):
        assert parse_iso("2024-01-15T10:30:05").tzinfo == timezone.utc


class TestLogRecord:
    def test_create_log_record(self):
        record = create_log_record("warning", "slow query")
        assert record.log_partition == PARTITION_KEY
        assert record.severity == "warning"
        assert uuid.UUID(record.id).version == 4
        assert record.date_time.endswith("Z")

    def test_wire_shape(self):
        record = LogRecord("LOGS", "2024-01-15T10:30:05.123Z", "abc", "info", "hi")
        assert record.to_dict() == {
            "logPartition": "LOGS",
            "dateTime": "2024-01-15T10:30:05.123Z",
            "id": "abc",
            "severity": "info",
            "message": "hi",
        }
        assert LogRecord.from_dict(record.to_dict()) == record
