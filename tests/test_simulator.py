from unittest.mock import MagicMock

from log_service.errors import ServiceError
from log_service.models import SEVERITIES
from log_service.simulator import MESSAGES, generate_batch, generate_entry, seed


class TestGenerate:
    def test_entry_is_valid_pair(self):
        for _ in range(50):
            severity, message = generate_entry()
            assert severity in SEVERITIES
            assert message in MESSAGES[severity]

    def test_fixed_severity(self):
        assert generate_entry(severity="error")[0] == "error"

    def test_batch_size(self):
        assert len(generate_batch(count=25)) == 25


class TestSeed:
    def test_submits_count_entries(self):
        client = MagicMock()
        assert seed(client, count=5) == 5
        assert client.submit_log.call_count == 5

    def test_rejections_not_counted(self):
        client = MagicMock()
        client.submit_log.side_effect = [None, ServiceError("boom"), None]
        assert seed(client, count=3) == 2
