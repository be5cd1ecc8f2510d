"""Ingest service — validates one log entry and writes it to the store."""

import logging

from log_service.errors import InternalError, StoreUnavailable, ValidationError
from log_service.models import create_log_record
from log_service.validator import IngestValidator

logger = logging.getLogger(__name__)


class IngestService:
    def __init__(self, store, validator=None, time_func=None):
        self._store = store
        self._validator = validator or IngestValidator()
        self._time_func = time_func

    @property
    def validator(self) -> IngestValidator:
        return self._validator

    def submit_body(self, body) -> tuple[str, str]:
        """Validate a raw request body and store it. Returns (id, dateTime)."""
        is_valid, error = self._validator.validate(body)
        if not is_valid:
            raise ValidationError(error)

        record = create_log_record(body["severity"], body["message"], self._time_func)
        try:
            self._store.put(record)
        except StoreUnavailable as e:
            raise InternalError(str(e)) from e

        logger.info("Stored log entry %s (%s)", record.id, record.severity)
        return record.id, record.date_time

    def submit(self, severity, message) -> tuple[str, str]:
        body = {}
        if severity is not None:
            body["severity"] = severity
        if message is not None:
            body["message"] = message
        return self.submit_body(body)
