"""Query service — the most recent records of the log stream."""

import logging

from log_service.errors import InternalError, StoreUnavailable
from log_service.models import PARTITION_KEY

logger = logging.getLogger(__name__)

RECENT_LIMIT = 100


class QueryService:
    def __init__(self, store, limit=RECENT_LIMIT):
        self._store = store
        self._limit = limit

    def recent(self):
        """Newest-first records, at most ``limit``. No side effects."""
        try:
            records = self._store.query_recent(PARTITION_KEY, self._limit)
        except StoreUnavailable as e:
            raise InternalError(str(e)) from e
        logger.info("Retrieved %d log entries", len(records))
        return records
