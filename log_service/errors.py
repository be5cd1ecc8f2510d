"""Error taxonomy shared by the services, the store, and the dashboard client."""


class LogServiceError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(LogServiceError):
    """Client-caused input problem. Maps to HTTP 400."""


class InternalError(LogServiceError):
    """Persistence or infrastructure failure. Maps to HTTP 500."""


class ConfigurationError(LogServiceError):
    """Required configuration is absent or unusable."""


class StoreUnavailable(LogServiceError):
    """The backing store could not complete a read or write."""


class ServiceError(LogServiceError):
    """A remote ingest/query call failed (transport error or non-2xx)."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
