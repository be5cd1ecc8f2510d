"""HTTP client for the ingest and query endpoints."""

import logging

import requests
from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from log_service.errors import ConfigurationError, ServiceError
from log_service.models import parse_iso

logger = logging.getLogger(__name__)

LOGS_RESPONSE_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["logs"],
    "properties": {
        "logs": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["dateTime", "severity"],
                "properties": {
                    "dateTime": {"type": "string"},
                    "severity": {"type": "string"},
                },
            },
        },
    },
}

_logs_response_validator = Draft202012Validator(LOGS_RESPONSE_SCHEMA)


def check_logs_payload(payload) -> dict:
    """Reject a query response the dashboard could not derive views from."""
    error = best_match(_logs_response_validator.iter_errors(payload))
    if error is not None:
        where = "/".join(str(p) for p in error.absolute_path) or "response"
        raise ServiceError(f"Malformed logs response at {where}: {error.message}")
    for index, log in enumerate(payload["logs"]):
        try:
            parse_iso(log["dateTime"])
        except ValueError:
            raise ServiceError(f"Malformed logs response at logs/{index}/dateTime: {log['dateTime']!r}") from None
    return payload


class LogServiceClient:
    def __init__(self, ingest_url: str, query_url: str, timeout: float = 10.0, session=None):
        self._ingest_url = ingest_url
        self._query_url = query_url
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "LogServiceClient":
        return cls(config.ingest_url, config.query_url, timeout=config.request_timeout_seconds)

    def fetch_logs(self) -> dict:
        """GET the recent window. Returns ``{"count": int, "logs": [...]}``."""
        if not self._query_url:
            raise ConfigurationError("QUERY_URL is not configured")

        logger.debug("Fetching logs from %s", self._query_url)
        try:
            resp = self._session.get(
                self._query_url, timeout=self._timeout, headers={"Cache-Control": "no-store"}
            )
        except requests.RequestException as e:
            raise ServiceError(f"Failed to fetch logs: {e}") from e

        if not resp.ok:
            logger.error("Fetch logs error: %s", resp.text)
            raise ServiceError(f"Failed to fetch logs: {resp.status_code} {resp.reason}", resp.status_code)
        try:
            payload = resp.json()
        except ValueError as e:
            raise ServiceError(f"Failed to fetch logs: invalid JSON response ({e})", resp.status_code) from e
        return check_logs_payload(payload)

    def submit_log(self, severity: str, message: str) -> dict:
        """POST one entry. Returns ``{"success": True, "id": ..., "dateTime": ...}``."""
        if not self._ingest_url:
            raise ConfigurationError("INGEST_URL is not configured")

        logger.debug("Submitting %s log to %s", severity, self._ingest_url)
        try:
            resp = self._session.post(
                self._ingest_url,
                json={"severity": severity, "message": message},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ServiceError(f"Failed to submit log: {e}") from e

        if not resp.ok:
            logger.error("Submit log error: %s", resp.text)
            try:
                payload = resp.json()
                error = payload.get("error") if isinstance(payload, dict) else resp.text
            except ValueError:
                error = resp.text
            raise ServiceError(
                error or f"Failed to submit log: {resp.status_code} {resp.reason}", resp.status_code
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ServiceError(f"Failed to submit log: invalid JSON response ({e})", resp.status_code) from e

    def close(self):
        self._session.close()
