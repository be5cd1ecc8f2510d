import threading
from collections import defaultdict

import jsonschema

from log_service.models import SEVERITIES

MISSING_FIELDS = "Missing required fields: severity and message are required"
INVALID_SEVERITY = f"Invalid severity. Must be one of: {', '.join(SEVERITIES)}"
NOT_AN_OBJECT = "Request body must be a JSON object"
MESSAGE_NOT_STRING = "Message must be a string"

# Lower number wins when several rules fail at once.
_PRIORITY = {
    NOT_AN_OBJECT: 0,
    MISSING_FIELDS: 1,
    INVALID_SEVERITY: 2,
    MESSAGE_NOT_STRING: 3,
}


def build_schema(max_message_length):
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": ["severity", "message"],
        "properties": {
            "severity": {"type": "string", "minLength": 1, "enum": list(SEVERITIES)},
            "message": {"type": "string", "minLength": 1, "maxLength": max_message_length},
        },
    }


class IngestValidator:
    """Validates ingest request bodies against a JSON schema.

    Schema errors are collapsed into a single client-facing message, checked
    in order: body shape, missing fields, severity, message type, message length.
    """

    def __init__(self, max_message_length=10000):
        self._max_message_length = max_message_length
        self._validator = jsonschema.Draft202012Validator(build_schema(max_message_length))
        self._too_long = f"Message exceeds maximum length of {max_message_length} characters"
        self._stats_lock = threading.Lock()
        self._stats = {
            "total": 0,
            "valid": 0,
            "invalid": 0,
            "error_types": defaultdict(int),
        }

    def _classify(self, error):
        field = error.absolute_path[0] if error.absolute_path else None
        if field is None:
            return MISSING_FIELDS if error.validator == "required" else NOT_AN_OBJECT
        # Falsy values (null, "", 0, false) count as absent.
        if error.validator == "minLength" or (error.validator == "type" and not error.instance):
            return MISSING_FIELDS
        if field == "severity":
            return INVALID_SEVERITY
        if error.validator == "maxLength":
            return self._too_long
        return MESSAGE_NOT_STRING

    def validate(self, body):
        """Validate a request body.

        Returns:
            tuple: (is_valid: bool, error: str | None)
        """
        errors = list(self._validator.iter_errors(body))

        with self._stats_lock:
            self._stats["total"] += 1
            if not errors:
                self._stats["valid"] += 1
            else:
                self._stats["invalid"] += 1
                for error in errors:
                    self._stats["error_types"][error.validator] += 1

        if not errors:
            return True, None

        messages = [self._classify(error) for error in errors]
        return False, min(messages, key=lambda m: _PRIORITY.get(m, len(_PRIORITY)))

    def get_stats(self):
        """Return a copy of the stats dict."""
        with self._stats_lock:
            stats = dict(self._stats)
            stats["error_types"] = dict(stats["error_types"])
        return stats

