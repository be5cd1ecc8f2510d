import logging
import random

from log_service.errors import ServiceError
from log_service.models import SEVERITIES

logger = logging.getLogger(__name__)

SEVERITY_WEIGHTS = [0.70, 0.20, 0.10]

MESSAGES = {
    "info": ["User logged in", "Request processed", "Health check passed", "Database query executed"],
    "warning": ["High memory usage detected", "Slow query detected", "Rate limit approaching"],
    "error": ["Database connection failed", "Authentication failed", "Timeout exceeded", "Disk full"],
}


def generate_entry(severity=None):
    """Generate a single random (severity, message) pair."""
    if severity is None:
        severity = random.choices(SEVERITIES, weights=SEVERITY_WEIGHTS, k=1)[0]
    return severity, random.choice(MESSAGES[severity])


def generate_batch(count=10, **kwargs):
    """Generate multiple (severity, message) pairs."""
    return [generate_entry(**kwargs) for _ in range(count)]


def seed(client, count=10):
    """Submit *count* random entries through *client*. Returns the number accepted."""
    accepted = 0
    for severity, message in generate_batch(count):
        try:
            client.submit_log(severity, message)
        except ServiceError as e:
            logger.warning("Seed entry rejected: %s", e)
            continue
        accepted += 1
    logger.info("Seeded %d/%d log entries", accepted, count)
    return accepted
