import logging

from flask import Flask, request, jsonify

from log_service.config import load_service_config
from log_service.errors import InternalError, ValidationError
from log_service.ingest import IngestService
from log_service.query import QueryService
from log_service.store import create_store
from log_service.validator import IngestValidator

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _internal_error(exc):
    return jsonify({"error": "Internal server error", "message": str(exc)}), 500


def create_app(config=None, store=None, time_func=None):
    """Flask application factory for the ingest and query endpoints."""
    app = Flask(__name__)

    if config is None:
        config = load_service_config()
    config.validate()

    if store is None:
        store = create_store(config)
    validator = IngestValidator(max_message_length=config.max_message_length)
    ingest = IngestService(store, validator=validator, time_func=time_func)
    query = QueryService(store, limit=config.recent_limit)

    # Store components on app for access in tests
    app.config["components"] = {
        "config": config,
        "store": store,
        "validator": validator,
        "ingest": ingest,
        "query": query,
    }

    @app.after_request
    def add_cors_headers(response):
        if request.path.startswith("/api/"):
            response.headers.update(CORS_HEADERS)
        return response

    # --- Routes ---

    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "table": config.table_name,
            "backend": config.store_backend,
            "validation": validator.get_stats(),
        })

    @app.route("/api/logs", methods=["POST"])
    def ingest_log():
        body = request.get_json(force=True, silent=True)
        logger.debug("Received ingest body: %r", body)

        try:
            log_id, date_time = ingest.submit_body(body)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except InternalError as e:
            logger.exception("Error processing log entry")
            return _internal_error(e)

        return jsonify({"success": True, "id": log_id, "dateTime": date_time}), 201

    @app.route("/api/logs", methods=["GET"])
    def recent_logs():
        try:
            records = query.recent()
        except InternalError as e:
            logger.exception("Error retrieving log entries")
            return _internal_error(e)

        return jsonify({"count": len(records), "logs": [r.to_dict() for r in records]})

    return app


# For gunicorn: `gunicorn 'log_service.api:create_app()'`
