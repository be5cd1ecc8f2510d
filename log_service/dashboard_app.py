"""Flask web dashboard backed by a DashboardClient."""

import os

from flask import Flask, jsonify, redirect, render_template, request, url_for

from log_service.dashboard import FILTERS, DashboardClient
from log_service.formatting import format_date_time, format_time_ago, severity_badge_color, severity_color

_TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")


def create_dashboard_app(dashboard: DashboardClient) -> Flask:
    app = Flask(__name__, template_folder=_TEMPLATE_DIR)
    app.config["dashboard"] = dashboard

    app.add_template_filter(format_time_ago, "time_ago")
    app.add_template_filter(format_date_time, "date_time")
    app.add_template_filter(severity_color, "severity_color")
    app.add_template_filter(severity_badge_color, "badge_color")

    def _apply_filter():
        severity = request.args.get("severity")
        if severity in FILTERS:
            dashboard.set_filter(severity)

    @app.route("/")
    def index():
        _apply_filter()
        return render_template("dashboard.html", view=dashboard.snapshot(), filters=FILTERS)

    @app.route("/api/state")
    def state():
        _apply_filter()
        return jsonify(dashboard.snapshot())

    @app.route("/refresh", methods=["POST"])
    def refresh():
        dashboard.refresh()
        return redirect(url_for("index"))

    @app.route("/auto-refresh", methods=["POST"])
    def auto_refresh():
        dashboard.toggle_auto_refresh()
        return redirect(url_for("index"))

    @app.route("/submit", methods=["POST"])
    def submit():
        dashboard.submit(request.form.get("severity", ""), request.form.get("message", ""))
        return redirect(url_for("index"))

    @app.route("/health")
    def health():
        return jsonify(status="ok", state=dashboard.state)

    return app


def run_dashboard(app: Flask, host: str, port: int):
    app.run(host=host, port=port, use_reloader=False)
