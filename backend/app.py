import threading
from flask import Flask, request, jsonify
from config import HOST, PORT, LoggerConfig
from database.database import build_store
from extractor.source_filter import SourceFilter
from log_setup import get_logger
from notification_handler import NotificationHandler

logger = get_logger(__name__)


class ListenerState:
    """Whether posted notifications are currently being recorded."""

    def __init__(self, enabled=True):
        self._enabled = enabled
        self._lock = threading.Lock()

    @property
    def enabled(self):
        with self._lock:
            return self._enabled

    def set_enabled(self, enabled):
        with self._lock:
            self._enabled = enabled


def create_app(config=None):
    config = config or LoggerConfig.from_env()

    app = Flask(__name__)
    store = build_store(config)
    handler = NotificationHandler(SourceFilter(config.allowed_sources), store)
    state = ListenerState()

    app.extensions["notification_store"] = store
    app.extensions["listener_state"] = state

    logger.info(f"Notification listener created, logging to {config.log_path}")

    @app.route("/notifications", methods=["POST"])
    def post_notification():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "No JSON object received"}), 400

        if not state.enabled:
            return jsonify({"error": "Notification listener is disabled"}), 503

        notification = handler.handle_notification(data)
        return jsonify({"status": "stored" if notification else "ignored"}), 200

    @app.route("/notifications", methods=["GET"])
    def list_notifications():
        return jsonify(store.read_all())

    @app.route("/service/status", methods=["GET"])
    def service_status():
        return jsonify({"enabled": state.enabled})

    @app.route("/service/enable", methods=["POST"])
    def enable_service():
        state.set_enabled(True)
        logger.info("Notification listener enabled")
        return jsonify({"enabled": True})

    @app.route("/service/disable", methods=["POST"])
    def disable_service():
        state.set_enabled(False)
        logger.info("Notification listener disabled")
        return jsonify({"enabled": False})

    return app


if __name__ == "__main__":
    create_app().run(host=HOST, port=PORT, debug=True)
