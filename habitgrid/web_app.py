# web_app.py
import logging
from datetime import date

from flask import Flask, current_app, jsonify, request

from . import __version__
from .config import Settings, load_settings
from .data_file import DataFile
from .habit_manager import HabitManager
from .models import HabitNotFoundError, SchemaError, from_document, parse_date_key, parse_habits, to_document
from .stats_bp import stats_bp

logger = logging.getLogger(__name__)


# ---------------- Helpers ---------------- #
def get_store() -> DataFile:
    return DataFile(current_app.config["DATA_FILE"])


def get_manager() -> HabitManager:
    """Fresh manager over the data file; every request reloads the file."""
    return HabitManager(get_store(), clock=current_app.config["CLOCK"])


def _error(message, status):
    return jsonify({"error": message}), status


def _json_object() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _parse_score(value):
    if value is None or value == "":
        return None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def create_app(settings: Settings = None) -> Flask:
    settings = settings or load_settings()
    app = Flask(__name__)
    app.config.update(
        DATA_FILE=str(settings.data_file),
        YEAR_START_MONTH=settings.year_start_month,
        CLOCK=date.today,
    )
    app.json.sort_keys = False
    app.register_blueprint(stats_bp)
    register_routes(app)
    return app


def register_routes(app: Flask):

    @app.after_request
    def add_cors_headers(response):
        if request.path.startswith("/api/"):
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    @app.errorhandler(OSError)
    def handle_storage_error(e):
        logger.error("Storage error: %s", e)
        return _error(str(e), 500)

    @app.route("/")
    def index():
        return jsonify({
            "name": "habitgrid",
            "version": __version__,
            "endpoints": sorted(str(rule) for rule in app.url_map.iter_rules() if rule.endpoint != "static"),
        })

    # ---------------- Full document ---------------- #
    @app.route("/api/data", methods=["GET"])
    def get_data():
        return jsonify(to_document(get_store().load()))

    @app.route("/api/data", methods=["POST"])
    def save_data():
        payload = request.get_json(silent=True)
        if payload is None:
            return _error("Request body must be JSON", 400)
        try:
            data = from_document(payload)
        except SchemaError as e:
            return _error(str(e), 400)
        get_store().save(data)
        logger.info("Saved document: %d habits, %d days", len(data.habits), len(data.entries))
        return jsonify({"success": True})

    # ---------------- Habits ---------------- #
    @app.route("/api/habits", methods=["GET"])
    def get_habits():
        return jsonify([h.to_dict() for h in get_store().load().habits])

    @app.route("/api/habits", methods=["POST"])
    def save_habits():
        payload = request.get_json(silent=True)
        try:
            habits = parse_habits(payload)
        except SchemaError as e:
            return _error(str(e), 400)
        get_manager().replace_habits(habits)
        return jsonify({"success": True})

    @app.route("/api/habits/<int:habit_id>/toggle", methods=["POST"])
    def toggle_habit(habit_id):
        payload = _json_object()
        key = payload.get("dateKey")
        try:
            parse_date_key(key)
        except ValueError as e:
            return _error(str(e), 400)

        manager = get_manager()
        try:
            changed = manager.toggle_habit(habit_id, key)
        except HabitNotFoundError:
            return _error("Habit not found", 404)
        return jsonify({
            "success": True,
            "changed": changed,
            "completed": manager.is_habit_completed(key, habit_id),
        })

    # ---------------- Mood / motivation ---------------- #
    @app.route("/api/mental-state", methods=["POST"])
    def update_mental_state():
        payload = _json_object()
        key = payload.get("dateKey")
        kind = payload.get("type")
        try:
            parse_date_key(key)
            changed = get_manager().set_mental_state(key, kind, _parse_score(payload.get("value")))
        except ValueError as e:
            return _error(str(e), 400)
        return jsonify({"success": True, "changed": changed})



if __name__ == "__main__":
    _settings = load_settings()
    create_app(_settings).run(host=_settings.host, port=_settings.port, debug=_settings.debug)
